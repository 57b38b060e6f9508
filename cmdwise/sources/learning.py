#!/usr/bin/env python3
"""
Personal usage learning
Remembers which commands the user runs, at what hour and in which kind of
project, and uses that to boost and suggest completions.
"""

import json
import time
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..exceptions import PersistenceError
from ..logger import get_logger
from .prediction import command_name

log = get_logger("sources.learning")

DATA_FILE = "user_profile.json"
MAX_PREFERENCES = 10
MAX_PATTERNS = 100
MAX_SUGGESTIONS = 10
FAVORITE_CAP = 100
TIME_BOOST = 50
PROJECT_BOOST = 30


def _project_key(context: Any) -> Optional[str]:
    project_type = getattr(context, "project_type", None)
    if project_type is None:
        return None
    return getattr(project_type, "value", str(project_type))


def _hour(context: Any) -> Optional[int]:
    time_context = getattr(context, "time", None)
    return getattr(time_context, "hour", None)


def _remember(items: List[str], value: str, limit: int = MAX_PREFERENCES):
    if value in items:
        return
    items.append(value)
    del items[:-limit]


class LearningEngine:
    """
    User profile built from executed commands.

    The profile holds how often each command was run, the commands used
    at each hour of the day, the commands used per project type and
    recurring command sequences.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_path = Path(data_dir) / DATA_FILE if data_dir else None
        self.favorite_commands: Counter = Counter()
        self.time_preferences: Dict[int, List[str]] = {}
        self.project_preferences: Dict[str, List[str]] = {}
        self.patterns: List[Dict[str, Any]] = []
        self._dirty = False
        self.load()

    def learn_from_selection(self, selected: str, context: Any = None):
        """Count a command the user picked or ran"""
        if not selected:
            return
        self.favorite_commands[selected] += 1

        hour = _hour(context)
        if hour is not None:
            _remember(self.time_preferences.setdefault(int(hour), []), selected)

        project = _project_key(context)
        if project is not None:
            _remember(self.project_preferences.setdefault(project, []), selected)

        self._dirty = True

    def learn_pattern(self, sequence: List[str]):
        if len(sequence) < 2:
            return
        now = int(time.time())
        for pattern in self.patterns:
            if pattern["sequence"] == sequence:
                pattern["frequency"] += 1
                pattern["last_used"] = now
                break
        else:
            self.patterns.append({
                "name": " -> ".join(sequence),
                "sequence": list(sequence),
                "frequency": 1,
                "last_used": now,
            })

        if len(self.patterns) > MAX_PATTERNS:
            self.patterns.sort(key=lambda p: (p["frequency"], p["last_used"]), reverse=True)
            del self.patterns[MAX_PATTERNS:]
        self._dirty = True

    def record_command(self, command: str, context: Any = None):
        name = command_name(command)
        if not name:
            return
        self.learn_from_selection(name, context)
        if command != name:
            self.learn_from_selection(command, context)

        recent = getattr(context, "recent_commands", ())
        if len(recent) >= 2:
            self.learn_pattern([command_name(c) for c in recent[-3:]])

    def score_boost(self, text: str, context: Any = None) -> int:
        boost = min(self.favorite_commands.get(text, 0), FAVORITE_CAP) * 2

        hour = _hour(context)
        if hour is not None and text in self.time_preferences.get(int(hour), []):
            boost += TIME_BOOST

        project = _project_key(context)
        if project is not None and text in self.project_preferences.get(project, []):
            boost += PROJECT_BOOST

        return boost

    def get_personalized_suggestions(self, context: Any = None) -> List[str]:
        suggestions: List[str] = []

        hour = _hour(context)
        if hour is not None:
            suggestions.extend(self.time_preferences.get(int(hour), []))

        project = _project_key(context)
        if project is not None:
            suggestions.extend(self.project_preferences.get(project, []))

        suggestions.extend(name for name, _ in self.favorite_commands.most_common(5))

        unique = []
        for suggestion in suggestions:
            if suggestion not in unique:
                unique.append(suggestion)
        return unique[:MAX_SUGGESTIONS]

    def load(self):
        if self.data_path is None or not self.data_path.exists():
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.favorite_commands = Counter({str(k): int(v) for k, v in data.get("favorite_commands", {}).items()})
            self.time_preferences = {
                int(k): [str(c) for c in v] for k, v in data.get("time_preferences", {}).items()
            }
            self.project_preferences = {
                str(k): [str(c) for c in v] for k, v in data.get("project_preferences", {}).items()
            }
            self.patterns = [p for p in data.get("patterns", []) if isinstance(p, dict) and "sequence" in p]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            log.warning(f"Ignoring unreadable user profile {self.data_path}: {e}")

    def save(self):
        if self.data_path is None or not self._dirty:
            return
        data = {
            "favorite_commands": dict(self.favorite_commands),
            "time_preferences": {str(k): v for k, v in self.time_preferences.items()},
            "project_preferences": self.project_preferences,
            "patterns": self.patterns,
        }
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.data_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise PersistenceError(f"Failed to save user profile: {e}", path=self.data_path, operation="save")
        self._dirty = False


class LearningSource:
    """Commands this user tends to run now or in this kind of project"""

    def __init__(self, engine: LearningEngine):
        self.engine = engine

    def complete(self, request: CompletionRequest) -> List[Completion]:
        word = request.word.lower()
        completions = []
        for i, command in enumerate(self.engine.get_personalized_suggestions(request.context)):
            if word and not command.lower().startswith(word):
                continue
            completions.append(Completion(
                text=command,
                description="frequently used",
                score=85 - i,
                kind=CompletionKind.COMMAND,
            ))
        return completions
