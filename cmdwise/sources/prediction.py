#!/usr/bin/env python3
"""
Command sequence prediction
Learns which command usually follows which, and which commands are used in
which directory.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..exceptions import PersistenceError
from ..logger import get_logger

log = get_logger("sources.prediction")

MAX_FOLLOWERS = 20
MAX_DIRECTORY_COMMANDS = 20
MAX_PREDICTIONS = 10
RECENT_PAIR_WEIGHT = 2
RECORDED_PAIR_WEIGHT = 2
DATA_FILE = "sequences.json"


def command_name(line: str) -> str:
    """First word of a command line"""
    parts = line.split()
    return parts[0] if parts else ""


class SequencePredictor:
    """
    Tracks ``previous -> next`` command-name transitions.

    Each command maps to its followers with a weight, heaviest first.
    Pairs recorded live weigh more than pairs learned from old history.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_path = Path(data_dir) / DATA_FILE if data_dir else None
        self.sequences: Dict[str, List[List[Any]]] = {}
        self.directory_commands: Dict[str, List[str]] = {}
        self.last_command: Optional[str] = None
        self._dirty = False
        self.load()

    def _add_pair(self, first: str, second: str, weight: int):
        followers = self.sequences.setdefault(first, [])
        for entry in followers:
            if entry[0] == second:
                entry[1] += weight
                break
        else:
            followers.append([second, weight])
        followers.sort(key=lambda entry: entry[1], reverse=True)
        del followers[MAX_FOLLOWERS:]
        self._dirty = True

    def learn_from_history(self, chronological: Sequence[str]):
        """Learn transitions from history lines, oldest first"""
        names = [command_name(line) for line in chronological]
        names = [name for name in names if name]
        total = len(names) - 1
        for i in range(total):
            # The ten newest pairs count double
            weight = RECENT_PAIR_WEIGHT if total - i <= 10 else 1
            self._add_pair(names[i], names[i + 1], weight)
        if names:
            self.last_command = names[-1]

    def learn_sequence(self, first: str, second: str):
        first, second = command_name(first), command_name(second)
        if first and second:
            self._add_pair(first, second, RECORDED_PAIR_WEIGHT)

    def record_command_in_context(self, cwd: str, command: str):
        name = command_name(command)
        if not name or not cwd:
            return
        commands = self.directory_commands.setdefault(cwd, [])
        if name in commands:
            commands.remove(name)
        commands.append(name)
        del commands[:-MAX_DIRECTORY_COMMANDS]
        self._dirty = True

    def record_command(self, command: str, context: Any = None):
        if self.last_command:
            self.learn_sequence(self.last_command, command)
        cwd = getattr(context, "cwd", None)
        if cwd:
            self.record_command_in_context(cwd, command)
        self.last_command = command_name(command) or self.last_command

    def predict_next(self, command: str) -> List[str]:
        followers = self.sequences.get(command_name(command), [])
        return [entry[0] for entry in followers[:MAX_PREDICTIONS]]

    def predict_next_filtered(self, command: str, typed: str) -> List[str]:
        predictions = self.predict_next(command)
        if typed:
            typed = typed.lower()
            predictions = [p for p in predictions if p.lower().startswith(typed)]
        return predictions

    def predict_from_context(self, cwd: str, recent: Sequence[str] = ()) -> List[str]:
        predictions = list(self.directory_commands.get(cwd, []))
        if recent:
            predictions.extend(self.predict_next(recent[-1]))
        return sorted(set(predictions))[:MAX_PREDICTIONS]

    def load(self):
        """Load learned data; unreadable data is ignored"""
        if self.data_path is None or not self.data_path.exists():
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self.sequences = {
                str(k): [[str(e[0]), int(e[1])] for e in v]
                for k, v in data.get("sequences", {}).items()
            }
            self.directory_commands = {
                str(k): [str(c) for c in v]
                for k, v in data.get("directory_commands", {}).items()
            }
        except (OSError, ValueError, TypeError, AttributeError, IndexError) as e:
            log.warning(f"Ignoring unreadable prediction data {self.data_path}: {e}")

    def save(self):
        if self.data_path is None or not self._dirty:
            return
        data = {"sequences": self.sequences, "directory_commands": self.directory_commands}
        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.data_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Failed to save prediction data: {e}", path=self.data_path, operation="save")
        self._dirty = False


class PredictionSource:
    """Suggests what usually follows the last executed command"""

    def __init__(self, predictor: SequencePredictor, history=None):
        self.predictor = predictor
        self.history = history

    def _last_command(self, request: CompletionRequest) -> Optional[str]:
        if request.recent_commands:
            return request.recent_commands[-1]
        if self.history is not None:
            return self.history.last_command()
        return self.predictor.last_command

    def complete(self, request: CompletionRequest) -> List[Completion]:
        last = self._last_command(request)
        if not last:
            return []
        previous = command_name(last)
        return [
            Completion(
                text=name,
                description=f"often run after {previous}",
                score=120 - i,
                kind=CompletionKind.COMMAND,
            )
            for i, name in enumerate(self.predictor.predict_next_filtered(last, request.word))
        ]
