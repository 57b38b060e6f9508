#!/usr/bin/env python3
"""
Environment-variable completion for ``export``

Variables are learned from ``export NAME=value`` lines in the shell history.
``PATH`` values are suggested from the ``*_HOME`` variables that are known,
and ``JAVA_HOME``-style assignments are completed with installation
directories found on disk.
"""

import re
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..logger import get_logger

log = get_logger("sources.environment")

EXPORT_PATTERN = re.compile(r"^\s*export\s+([A-Z_][A-Z0-9_]*)\s*=\s*(.*)$")

PATH_SCORE = 100
FOUND_PATH_SCORE = 95
VARIABLE_SCORE = 80
MAX_PATH_SUGGESTIONS = 10

JAVA_ROOTS = ("/usr/lib/jvm", "/opt/jdk", "/opt/java", "/usr/java", "/usr/local/java", "/opt/openjdk")
HADOOP_ROOTS = ("/opt/hadoop", "/usr/local/hadoop")


def parse_export(line: str) -> Optional[Tuple[str, str]]:
    """Return (name, value) for an ``export NAME=value`` line"""
    match = EXPORT_PATTERN.match(line)
    if not match:
        return None
    name, value = match.group(1), match.group(2).strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return name, value


def _has_executable(directory: Path, name: str) -> bool:
    return (directory / "bin" / name).exists()


def find_java_homes(roots: Iterable[str] = JAVA_ROOTS) -> List[str]:
    found = []
    for root in roots:
        base = Path(root)
        try:
            children = sorted(p for p in base.iterdir() if p.is_dir())
        except OSError:
            continue
        for child in children:
            if _has_executable(child, "java"):
                found.append(str(child))
    return found


def find_hadoop_homes(roots: Iterable[str] = HADOOP_ROOTS, search_dir: str = "/opt") -> List[str]:
    found = []
    for root in roots:
        base = Path(root)
        if base.is_dir() and _has_executable(base, "hadoop"):
            found.append(str(base))
    try:
        candidates = sorted(Path(search_dir).iterdir())
    except OSError:
        candidates = []
    for candidate in candidates:
        if candidate.name.startswith("hadoop") and candidate.is_dir() and _has_executable(candidate, "hadoop"):
            if str(candidate) not in found:
                found.append(str(candidate))
    return found


def find_install_paths(var_name: str) -> List[str]:
    """Installation directories that fit a variable such as ``JAVA_HOME``"""
    lowered = var_name.lower()
    if "java" in lowered or "jdk" in lowered:
        return find_java_homes()
    if "hadoop" in lowered:
        return find_hadoop_homes()
    return []


class EnvironmentSource:
    """Completes variable names and values after ``export``"""

    def __init__(self, history_lines: Iterable[str] = (), environ: Optional[Mapping[str, str]] = None,
                 path_finder: Callable[[str], List[str]] = find_install_paths, limit: int = 50):
        self.variables: Dict[str, str] = {}
        self.path_finder = path_finder
        self.limit = limit
        if environ:
            for name, value in environ.items():
                if name.endswith("_HOME") or name == "PATH":
                    self.variables[name] = value
        self.learn(history_lines)

    def learn(self, history_lines: Iterable[str]):
        """Pick up variables from export lines (later lines win)"""
        for line in history_lines:
            parsed = parse_export(line)
            if parsed:
                self.variables[parsed[0]] = parsed[1]

    def update(self, name: str, value: str):
        self.variables[name] = value

    def record_command(self, command: str, context=None):
        parsed = parse_export(command)
        if parsed:
            self.update(*parsed)

    def suggest_path_values(self) -> List[str]:
        homes = sorted(name for name in self.variables if name.endswith("_HOME"))
        if not homes:
            return []

        existing = "$PATH"
        for name, value in self.variables.items():
            if name.upper() == "PATH" and value:
                existing = value.replace("$path", "$PATH")
                break

        suggestions = []
        if len(homes) > 1:
            suggestions.append(existing + "".join(f":${h}/bin:${h}/sbin" for h in homes))
            suggestions.append(existing + "".join(f":${h}/bin" for h in homes))
        for home in homes:
            base = f"${home}"
            suggestions.append(f"{existing}:{base}/bin")
            suggestions.append(f"{existing}:{base}/bin:{base}/sbin")
            suggestions.append(f"{existing}:{base}/bin:{base}/sbin:{base}/lib")

        unique = []
        for suggestion in suggestions:
            if suggestion not in unique:
                unique.append(suggestion)
        return unique[:MAX_PATH_SUGGESTIONS]

    def complete(self, request: CompletionRequest) -> List[Completion]:
        parsed = request.parsed
        if parsed.command != "export":
            return []
        word = parsed.current_word
        completions: List[Completion] = []

        if "=" in word:
            name, _, value_prefix = word.partition("=")
            if name.upper() == "PATH":
                for i, value in enumerate(self.suggest_path_values()):
                    completions.append(Completion(
                        text=f"{name}={value}",
                        description=f"PATH suggestion #{i + 1}",
                        score=PATH_SCORE - i,
                        kind=CompletionKind.ARGUMENT,
                    ))
            else:
                for i, path in enumerate(self.path_finder(name)):
                    if value_prefix and not path.startswith(value_prefix):
                        continue
                    completions.append(Completion(
                        text=f"{name}={path}",
                        description=f"found installation: {path}",
                        score=FOUND_PATH_SCORE - i,
                        kind=CompletionKind.ARGUMENT,
                    ))
        elif word.upper() == "PATH" or (not word and (parsed.previous_word or "").upper() == "PATH"):
            prefix = f"{word}=" if word else ""
            for i, value in enumerate(self.suggest_path_values()):
                completions.append(Completion(
                    text=prefix + value,
                    description=f"PATH suggestion #{i + 1}",
                    score=PATH_SCORE - i,
                    kind=CompletionKind.ARGUMENT,
                ))
        else:
            for name in sorted(self.variables):
                completions.append(Completion(
                    text=name,
                    description=f"= {self.variables[name]}",
                    score=VARIABLE_SCORE,
                    kind=CompletionKind.ARGUMENT,
                ))

        return completions[:self.limit]
