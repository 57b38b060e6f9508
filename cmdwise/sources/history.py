#!/usr/bin/env python3
"""
Shell history
Reads bash and zsh history files and suggests previously executed lines.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest
from ..logger import get_logger

log = get_logger("sources.history")

DEFAULT_HISTORY_FILES = ("~/.bash_history", "~/.zsh_history")
MAX_ENTRIES = 1000
MAX_SUGGESTIONS = 10


def parse_history_line(line: str) -> str:
    """Strip the zsh extended-history header (``: 1700000000:0;cmd``)"""
    line = line.strip()
    if line.startswith(":") and ";" in line:
        line = line.split(";", 1)[1]
    return line.strip()


def read_history_file(path: Path) -> List[str]:
    """Commands in a history file, oldest first; empty if unreadable"""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except OSError as e:
        log.debug(f"Cannot read history file {path}: {e}")
        return []
    commands = []
    for line in lines:
        command = parse_history_line(line)
        if command:
            commands.append(command)
    return commands


class HistorySource:
    """
    Previously executed command lines, newest first and without duplicates.

    Pass ``entries`` (newest first) to bypass the history files.
    """

    def __init__(self, files: Optional[Sequence] = None, entries: Optional[Iterable[str]] = None,
                 max_entries: int = MAX_ENTRIES, limit: int = MAX_SUGGESTIONS):
        self.max_entries = max_entries
        self.limit = limit
        if entries is not None:
            self._entries = self._unique(entries)
        else:
            paths = [Path(os.path.expanduser(str(p))) for p in (files or DEFAULT_HISTORY_FILES)]
            self._entries = self._load(paths)

    def _unique(self, newest_first: Iterable[str]) -> List[str]:
        seen = set()
        unique = []
        for command in newest_first:
            command = command.strip()
            if not command or command in seen:
                continue
            seen.add(command)
            unique.append(command)
            if len(unique) >= self.max_entries:
                break
        return unique

    def _load(self, paths: Sequence[Path]) -> List[str]:
        oldest_first: List[str] = []
        for path in paths:
            oldest_first.extend(read_history_file(path))
        entries = self._unique(reversed(oldest_first))
        log.debug(f"Loaded {len(entries)} history entries")
        return entries

    def entries(self) -> List[str]:
        """All entries, newest first"""
        return list(self._entries)

    def last_command(self) -> Optional[str]:
        return self._entries[0] if self._entries else None

    def record_command(self, command: str, context=None):
        """Put an executed line at the front, dropping its older copy"""
        command = command.strip()
        if not command:
            return
        if command in self._entries:
            self._entries.remove(command)
        self._entries.insert(0, command)
        del self._entries[self.max_entries:]

    def exports(self) -> List[str]:
        """``export`` lines, oldest first so later definitions win"""
        return [c for c in reversed(self._entries) if c.startswith("export")]

    def complete(self, request: CompletionRequest) -> List[Completion]:
        word = request.word
        if not word:
            return []
        needle = word.lower()
        completions = []
        for command in self._entries:
            lowered = command.lower()
            if needle not in lowered:
                continue
            i = len(completions)
            prefix = lowered.startswith(needle)
            completions.append(Completion(
                text=command,
                description="from history",
                score=(95 if prefix else 85) - i,
                kind=CompletionKind.HISTORY,
            ))
            if len(completions) >= self.limit:
                break
        return completions
