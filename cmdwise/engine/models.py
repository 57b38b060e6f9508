#!/usr/bin/env python3
"""
Value types shared by the completion core and every candidate source
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import NamedTuple, Tuple


class CompletionKind(Enum):
    """What a suggested continuation represents"""
    COMMAND = "command"
    SUBCOMMAND = "subcommand"
    OPTION = "option"
    ARGUMENT = "argument"
    FILE = "file"
    DIRECTORY = "directory"
    HISTORY = "history"


class Match(NamedTuple):
    """Score and highlighted character positions of a matched candidate"""
    score: int
    indices: Tuple[int, ...]


# Short labels shown next to a candidate; one entry per kind
KIND_LABELS = {
    CompletionKind.COMMAND: "cmd",
    CompletionKind.SUBCOMMAND: "sub",
    CompletionKind.OPTION: "opt",
    CompletionKind.ARGUMENT: "arg",
    CompletionKind.FILE: "file",
    CompletionKind.DIRECTORY: "dir",
    CompletionKind.HISTORY: "hist",
}


@dataclass(frozen=True)
class Completion:
    """A single suggested continuation of the current word"""
    text: str
    description: str = ""
    score: int = 0
    kind: CompletionKind = CompletionKind.COMMAND
    match_indices: Tuple[int, ...] = field(default_factory=tuple)

    def with_score(self, score: int) -> "Completion":
        return replace(self, score=score)

    def with_match(self, score: int, indices) -> "Completion":
        return replace(self, score=score, match_indices=tuple(indices))

    @property
    def label(self) -> str:
        return KIND_LABELS[self.kind]
