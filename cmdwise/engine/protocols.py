#!/usr/bin/env python3
"""
Contracts between the completion engine and its collaborators
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Tuple

from .models import Completion
from .parser import ParsedCommand


@dataclass(frozen=True)
class CompletionRequest:
    """Everything a source may look at to produce candidates"""
    parsed: ParsedCommand
    context: Any = None
    recent_commands: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def word(self) -> str:
        return self.parsed.current_word


class CompletionSource(Protocol):
    """Produces candidates for a request; should not raise"""

    def complete(self, request: CompletionRequest) -> List[Completion]:
        ...


class PhraseSource(CompletionSource, Protocol):
    """A source that can tell whether a word reads like a natural-language request"""

    def looks_like_intent(self, word: str) -> bool:
        ...


class Personalizer(Protocol):
    """Gives a non-negative score offset for candidates the user favours"""

    def score_boost(self, text: str, context: Any = None) -> int:
        ...


class CommandRecorder(Protocol):
    """Anything that learns from executed commands"""

    def record_command(self, command: str, context: Any = None) -> None:
        ...


class ContextProvider(Protocol):
    """Describes the environment the user is typing in"""

    def analyze(self, recent_commands: Tuple[str, ...] = ()) -> Any:
        ...


@dataclass
class SourceSet:
    """
    Candidate sources, one per role. Any role may be left empty.

    Command position consults, in order: semantic, prediction, context,
    learning, commands, history, then phrase. Argument position consults
    environment, arguments, then files.
    """
    semantic: Optional[CompletionSource] = None
    prediction: Optional[CompletionSource] = None
    context: Optional[CompletionSource] = None
    learning: Optional[CompletionSource] = None
    commands: Optional[CompletionSource] = None
    history: Optional[CompletionSource] = None
    phrase: Optional[PhraseSource] = None
    environment: Optional[CompletionSource] = None
    arguments: Optional[CompletionSource] = None
    files: Optional[CompletionSource] = None
