#!/usr/bin/env python3
"""
cmdwise Prompt-Toolkit Completer
Exposes the completion engine to prompt_toolkit so the interactive shell gets
the same ranked suggestions as the shell integration.
"""

from typing import Iterable, Sequence

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import FormattedText

from ..engine import CompletionEngine
from ..engine.models import Completion as EngineCompletion
from ..engine.parser import split_words


def highlight(text: str, indices: Sequence[int]) -> FormattedText:
    """Display text with the matched characters emphasised"""
    matched = set(indices)
    return FormattedText([
        ("class:completion-match bold" if i in matched else "", ch)
        for i, ch in enumerate(text)
    ])


class CmdwiseCompleter(Completer):
    """
    A prompt-toolkit completer backed by :class:`CompletionEngine`.
    The typed word is replaced by the completion text.
    """

    def __init__(self, engine: CompletionEngine):
        self.engine = engine

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        """Called by prompt-toolkit on every keypress"""
        line = document.text
        cursor = document.cursor_position
        _, word = split_words(line, cursor)

        for candidate in self.engine.complete(line, cursor):
            yield self._to_prompt_completion(candidate, word)

    @staticmethod
    def _to_prompt_completion(candidate: EngineCompletion, word: str) -> Completion:
        return Completion(
            candidate.text,
            start_position=-len(word),
            display=highlight(candidate.text, candidate.match_indices),
            display_meta=f"[{candidate.label}] {candidate.description}".rstrip(),
        )
