#!/usr/bin/env python3
"""Command names from the catalog"""

from typing import List

from ..engine.models import Completion, CompletionKind
from ..engine.protocols import CompletionRequest

CATALOG_SCORE = 50


def chars_in_order(text: str, pattern: str) -> bool:
    """True if every character of ``pattern`` appears in ``text`` in order"""
    position = 0
    for ch in pattern:
        position = text.find(ch, position)
        if position < 0:
            return False
        position += 1
    return True


class CommandSource:
    """Offers every catalog command loosely related to the typed word"""

    def __init__(self, catalog, limit: int = 50):
        self.catalog = catalog
        self.limit = limit

    def complete(self, request: CompletionRequest) -> List[Completion]:
        word = request.word.lower()
        completions = []
        for spec in self.catalog.all_commands():
            name = spec.name.lower()
            if word and not (word in name or chars_in_order(name, word)):
                continue
            completions.append(Completion(
                text=spec.name,
                description=spec.description,
                score=CATALOG_SCORE,
                kind=CompletionKind.COMMAND,
            ))
            if len(completions) >= self.limit:
                break
        return completions
