#!/usr/bin/env python3
"""
Candidate matching and scoring

A candidate is tested against the typed word by an ordered chain of
strategies; the first one that matches decides the score and the highlighted
positions. Scores are tiered so that an earlier strategy normally outranks a
later one:

    exact          300
    prefix         200 + max(0, 100 - len(text))
    substring      150 + max(0, 50 - position)
    abbreviation   120 + 10 * len(query)
    fuzzy          1..199 (pluggable)
    subsequence    50 + 10 * adjacent pairs + max(0, 20 - first position)
"""

from typing import Callable, Optional, Sequence, Tuple

from .fuzzy import chunk_match
from .models import Match


Strategy = Callable[[str, str], Optional[Match]]

ABBREVIATION_SEPARATORS = frozenset("-_ /")


def fold(text: str) -> str:
    """Lower-case ``text`` one character at a time, keeping its length"""
    folded = []
    for ch in text:
        lower = ch.lower()
        folded.append(lower if len(lower) == 1 else ch)
    return "".join(folded)


def exact_match(text: str, query: str) -> Optional[Match]:
    if fold(text) == fold(query):
        return Match(300, tuple(range(len(text))))
    return None


def prefix_match(text: str, query: str) -> Optional[Match]:
    if fold(text).startswith(fold(query)):
        return Match(200 + max(0, 100 - len(text)), tuple(range(len(query))))
    return None


def substring_match(text: str, query: str) -> Optional[Match]:
    position = fold(text).find(fold(query))
    if position < 0:
        return None
    return Match(150 + max(0, 50 - position), tuple(range(position, position + len(query))))


def _is_abbreviation_boundary(text: str, index: int) -> bool:
    if index == 0:
        return True
    if text[index - 1] in ABBREVIATION_SEPARATORS:
        return True
    return text[index].isupper()


def abbreviation_match(text: str, query: str) -> Optional[Match]:
    """Match query characters against word starts, e.g. ``gca`` -> ``git-commit-amend``"""
    folded_text = fold(text)
    folded_query = fold(query)
    indices = []
    for i, ch in enumerate(folded_text):
        if len(indices) == len(folded_query):
            break
        if ch == folded_query[len(indices)] and _is_abbreviation_boundary(text, i):
            indices.append(i)
    if len(indices) != len(folded_query):
        return None
    return Match(120 + 10 * len(query), tuple(indices))


def subsequence_match(text: str, query: str) -> Optional[Match]:
    folded_text = fold(text)
    indices = []
    start = 0
    for ch in fold(query):
        position = folded_text.find(ch, start)
        if position < 0:
            return None
        indices.append(position)
        start = position + 1

    adjacent = sum(1 for a, b in zip(indices, indices[1:]) if b == a + 1)
    return Match(50 + 10 * adjacent + max(0, 20 - indices[0]), tuple(indices))


def build_strategies(fuzzy_matcher: Optional[Strategy] = None) -> Tuple[Strategy, ...]:
    """Return the strategy chain with ``fuzzy_matcher`` in the fuzzy slot"""
    return (
        exact_match,
        prefix_match,
        substring_match,
        abbreviation_match,
        fuzzy_matcher or chunk_match,
        subsequence_match,
    )


DEFAULT_STRATEGIES = build_strategies()


def rank_candidate(text: str, query: str,
                   strategies: Optional[Sequence[Strategy]] = None) -> Optional[Match]:
    """
    Score ``text`` against ``query``.

    Returns the first strategy's :class:`Match`, or ``None`` when no strategy
    matches or the query is empty.
    """
    if not query or not text:
        return None
    for strategy in strategies or DEFAULT_STRATEGIES:
        result = strategy(text, query)
        if result is not None:
            return result
    return None
