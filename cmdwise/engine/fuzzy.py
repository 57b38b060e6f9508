#!/usr/bin/env python3
"""
Word-boundary fuzzy matcher

Every matched character must either start a word (string start, after a
non-alphanumeric character, or a camelCase hump) or directly follow the
previous matched character. ``dcu`` therefore matches ``docker-compose-up``
by chunks ("d", "c", "u") and ``kgp`` matches ``kubectl get pods``, while a
scattered match such as ``ace`` in ``abcdef`` is rejected and left to the
plain subsequence strategy.

The best alignment is found with a small dynamic program over
(query position, text position).
"""

from typing import List, Optional, Tuple

from .models import Match

MATCH_SCORE = 16
BOUNDARY_BONUS = 8
CONSECUTIVE_BONUS = 8
GAP_PENALTY = 1
MAX_LEADING_PENALTY = 10
MIN_SCORE = 1
MAX_SCORE = 199


def _fold(text: str) -> str:
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


def is_word_start(text: str, index: int) -> bool:
    if index == 0:
        return True
    previous = text[index - 1]
    if not previous.isalnum():
        return True
    return text[index].isupper() and previous.islower()


def chunk_match(text: str, query: str):
    """
    Return a ``Match`` for the best boundary-anchored alignment, or ``None``.
    """
    if not text or not query or len(query) > len(text):
        return None

    folded_text = _fold(text)
    folded_query = _fold(query)
    n, m = len(folded_query), len(folded_text)
    starts = [is_word_start(text, i) for i in range(m)]

    # best[k][i]: best score with query[k] matched at text[i]; None if impossible
    best: List[List[Optional[int]]] = [[None] * m for _ in range(n)]
    back: List[List[int]] = [[-1] * m for _ in range(n)]

    for i in range(m):
        if folded_text[i] == folded_query[0] and starts[i]:
            best[0][i] = MATCH_SCORE + BOUNDARY_BONUS - min(i, MAX_LEADING_PENALTY) * GAP_PENALTY

    for k in range(1, n):
        previous_row = best[k - 1]
        # Running max of previous_row[j] + j for j < i - 1, used for gapped jumps
        run_value: Optional[int] = None
        run_index = -1
        for i in range(1, m):
            j = i - 2
            if j >= 0 and previous_row[j] is not None:
                candidate = previous_row[j] + j * GAP_PENALTY
                if run_value is None or candidate > run_value:
                    run_value, run_index = candidate, j

            if folded_text[i] != folded_query[k]:
                continue

            options: List[Tuple[int, int]] = []
            if previous_row[i - 1] is not None:
                bonus = CONSECUTIVE_BONUS + (BOUNDARY_BONUS if starts[i] else 0)
                options.append((previous_row[i - 1] + MATCH_SCORE + bonus, i - 1))
            if starts[i] and run_value is not None:
                gap_score = run_value - (i - 1) * GAP_PENALTY
                options.append((gap_score + MATCH_SCORE + BOUNDARY_BONUS, run_index))
            if options:
                score, source = max(options)
                best[k][i] = score
                back[k][i] = source

    last_row = best[n - 1]
    end = -1
    for i in range(m):
        if last_row[i] is not None and (end < 0 or last_row[i] > last_row[end]):
            end = i
    if end < 0:
        return None

    indices = [end]
    for k in range(n - 1, 0, -1):
        indices.append(back[k][indices[-1]])
    indices.reverse()

    score = max(MIN_SCORE, min(MAX_SCORE, last_row[end]))
    return Match(score, tuple(indices))
