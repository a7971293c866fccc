"""Typo-tolerant word matching used when exact lookup finds nothing.

Prefix hits always outrank edit-distance hits: a prefix match scores
``10 + len(query)`` while an edit-distance match scores at most 1.
"""

from __future__ import annotations

from typing import Iterable, Sequence

MAX_EDIT_DISTANCE = 2
PREFIX_BONUS = 10
# Skip edit distance when the longer word exceeds this length and the shorter
# one is less than half as long.
SKEW_MIN_LENGTH = 7


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Unit costs for insertion, deletion and substitution. With
    ``max_distance`` set, returns ``max_distance + 1`` as soon as the
    distance is guaranteed to exceed it.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("wigdets", "widgets")
        2
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def is_length_skewed(a: str, b: str) -> bool:
    """True when two words differ too much in length to be worth comparing."""
    longer, shorter = (a, b) if len(a) > len(b) else (b, a)
    return len(longer) > SKEW_MIN_LENGTH and len(shorter) < len(longer) / 2


def word_score(query_word: str, candidate: str) -> float:
    """Score how well ``candidate`` matches ``query_word``."""
    if candidate.startswith(query_word):
        return float(PREFIX_BONUS + len(query_word))
    if is_length_skewed(query_word, candidate):
        return 0.0

    distance = levenshtein_distance(query_word, candidate, MAX_EDIT_DISTANCE)
    if distance <= MAX_EDIT_DISTANCE:
        return 1.0 / (distance + 1)
    return 0.0


def fuzzy_score(query_words: Sequence[str], candidates: Iterable[str]) -> float:
    """Sum, over query words, the best match score among ``candidates``."""
    vocabulary = list(dict.fromkeys(candidates))
    total = 0.0
    for query_word in query_words:
        total += max((word_score(query_word, word) for word in vocabulary), default=0.0)
    return total
