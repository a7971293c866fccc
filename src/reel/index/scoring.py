"""Derive inverted-index entries from card text."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List

from reel.models import Card, IndexEntry
from reel.utils.text import strip_markup, tokenize


def score_text(title: str, summary: str, body_text: str) -> Dict[str, int]:
    """Score every distinct body token.

    A token's score is its frequency in the body, plus one if it also appears
    in the title and one if it appears in the summary. Tokens that never occur
    in the body get no score at all.
    """
    title_words = set(tokenize(title))
    summary_words = set(tokenize(summary))
    frequencies = Counter(tokenize(body_text))

    scores: Dict[str, int] = {}
    for word, tf in frequencies.items():
        score = tf
        if word in title_words:
            score += 1
        if word in summary_words:
            score += 1
        scores[word] = score
    return scores


def score_card(card: Card) -> Dict[str, int]:
    """Return the ``word -> score`` mapping for a card, stripping body markup first."""
    return score_text(card.title, card.summary, strip_markup(card.body))


def index_entries(card: Card) -> List[IndexEntry]:
    """The complete set of index rows for ``card``."""
    return [
        IndexEntry(word=word, path=card.path, score=float(score))
        for word, score in score_card(card).items()
    ]
