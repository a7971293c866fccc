"""Full-text and recency queries over the card store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from reel.index.fuzzy import fuzzy_score
from reel.index.storage import SQLiteCardStore
from reel.models import Card
from reel.utils.text import tokenize

LOGGER = logging.getLogger(__name__)

FUZZY_RESULT_LIMIT = 20


@dataclass(slots=True)
class SearchResult:
    card: Card
    score: float
    fuzzy: bool = False


class Searcher:
    """High-level API to query the card store."""

    def __init__(self, store: SQLiteCardStore) -> None:
        self.store = store

    def search(self, query: str, *, limit: int = 100) -> List[Card]:
        return [result.card for result in self.search_scored(query, limit=limit)]

    def search_scored(self, query: str, *, limit: int = 100) -> List[SearchResult]:
        """Rank cards by summed index score, falling back to fuzzy matching.

        ``limit`` only bounds exact results; fuzzy results are capped at
        ``FUZZY_RESULT_LIMIT``.
        """
        words = tokenize(query)
        if not words:
            return []

        with self.store.snapshot():
            path_scores: Dict[str, float] = {}
            for word in words:
                for entry in self.store.get_index_entries_by_word(word):
                    path_scores[entry.path] = path_scores.get(entry.path, 0.0) + entry.score

            if any(score > 0 for score in path_scores.values()):
                ranked = sorted(path_scores.items(), key=lambda item: item[1], reverse=True)
                results: List[SearchResult] = []
                for path, score in ranked[: max(limit, 0)]:
                    card = self.store.get(path)
                    if card is not None:
                        results.append(SearchResult(card=card, score=score))
                return results

            LOGGER.debug("No index match for %r, falling back to word-distance search", query)
            return self._fuzzy_search(words)

    def _fuzzy_search(self, words: Sequence[str]) -> List[SearchResult]:
        scored: List[SearchResult] = []
        for card in list(self.store.iter_cards()):
            candidates = tokenize(card.title) + tokenize(card.summary)
            score = fuzzy_score(words, candidates)
            if score > 0:
                scored.append(SearchResult(card=card, score=score, fuzzy=True))

        scored.sort(key=lambda result: result.score, reverse=True)
        return scored[:FUZZY_RESULT_LIMIT]

    def recent(self, *, limit: int = 100) -> List[Card]:
        """Most recently updated cards first."""
        return self.store.recent_cards(limit)

    def get(self, path: str) -> Card | None:
        return self.store.get(path)
