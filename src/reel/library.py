"""Async entry point used by collaborators (CLI, web API, file watchers).

Store work runs in worker threads via :func:`asyncio.to_thread`; each thread
has its own SQLite connection, so loads for different paths proceed
independently and only SQLite's own write lock orders their commits.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from reel.config import DEFAULT_RECENT_LIMIT, DEFAULT_SEARCH_LIMIT
from reel.errors import ReelError
from reel.index.indexer import Indexer, IndexStats
from reel.index.search import Searcher, SearchResult
from reel.index.storage import SQLiteCardStore
from reel.ingestion.card_loader import build_card
from reel.ingestion.sources import ContentSource
from reel.models import Card, CardMeta

LOGGER = logging.getLogger(__name__)

CARD_LOADED = "card-loaded"
CARD_REMOVED = "card-removed"
CARDS_PRUNED = "cards-pruned"
EVENTS = (CARD_LOADED, CARD_REMOVED, CARDS_PRUNED)

EventHandler = Callable[[Any], None]


class CardLibrary:
    """Loads cards from a content source into the store and answers queries."""

    def __init__(
        self,
        store: SQLiteCardStore,
        source: ContentSource | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.source = source
        self.clock = clock
        self.indexer = Indexer(store, clock=clock)
        self.searcher = Searcher(store)
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    # Notifications

    def subscribe(self, event: str, handler: EventHandler) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def _notify(self, event: str, payload: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:
                LOGGER.exception("Handler for %s failed", event)

    # Writes

    async def load_card(self, meta: CardMeta | str) -> Card | None:
        """Fetch, index and store one card.

        Returns the stored card, the existing card when ``meta.hash`` shows
        it is unchanged, or ``None`` when a newer version won the race.

        Raises:
            FetchError: the content source could not provide the card.
            StorageError: the store transaction failed; nothing was written.
        """
        _, card = await self._load(meta)
        return card

    async def _load(self, meta: CardMeta | str) -> Tuple[str, Card | None]:
        if isinstance(meta, str):
            meta = CardMeta(path=meta)
        if self.source is None:
            raise ReelError("No content source configured")

        existing = await asyncio.to_thread(self.store.get, meta.path)
        if existing is not None and meta.hash is not None and existing.hash == meta.hash:
            LOGGER.debug("Unchanged %s", meta.path)
            return "skipped", existing

        # Taken before the fetch so a slower, older fetch loses to a newer one
        fetch_time = self.clock()
        content = await self.source.read(meta.path)
        card = build_card(content)

        stored = await asyncio.to_thread(self.indexer.upsert_card, card, fetch_time)
        if stored is None:
            return "skipped", None

        LOGGER.info("Loaded %s", stored.path)
        self._notify(CARD_LOADED, stored)
        return ("updated" if existing is not None else "inserted"), stored

    async def remove_card(self, path: str) -> bool:
        removed = await asyncio.to_thread(self.indexer.remove_card, path)
        if removed:
            self._notify(CARD_REMOVED, path)
        return removed

    async def prune_cards(self, live_paths: Iterable[str]) -> List[str]:
        pruned = await asyncio.to_thread(self.indexer.prune_cards, list(live_paths))
        self._notify(CARDS_PRUNED, pruned)
        return pruned

    async def sync(self, metas: Sequence[CardMeta]) -> IndexStats:
        """Load every listed card concurrently, then prune cards not listed.

        A card that fails to load is counted and logged; it does not stop the
        other loads.
        """
        stats = IndexStats()
        results = await asyncio.gather(*(self._load(meta) for meta in metas), return_exceptions=True)

        for meta, result in zip(metas, results):
            if isinstance(result, ReelError):
                LOGGER.error("Failed to load %s: %s", meta.path, result)
                stats.increment("failed", meta.path)
            elif isinstance(result, BaseException):
                raise result
            else:
                status, _ = result
                stats.increment(status, meta.path)

        stats.pruned = len(await self.prune_cards([meta.path for meta in metas]))
        return stats

    # Reads

    async def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> List[Card]:
        return await asyncio.to_thread(self.searcher.search, query, limit=limit)

    async def search_scored(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> List[SearchResult]:
        return await asyncio.to_thread(self.searcher.search_scored, query, limit=limit)

    async def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[Card]:
        return await asyncio.to_thread(self.searcher.recent, limit=limit)

    async def get(self, path: str) -> Card | None:
        return await asyncio.to_thread(self.searcher.get, path)
