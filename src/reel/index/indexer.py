"""Keep the card table and the search index consistent."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, List

from reel.index.scoring import index_entries
from reel.index.storage import SQLiteCardStore
from reel.models import Card

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class IndexStats:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    pruned: int = 0
    processed_paths: list[str] = field(default_factory=list)

    def increment(self, status: str, path: str) -> None:
        if status == "inserted":
            self.inserted += 1
        elif status == "updated":
            self.updated += 1
        elif status == "skipped":
            self.skipped += 1
        else:
            self.failed += 1
        self.processed_paths.append(path)


class Indexer:
    """Applies card upserts and removals to the store atomically."""

    def __init__(
        self,
        store: SQLiteCardStore,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.clock = clock

    def upsert_card(self, card: Card, fetch_time: float) -> Card | None:
        """Replace ``card`` and all of its index entries.

        Returns the stored card, or ``None`` when a version at least as new
        as ``fetch_time`` is already stored (a stale write).
        """
        with self.store.transaction():
            existing = self.store.get(card.path)
            if existing is not None and existing.updated_at >= fetch_time:
                LOGGER.debug(
                    "Stale write for %s: stored %s >= fetched %s",
                    card.path,
                    existing.updated_at,
                    fetch_time,
                )
                return None

            if existing is not None:
                self.store.delete_index_entries_by_path(card.path)

            stored = replace(card, updated_at=max(self.clock(), fetch_time))
            self.store.put_index_entries(index_entries(stored))
            self.store.put(stored)

        LOGGER.debug("Indexed %s", card.path)
        return stored

    def remove_card(self, path: str) -> bool:
        """Delete a card and its index entries. Returns whether a card existed."""
        with self.store.transaction():
            self.store.delete_index_entries_by_path(path)
            removed = self.store.delete(path)
        if removed:
            LOGGER.debug("Removed %s", path)
        return removed

    def prune_cards(self, live_paths: Iterable[str]) -> List[str]:
        """Remove every stored card whose path is not in ``live_paths``.

        Each removal is its own transaction.
        """
        live = set(live_paths)
        pruned: List[str] = []
        for path in self.store.list_paths():
            if path in live:
                continue
            if self.remove_card(path):
                pruned.append(path)

        if pruned:
            LOGGER.info("Pruned %d cards", len(pruned))
        return pruned
