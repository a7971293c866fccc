"""Core Reel data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Card:
    """One indexed document."""

    path: str
    title: str
    summary: str
    body: str
    hash: str
    updated_at: float = 0.0


@dataclass(slots=True, frozen=True)
class IndexEntry:
    """Relevance of one word for one card, keyed by ``(word, path)``."""

    word: str
    path: str
    score: float


@dataclass(slots=True, frozen=True)
class CardMeta:
    """Listing entry for a card known to exist at the content source."""

    path: str
    hash: str | None = None


@dataclass(slots=True)
class CardContent:
    """Raw document text as returned by a content source."""

    path: str
    text: str
    hash: str
