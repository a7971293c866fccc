"""Content sources that feed the card library."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Collection, Iterable, List, Protocol
from urllib.parse import urljoin

from reel.errors import FetchError
from reel.ingestion.fetcher import ThrottledFetcher
from reel.models import CardContent, CardMeta
from reel.utils.files import card_path_for, compute_sha256, iter_card_paths


class ContentSource(Protocol):
    async def read(self, path: str) -> CardContent:
        """Return the raw text for a card path, raising FetchError on failure."""
        ...


class FileContentSource:
    """Cards stored as files below a root directory."""

    def __init__(
        self,
        root: Path,
        fetcher: ThrottledFetcher,
        *,
        suffixes: Iterable[str] = (".md", ".html"),
        exclude: Collection[str] = (),
    ) -> None:
        self.root = Path(root)
        self.fetcher = fetcher
        self.suffixes = tuple(suffixes)
        self.exclude = exclude

    def _resolve(self, path: str) -> Path:
        candidate = (self.root / path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.root.resolve()):
            raise FetchError(path, "path escapes the content root")
        return candidate

    def list_cards(self) -> List[CardMeta]:
        """Live listing of every card file, hashed so unchanged cards can be skipped."""
        metas = []
        for file_path in iter_card_paths(self.root, suffixes=self.suffixes, exclude=self.exclude):
            text = file_path.read_text(encoding="utf-8", errors="replace")
            metas.append(CardMeta(path=card_path_for(self.root, file_path), hash=compute_sha256(text)))
        return metas

    async def read(self, path: str) -> CardContent:
        file_path = self._resolve(path)
        try:
            text = await self.fetcher.run(
                asyncio.to_thread, file_path.read_text, encoding="utf-8", errors="replace"
            )
        except OSError as exc:
            raise FetchError(path, str(exc)) from exc
        return CardContent(path=path, text=text, hash=compute_sha256(text))


class HttpContentSource:
    """Cards served over HTTP relative to a base URL."""

    def __init__(self, base_url: str, fetcher: ThrottledFetcher) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.fetcher = fetcher

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    async def read(self, path: str) -> CardContent:
        response = await self.fetcher.fetch(self.url_for(path))
        text = response.text
        return CardContent(path=path, text=text, hash=compute_sha256(text))
