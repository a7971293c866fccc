"""Utility helpers for working with card files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Collection, Iterable, Iterator


def iter_card_paths(
    root: Path,
    *,
    suffixes: Iterable[str] = (".md", ".html"),
    exclude: Collection[str] = (),
) -> Iterator[Path]:
    """Yield card files under ``root`` in sorted order, skipping excluded directories."""
    wanted = {suffix.lower() for suffix in suffixes}
    for item in sorted(root.rglob("*")):
        relative = item.relative_to(root)
        if any(part in exclude for part in relative.parts[:-1]):
            continue
        if item.is_file() and item.suffix.lower() in wanted:
            yield item


def card_path_for(root: Path, file_path: Path) -> str:
    """Map a file under ``root`` to its card key, e.g. ``/guide/intro.md``."""
    return "/" + file_path.relative_to(root).as_posix()


def compute_sha256(text: str) -> str:
    """Compute the SHA256 hex digest of a text document."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
