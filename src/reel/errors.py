"""Exceptions raised by the card store and its loaders."""

from __future__ import annotations


class ReelError(Exception):
    """Base class for Reel errors."""


class StorageError(ReelError):
    """A store transaction or query failed; nothing was written."""


class FetchError(ReelError):
    """Retrieving content for a resource failed."""

    def __init__(self, resource: str, message: str) -> None:
        super().__init__(f"{resource}: {message}")
        self.resource = resource
