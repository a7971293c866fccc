"""Bounded-concurrency content fetching."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from reel.config import DEFAULT_CONCURRENCY
from reel.errors import FetchError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ThrottledFetcher:
    """Limit how many fetches run at once.

    Calls beyond the limit wait their turn in arrival order. A finished call,
    successful or not, frees its slot for the next waiter. Cancelling a call
    that is still waiting drops it without running it; a running call is never
    interrupted by the limiter.
    """

    def __init__(
        self,
        concurrency: int = DEFAULT_CONCURRENCY,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self.timeout = timeout
        self._semaphore = asyncio.Semaphore(concurrency)
        self._client = client
        self._owns_client = client is None
        self.in_flight = 0
        self.pending = 0

    async def __aenter__(self) -> "ThrottledFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await ``func(*args, **kwargs)`` once a slot is free."""
        self.pending += 1
        try:
            await self._semaphore.acquire()
        finally:
            self.pending -= 1

        self.in_flight += 1
        try:
            return await func(*args, **kwargs)
        finally:
            self.in_flight -= 1
            self._semaphore.release()

    async def fetch(self, url: str, **options: Any) -> httpx.Response:
        """GET ``url`` under the concurrency limit.

        Raises:
            FetchError: on transport errors and non-2xx responses.
        """
        return await self.run(self._get, url, **options)

    async def _get(self, url: str, **options: Any) -> httpx.Response:
        try:
            response = await self._get_client().get(url, **options)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            LOGGER.warning("Fetch failed for %s: %s", url, exc)
            raise FetchError(url, str(exc)) from exc
        return response
