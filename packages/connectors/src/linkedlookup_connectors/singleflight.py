"""
Single-flight memoizer.

Maps a key to the shared future of its fetch. The future is stored before the
fetch completes, so concurrent and later callers for the same key attach to the
one in-flight (or finished) request instead of issuing another. Entries live as
long as the owning connector and are never evicted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    def __init__(self) -> None:
        self._calls: dict[Hashable, asyncio.Future[T]] = {}

    def get_or_fetch(self, key: Hashable, fetch: Callable[[], Awaitable[T]]) -> asyncio.Future[T]:
        """
        Return the shared future for ``key``, starting ``fetch()`` on first use.

        Must be called from a running event loop.
        """
        call = self._calls.get(key)
        if call is None:
            call = asyncio.ensure_future(fetch())
            self._calls[key] = call
        return call

    def __contains__(self, key: Hashable) -> bool:
        return key in self._calls

    def __len__(self) -> int:
        return len(self._calls)
