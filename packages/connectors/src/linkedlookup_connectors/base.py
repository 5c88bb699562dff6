"""
Shared connector contract and helpers.

Provides:
- Canonical entity type alias
- Per-connector configuration
- Connector protocol (duck-typed, no shared base class)
- Error types used at the upstream boundary
- ``lookup_search`` decorator enforcing the search contract
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

C = TypeVar("C")

Entity = dict[str, Any]
"""Canonical entity: insertion-ordered mapping with ``@id``/``@type``/``name`` first."""


class ConnectorConfig(BaseModel):
    """Everything a connector needs from its caller; connectors never read the environment."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str | None = Field(default=None, description="Origin override; None uses the public origin")
    headers: dict[str, str] = Field(default_factory=dict)
    fields: tuple[str, ...] | None = Field(default=None, description="Optional output field allow-list")
    type: str | None = Field(default=None, description="Optional @type override")
    timeout_seconds: float = Field(default=15.0, gt=0.0)
    fallback_to_search: bool = Field(
        default=True,
        description="Run a free-text search when an identifier-shaped query does not resolve",
    )


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class UpstreamStatusError(ConnectorError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP error {status_code}: {url}")


class UpstreamTransportError(ConnectorError):
    """Network failure or timeout."""

    pass


class UpstreamParseError(ConnectorError):
    """Upstream body could not be decoded."""

    pass


class LookupConnector(Protocol):
    """Protocol that all connectors implement."""

    name: str
    DEFAULT_TYPE: str
    DEFAULT_LIMIT: int
    MIN_QUERY_LENGTH: int

    async def search(self, query: str | None, limit: int | None = None) -> list[Entity]:
        """
        Search the source.

        Args:
            query: Free text or identifier-like string
            limit: Maximum number of entities (source default when None)

        Returns:
            Ordered entities, never more than ``limit``. Never raises.
        """
        ...


def normalize_query(query: str | None, min_length: int) -> str | None:
    """Trim the query; None when it is too short to search."""
    if not isinstance(query, str):
        return None
    normalized = query.strip()
    if not normalized or len(normalized) < min_length:
        return None
    return normalized


def lookup_search(
    func: Callable[[Any, str, int], Awaitable[list[Entity | None]]],
) -> Callable[..., Awaitable[list[Entity]]]:
    """
    Wrap a connector's search implementation with the shared contract.

    The wrapped method receives an already trimmed query and a positive limit.
    Short queries and non-positive limits return [] without touching the network;
    dropped records (None) are filtered; the result is cut to ``limit``; any
    unexpected exception is logged and turned into [].
    """

    @functools.wraps(func)
    async def wrapper(self: Any, query: str | None, limit: int | None = None) -> list[Entity]:
        normalized = normalize_query(query, self.MIN_QUERY_LENGTH)
        if normalized is None:
            logger.debug(
                "lookup_query_rejected",
                extra={"connector": self.name, "min_length": self.MIN_QUERY_LENGTH},
            )
            return []
        max_results = self.DEFAULT_LIMIT if limit is None else int(limit)
        if max_results <= 0:
            return []

        start_time = time.monotonic()
        logger.info(
            "lookup_search_start",
            extra={"connector": self.name, "query": normalized, "limit": max_results},
        )
        try:
            found = await func(self, normalized, max_results)
        except Exception:
            logger.exception(
                "lookup_search_error",
                extra={"connector": self.name, "query": normalized},
            )
            return []

        results = [entity for entity in found if entity][:max_results]
        logger.info(
            "lookup_search_complete",
            extra={
                "connector": self.name,
                "query": normalized,
                "count": len(results),
                "duration_ms": int((time.monotonic() - start_time) * 1000),
            },
        )
        return results

    return wrapper


async def collect_in_batches(
    candidates: Sequence[C],
    resolve: Callable[[C], Awaitable[Entity | None]],
    limit: int,
) -> list[Entity]:
    """
    Resolve candidates concurrently, ``limit`` at a time, until ``limit`` hits.

    Order follows ``candidates``; candidates resolving to None are skipped.
    """
    results: list[Entity] = []
    for start in range(0, len(candidates), limit):
        if len(results) >= limit:
            break
        batch = candidates[start : start + limit]
        resolved = await asyncio.gather(*(resolve(candidate) for candidate in batch))
        for entity in resolved:
            if entity and len(results) < limit:
                results.append(entity)
    return results


def clamp(value: int, lower: int, upper: int) -> int:
    return min(max(value, lower), upper)


def as_str(value: Any) -> str | None:
    """Trimmed string or None."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None
