"""
Upstream HTTP client shared by every connector.

One call is exactly one GET. Failures never escape ``fetch_json``/``fetch_list``:
non-2xx statuses, transport errors and undecodable bodies are logged and turned
into ``None`` (or ``[]`` for listing endpoints).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from linkedlookup_connectors.base import (
    ConnectorConfig,
    ConnectorError,
    UpstreamParseError,
    UpstreamStatusError,
    UpstreamTransportError,
)

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = "application/json"


class UpstreamClient:
    """
    Async GET-only JSON client.

    Uses the injected ``http_client`` when given (tests, shared pools); otherwise
    opens a short-lived ``httpx.AsyncClient`` per request.
    """

    def __init__(
        self,
        connector: str,
        config: ConnectorConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.connector = connector
        self.timeout_seconds = config.timeout_seconds
        self.headers = {"Accept": DEFAULT_ACCEPT, **config.headers}
        self.http_client = http_client

    async def fetch_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any | None:
        """GET ``url`` and decode JSON; None on any failure."""
        try:
            return await self._get(url, params=params, headers=headers)
        except ConnectorError as e:
            logger.warning(
                "connector_fetch_failed",
                extra={"connector": self.connector, "url": url, "error": str(e)},
            )
            return None

    async def fetch_list(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> list[Any]:
        """GET a JSON array; [] on failure or when the body is not a list."""
        payload = await self.fetch_json(url, params=params, headers=headers)
        return payload if isinstance(payload, list) else []

    async def _get(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Perform the request.

        Raises:
            UpstreamStatusError: non-2xx response
            UpstreamTransportError: network error or timeout
            UpstreamParseError: body is not JSON
        """
        request_headers = {**self.headers, **(headers or {})}
        logger.info(
            "connector_request",
            extra={"connector": self.connector, "method": "GET", "url": url},
        )
        try:
            if self.http_client is not None:
                response = await self.http_client.get(
                    url, params=params, headers=request_headers, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(url, params=params, headers=request_headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "connector_http_error",
                extra={
                    "connector": self.connector,
                    "url": url,
                    "status_code": e.response.status_code,
                },
            )
            raise UpstreamStatusError(url, e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning(
                "connector_transport_error",
                extra={"connector": self.connector, "url": url, "error": repr(e)},
            )
            raise UpstreamTransportError(f"Request to {url} failed: {e!r}") from e

        logger.info(
            "connector_response",
            extra={
                "connector": self.connector,
                "url": url,
                "status_code": response.status_code,
            },
        )
        try:
            return response.json()
        except ValueError as e:
            content_type = response.headers.get("content-type", "unknown")
            logger.warning(
                "connector_parse_error",
                extra={
                    "connector": self.connector,
                    "url": url,
                    "content_type": content_type,
                    "preview": response.text[:200],
                },
            )
            raise UpstreamParseError(f"Unexpected response from {url} (content-type: {content_type})") from e
