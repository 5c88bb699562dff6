"""
Media-type connector backed by the mime-db JSON table.

Data: https://github.com/jshttp/mime-db (pinned release served by jsDelivr)
The whole table is downloaded once per connector and scanned locally.
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.singleflight import SingleFlight

MEDIA_TYPE_PATTERNS = (pattern(r"([\w.+-]+/[\w.+-]+)", lambda m: m.group(1).lower()),)


class MediaTypeConnector:
    """Connector for IANA/Apache/nginx media types as collected by mime-db."""

    name = "mimetypes"
    DEFAULT_TYPE = "MediaType"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 1
    DEFAULT_BASE_URL = "https://cdn.jsdelivr.net/gh/jshttp/mime-db@1.52.0/db.json"
    RELAY_SLUG = None

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.table_url = self.config.base_url or self.DEFAULT_BASE_URL
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)
        self._table: SingleFlight[dict[str, Any]] = SingleFlight()

    async def ensure_table(self) -> dict[str, Any]:
        return await self._table.get_or_fetch("table", self._load_table)

    async def _load_table(self) -> dict[str, Any]:
        payload = await self.client.fetch_json(self.table_url)
        return payload if isinstance(payload, dict) else {}

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        table = await self.ensure_table()

        media_type = classify(query, MEDIA_TYPE_PATTERNS)
        if media_type and media_type in table:
            return [self.project(self.format_entry(media_type, table[media_type]))]
        if media_type and not self.config.fallback_to_search:
            return []

        needle = query.lower()
        matches: list[Entity | None] = []
        for mime, meta in table.items():
            if len(matches) >= limit:
                break
            haystack = [mime, *_extensions(meta)]
            if any(needle in value.lower() for value in haystack):
                entity = self.project(self.format_entry(mime, meta))
                if entity:
                    matches.append(entity)
        return matches

    def format_entry(self, mime: str, meta: Any) -> Entity | None:
        if not as_str(mime):
            return None
        meta = meta if isinstance(meta, dict) else {}
        source = as_str(meta.get("source"))
        return {
            "@id": f"urn:mimetype:{mime}",
            "@type": self.type,
            "name": mime,
            "description": f"Source: {source}" if source else None,
            "extensions": _extensions(meta),
            "charset": as_str(meta.get("charset")),
            "compressible": meta.get("compressible") if isinstance(meta.get("compressible"), bool) else None,
        }


def _extensions(meta: Any) -> list[str]:
    if not isinstance(meta, dict):
        return []
    return [f".{ext}" for ext in meta.get("extensions") or [] if as_str(ext)]
