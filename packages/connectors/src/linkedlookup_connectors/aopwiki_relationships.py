"""
AOP-Wiki connector for key event relationships (KERs).

Index: {base}/relationships.json, detail: {base}/relationships/<id>.json

The index carries no event names, so free text search has to read details.
They are loaded in concurrent batches of ``limit`` until enough match.
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.aopwiki import relationship_label
from linkedlookup_connectors.aopwiki_store import AOPWIKI_ORIGIN, AopWikiStore, aopwiki_url
from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, collect_in_batches, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.text import contains_text

RELATIONSHIP_PATTERNS = (
    pattern(r"(\d+)"),
    pattern(r"(?:ker|relationship)[-_:\s]*(\d+)", search=True),
)


def event_names(detail: dict) -> tuple[str | None, str | None]:
    events = detail.get("events") if isinstance(detail.get("events"), dict) else {}
    upstream = events.get("upstream_event") or {}
    downstream = events.get("downstream_event") or {}
    return (
        as_str(upstream.get("name")) if isinstance(upstream, dict) else None,
        as_str(downstream.get("name")) if isinstance(downstream, dict) else None,
    )


class AopWikiRelationshipsConnector:
    """Connector for AOP-Wiki key event relationships."""

    name = "aopwikiRelationships"
    DEFAULT_TYPE = "AopEventRelationship"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    DEFAULT_BASE_URL = AOPWIKI_ORIGIN
    RELAY_SLUG = "aopwiki"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)
        self.store = AopWikiStore(self.client, self.base_url, "relationships")

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        relationship_id = classify(query, RELATIONSHIP_PATTERNS)
        if relationship_id:
            entity = await self.get_by_id(relationship_id)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        index = [meta for meta in await self.store.index() if isinstance(meta, dict) and meta.get("id")]

        async def resolve(meta: dict) -> Entity | None:
            detail = await self.store.detail(meta["id"])
            if not detail or not contains_text(list(event_names(detail)), query):
                return None
            return self.project(self.format_entry(detail))

        return await collect_in_batches(index, resolve, limit)

    async def get_by_id(self, relationship_id: str) -> Entity | None:
        return self.project(self.format_entry(await self.store.detail(relationship_id)))

    def format_entry(self, detail: Any) -> Entity | None:
        if not isinstance(detail, dict) or not detail.get("id"):
            return None
        upstream, downstream = event_names(detail)
        id_url = aopwiki_url("relationships", detail["id"])
        return {
            "@id": id_url,
            "@type": self.type,
            "name": relationship_label(upstream, downstream, detail["id"]),
            "description": f"{upstream or 'Unknown upstream'} to {downstream or 'unknown downstream'} relationship",
            "identifier": id_url,
            "upstream_event": upstream,
            "downstream_event": downstream,
            "url": id_url,
        }
