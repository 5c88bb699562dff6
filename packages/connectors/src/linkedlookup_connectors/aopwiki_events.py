"""
AOP-Wiki connector for key events.

Index: {base}/events.json, detail: {base}/events/<id>.json
"""

from __future__ import annotations

import asyncio

import httpx

from linkedlookup_connectors.aopwiki_store import AOPWIKI_ORIGIN, AopWikiStore, aopwiki_url, page_url
from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.text import contains_text

EVENT_PATTERNS = (
    pattern(r"(\d+)"),
    pattern(r"(?:ke|event|mie)[-_:\s]*(\d+)", search=True),
)

MOLECULAR_INITIATING_EVENT = "Molecular Initiating Event"
KEY_EVENT = "Key Event"


def biological_level(doc: dict, detail: dict) -> str | None:
    organization = doc.get("biological_organization")
    if isinstance(organization, dict):
        return as_str(organization.get("term"))
    return as_str(organization) or as_str(detail.get("biological_organization"))


class AopWikiEventsConnector:
    """Connector for AOP-Wiki key events (KE / MIE / AO)."""

    name = "aopwikiEvents"
    DEFAULT_TYPE = "AopEvent"
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
        self.store = AopWikiStore(self.client, self.base_url, "events")

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        events = await self.store.index()

        event_id = classify(query, EVENT_PATTERNS)
        if event_id:
            match = await self.store.find(event_id)
            if match:
                return [self.project(await self.format_entry(match))]
            if not self.config.fallback_to_search:
                return []

        results = []
        for doc in events:
            if len(results) >= limit:
                break
            if not isinstance(doc, dict) or not doc.get("id"):
                continue
            if contains_text([doc.get("title"), doc.get("short_name"), biological_level(doc, {})], query):
                results.append(doc)
        formatted = await asyncio.gather(*(self.format_entry(doc) for doc in results))
        return [self.project(entry) for entry in formatted]

    async def format_entry(self, doc: dict) -> Entity | None:
        if not doc.get("id"):
            return None
        detail = await self.store.detail(doc["id"]) or {}
        id_url = aopwiki_url("events", doc["id"])
        title = as_str(doc.get("title"))
        short_name = as_str(doc.get("short_name"))
        return {
            "@id": id_url,
            "@type": self.type,
            "name": title or short_name,
            "short_name": short_name or title,
            "identifier": id_url,
            "eventType": MOLECULAR_INITIATING_EVENT if detail.get("molecular_initiating_event") else KEY_EVENT,
            "biologicalOrganization": biological_level(doc, detail),
            "url": page_url(doc, id_url),
        }
