"""
AOP-Wiki connector for adverse outcome pathways.

Index: {base}/aops.json, detail: {base}/aops/<id>.json
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from linkedlookup_connectors.aopwiki_store import AOPWIKI_ORIGIN, AopWikiStore, aopwiki_url, page_url
from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector, clean_entity
from linkedlookup_connectors.text import contains_text, strip_html

AOP_PATTERNS = (
    pattern(r"(\d+)"),
    pattern(r"aop[-_:\s]*(\d+)", search=True),
)

SEARCH_FIELDS = ("title", "short_name", "abstract")


def relationship_label(upstream: str | None, downstream: str | None, relation_id: Any) -> str | None:
    if upstream and downstream:
        return f"{upstream} → {downstream}"
    if relation_id:
        return f"Relationship {relation_id}"
    return None


def map_events(events: Any) -> list[Entity]:
    mapped = []
    for item in events or []:
        if not isinstance(item, dict):
            continue
        event = clean_entity(
            {
                "@id": aopwiki_url("events", item["event_id"]) if item.get("event_id") else None,
                "name": as_str(item.get("event")),
                "eventType": as_str(item.get("event_type")),
            }
        )
        if event.get("@id") or event.get("name"):
            mapped.append(event)
    return mapped


def map_relationships(relationships: Any) -> list[Entity]:
    mapped = []
    for rel in relationships or []:
        if not isinstance(rel, dict):
            continue
        upstream = as_str(rel.get("upstream_event"))
        downstream = as_str(rel.get("downstream_event"))
        relation = rel.get("relation")
        entry = clean_entity(
            {
                "@id": aopwiki_url("relationships", relation) if relation else None,
                "name": relationship_label(upstream, downstream, relation),
                "upstream_event": upstream,
                "downstream_event": downstream,
            }
        )
        if entry.get("@id") or entry.get("name"):
            mapped.append(entry)
    return mapped


class AopWikiConnector:
    """Connector for AOP-Wiki adverse outcome pathways."""

    name = "aopwiki"
    DEFAULT_TYPE = "AdverseOutcomePathway"
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
        self.store = AopWikiStore(self.client, self.base_url, "aops")

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        documents = await self.store.index()

        aop_id = classify(query, AOP_PATTERNS)
        if aop_id:
            direct = await self.store.find(aop_id)
            if direct:
                return [self.project(await self.format_entry(direct))]
            if not self.config.fallback_to_search:
                return []

        matches = []
        for doc in documents:
            if len(matches) >= limit:
                break
            if not isinstance(doc, dict) or not doc.get("id"):
                continue
            if contains_text([doc.get(f) for f in SEARCH_FIELDS], query):
                matches.append(doc)
        formatted = await asyncio.gather(*(self.format_entry(doc) for doc in matches))
        return [self.project(entry) for entry in formatted]

    async def format_entry(self, doc: dict) -> Entity | None:
        if not doc.get("id"):
            return None
        detail = await self.store.detail(doc["id"]) or {}
        id_url = aopwiki_url("aops", doc["id"])
        title = as_str(doc.get("title"))
        alt_title = as_str(doc.get("short_name"))
        abstract = strip_html(doc.get("abstract")) or None
        author = detail.get("corresponding_author")
        return {
            "@id": id_url,
            "@type": self.type,
            "name": title or alt_title,
            "label": alt_title or title,
            "title": title,
            "short_name": alt_title,
            "alternative": alt_title if alt_title and title and alt_title != title else None,
            "identifier": id_url,
            "page": id_url,
            "source": detail.get("source"),
            "created": detail.get("created_at"),
            "modified": detail.get("updated_at"),
            "creator": author.get("id") if isinstance(author, dict) else None,
            "abstract": abstract,
            "description": abstract,
            "has_molecular_initiating_event": map_events(detail.get("aop_mies")),
            "has_key_event": map_events(detail.get("aop_kes")),
            "has_adverse_outcome": map_events(detail.get("aop_aos")),
            "has_key_event_relationship": map_relationships(detail.get("relationships")),
            "url": page_url(doc, id_url),
        }
