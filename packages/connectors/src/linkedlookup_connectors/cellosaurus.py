"""
Cellosaurus connector for cell-line lookup.

API: https://api.cellosaurus.org/
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.text import unique_strings

ACCESSION_PATTERNS = (
    pattern(r"https?://(?:www\.)?cellosaurus\.org/(CVCL_[A-Z0-9]{4})/?", lambda m: m.group(1).upper()),
    pattern(r"CVCL[_:\-\s]?([A-Z0-9]{4})", lambda m: f"CVCL_{m.group(1).upper()}"),
)


def primary_value(entries: Any, preferred_type: str = "primary") -> str | None:
    """Value of the entry with ``preferred_type``, else of the first entry."""
    if not isinstance(entries, list) or not entries:
        return None
    preferred = next(
        (e for e in entries if isinstance(e, dict) and e.get("type") == preferred_type),
        None,
    )
    chosen = preferred or entries[0]
    return as_str(chosen.get("value")) if isinstance(chosen, dict) else None


class CellosaurusConnector:
    """Connector for the Cellosaurus cell-line knowledge resource."""

    name = "cellosaurus"
    DEFAULT_TYPE = "CellLine"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    DEFAULT_BASE_URL = "https://api.cellosaurus.org"
    RELAY_SLUG = "cellosaurus"
    ENTITY_BASE = "https://www.cellosaurus.org"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        accession = classify(query, ACCESSION_PATTERNS)
        if accession:
            entity = await self.get_by_id(accession)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        payload = await self.client.fetch_json(
            f"{self.base_url}/search/cell-line",
            params={"q": query, "rows": limit},
        )
        return [self.project(self.format_entry(entry)) for entry in _cell_lines(payload)]

    async def get_by_id(self, accession: str) -> Entity | None:
        payload = await self.client.fetch_json(
            f"{self.base_url}/cell-line/{accession}",
            params={"format": "json"},
        )
        for entry in _cell_lines(payload):
            entity = self.project(self.format_entry(entry))
            if entity:
                return entity
        return None

    def format_entry(self, entry: Any) -> Entity | None:
        if not isinstance(entry, dict):
            return None
        accession = primary_value(entry.get("accession-list"))
        if not accession:
            return None
        names = entry.get("name-list") or []
        synonyms = [
            n.get("value") for n in names if isinstance(n, dict) and n.get("type") == "synonym"
        ]
        species = [
            item.get("label") or item.get("accession") or item.get("value")
            for item in entry.get("species-list") or []
            if isinstance(item, dict)
        ]
        diseases = [
            item.get("label") or item.get("value")
            for item in entry.get("disease-list") or []
            if isinstance(item, dict)
        ]
        return {
            "@id": f"{self.ENTITY_BASE}/{accession}",
            "@type": self.type,
            "name": primary_value(names, "identifier"),
            "accession": accession,
            "synonym": unique_strings(synonyms),
            "species": unique_strings(species),
            "category": as_str(entry.get("category")),
            "disease": unique_strings(diseases),
        }


def _cell_lines(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        return []
    entries = (payload.get("Cellosaurus") or {}).get("cell-line-list")
    return entries if isinstance(entries, list) else []
