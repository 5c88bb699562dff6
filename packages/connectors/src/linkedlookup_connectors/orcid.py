"""
ORCID connector for researcher lookup.

API: https://pub.orcid.org/v3.0/expanded-search/
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, clamp, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector

ORCID_ID = r"(\d{4}-\d{4}-\d{4}-\d{3}[\dX])"

ORCID_PATTERNS = (
    pattern(r"https?://(?:www\.)?orcid\.org/" + ORCID_ID + r"/?", lambda m: m.group(1).upper()),
    pattern(r"(?:orcid:\s*)?" + ORCID_ID, lambda m: m.group(1).upper()),
)

MAX_AFFILIATIONS = 5


class OrcidConnector:
    """
    Connector for the ORCID public API expanded search.

    An ORCID iD (bare or as URL) is resolved with an ``orcid:`` field query.
    """

    name = "orcid"
    DEFAULT_TYPE = "Person"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    MAX_ROWS = 50
    DEFAULT_BASE_URL = "https://pub.orcid.org"
    RELAY_SLUG = "orcid"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)

    @property
    def search_url(self) -> str:
        return f"{self.base_url}/v3.0/expanded-search/"

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        orcid_id = classify(query, ORCID_PATTERNS)
        if orcid_id:
            entity = await self.get_by_id(orcid_id)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        rows = clamp(limit, 1, self.MAX_ROWS)
        entries = await self._expanded_search(query, rows)
        return [self.project(self.format_entry(entry)) for entry in entries[:limit]]

    async def get_by_id(self, orcid_id: str) -> Entity | None:
        for entry in await self._expanded_search(f"orcid:{orcid_id}", 1):
            if isinstance(entry, dict) and entry.get("orcid-id") == orcid_id:
                return self.project(self.format_entry(entry))
        return None

    async def _expanded_search(self, q: str, rows: int) -> list[Any]:
        payload = await self.client.fetch_json(self.search_url, params={"q": q, "rows": rows})
        results = payload.get("expanded-result") if isinstance(payload, dict) else None
        return results if isinstance(results, list) else []

    def format_entry(self, entry: Any) -> Entity | None:
        if not isinstance(entry, dict):
            return None
        orcid_id = as_str(entry.get("orcid-id"))
        if not orcid_id:
            return None
        given = as_str(entry.get("given-names"))
        family = as_str(entry.get("family-names"))
        display = " ".join(part for part in (given, family) if part)
        institutions = [name for name in entry.get("institution-name") or [] if as_str(name)]
        return {
            "@id": f"https://orcid.org/{orcid_id}",
            "@type": self.type,
            "name": display or orcid_id,
            "givenName": given,
            "familyName": family,
            "orcidId": orcid_id,
            "affiliation": institutions[:MAX_AFFILIATIONS],
        }
