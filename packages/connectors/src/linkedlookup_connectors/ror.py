"""
ROR connector for research organization lookup.

API: https://api.ror.org/v2/organizations
The v2 search endpoint returns pages of 20 and ignores custom page sizes.
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, clamp, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector

ROR_ID = r"(0[a-z0-9]{6}\d{2})"

ROR_ID_PATTERNS = (
    pattern(r"https?://(?:www\.)?ror\.org/" + ROR_ID + r"/?"),
    pattern(r"ror:\s*" + ROR_ID),
    pattern(ROR_ID),
)


class RorConnector:
    """
    Connector for the Research Organization Registry.

    Features:
    - ROR id / ROR URL resolution
    - v2 display names with v1 fallbacks
    """

    name = "ror"
    DEFAULT_TYPE = "Organization"
    DEFAULT_LIMIT = 20
    MIN_QUERY_LENGTH = 2
    MAX_RESULTS = 20
    DEFAULT_BASE_URL = "https://api.ror.org"
    RELAY_SLUG = "ror"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        ror_id = classify(query, ROR_ID_PATTERNS)
        if ror_id:
            entity = await self.get_by_id(ror_id)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        payload = await self.client.fetch_json(
            f"{self.base_url}/v2/organizations",
            params={"query": query, "page": 1},
        )
        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []
        size = clamp(limit, 1, self.MAX_RESULTS)
        return [self.project(self.format_item(item)) for item in items[:size]]

    async def get_by_id(self, ror_id: str) -> Entity | None:
        item = await self.client.fetch_json(f"{self.base_url}/v2/organizations/{ror_id.lower()}")
        return self.project(self.format_item(item))

    def format_item(self, item: Any) -> Entity | None:
        """Map a ROR organization record; None without an id."""
        if not isinstance(item, dict) or not as_str(item.get("id")):
            return None
        return {
            "@id": item["id"].strip(),
            "@type": self.type,
            "name": _display_name(item),
            "alternateName": _alternate_names(item),
            "url": _website(item),
            "foundingDate": str(item["established"]) if item.get("established") else None,
            "addressCountry": _country(item),
        }


def _names_of_type(item: dict, name_type: str) -> list[str]:
    names = []
    for entry in item.get("names") or []:
        if isinstance(entry, dict) and name_type in (entry.get("types") or []):
            value = as_str(entry.get("value"))
            if value:
                names.append(value)
    return names


def _display_name(item: dict) -> str | None:
    display = _names_of_type(item, "ror_display")
    if display:
        return display[0]
    return as_str(item.get("name"))


def _alternate_names(item: dict) -> list[str]:
    names = _names_of_type(item, "alias") + _names_of_type(item, "acronym")
    if not names:
        # v1 records
        names = [n for n in (item.get("aliases") or []) + (item.get("acronyms") or []) if as_str(n)]
    return names


def _website(item: dict) -> str | None:
    for link in item.get("links") or []:
        if isinstance(link, dict) and link.get("type") == "website":
            return as_str(link.get("value"))
        if isinstance(link, str):
            return as_str(link)
    return None


def _country(item: dict) -> str | None:
    for location in item.get("locations") or []:
        details = location.get("geonames_details") if isinstance(location, dict) else None
        if isinstance(details, dict) and as_str(details.get("country_name")):
            return details["country_name"].strip()
    country = item.get("country")
    if isinstance(country, dict):
        return as_str(country.get("country_name"))
    return None
