"""
Shared access to AOP-Wiki JSON exports.

AOP-Wiki publishes one index document per collection (``aops.json``,
``events.json``, ``relationships.json``) and one detail document per item
(``<collection>/<id>.json``). The index is fetched once per store and each
detail at most once, both through ``SingleFlight``.
"""

from __future__ import annotations

import asyncio
from typing import Any

from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.singleflight import SingleFlight

AOPWIKI_ORIGIN = "https://aopwiki.org"


def aopwiki_url(collection: str, item_id: Any) -> str:
    """Public page URL used as ``@id``."""
    return f"{AOPWIKI_ORIGIN}/{collection}/{item_id}"


class AopWikiStore:
    def __init__(self, client: UpstreamClient, base_url: str, collection: str):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.collection = collection
        self._index: SingleFlight[list[Any]] = SingleFlight()
        self._details: SingleFlight[dict | None] = SingleFlight()

    async def index(self) -> list[Any]:
        return await self._index.get_or_fetch(self.collection, self._load_index)

    async def _load_index(self) -> list[Any]:
        return await self.client.fetch_list(f"{self.base_url}/{self.collection}.json")

    async def find(self, item_id: str) -> dict | None:
        """Index entry whose id equals ``item_id``."""
        for doc in await self.index():
            if isinstance(doc, dict) and str(doc.get("id")) == item_id:
                return doc
        return None

    def detail(self, item_id: Any) -> asyncio.Future[dict | None]:
        key = str(item_id)
        return self._details.get_or_fetch(key, lambda: self._load_detail(key))

    async def _load_detail(self, key: str) -> dict | None:
        payload = await self.client.fetch_json(f"{self.base_url}/{self.collection}/{key}.json")
        return payload if isinstance(payload, dict) else None


def page_url(doc: dict, fallback: str) -> str:
    """Index ``url`` without its ``.json`` suffix, else ``fallback``."""
    url = doc.get("url")
    if isinstance(url, str) and url.strip():
        url = url.strip()
        return url[: -len(".json")] if url.endswith(".json") else url
    return fallback
