"""
PubChem connector for compound lookup.

API: https://pubchem.ncbi.nlm.nih.gov/rest/
Free text goes through the autocomplete dictionary, then each suggestion is
resolved to compound properties concurrently.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.singleflight import SingleFlight

CID_PATTERNS = (
    pattern(r"https?://pubchem\.ncbi\.nlm\.nih\.gov/compound/(\d+)/?"),
    pattern(r"(?:pubchem\s*)?cid[:\s]*(\d+)"),
    pattern(r"(\d+)"),
)

PROPERTIES = "Title,InChI,InChIKey,MolecularFormula,MolecularWeight,IsomericSMILES"
MAX_SYNONYMS = 10


class PubChemConnector:
    """
    Connector for PubChem PUG REST.

    Features:
    - CID resolution (bare number, ``CID 2244``, compound URL)
    - Autocomplete-driven free text search
    - Synonym lists memoized per CID
    """

    name = "pubchem"
    DEFAULT_TYPE = "ChemicalSubstance"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    DEFAULT_BASE_URL = "https://pubchem.ncbi.nlm.nih.gov"
    RELAY_SLUG = "pubchem"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)
        self._synonyms: SingleFlight[list[str]] = SingleFlight()

    @property
    def pug_base(self) -> str:
        return f"{self.base_url}/rest/pug/compound"

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        cid = classify(query, CID_PATTERNS)
        if cid:
            entity = await self.get_by_id(cid)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        suggestions = await self.fetch_suggestions(query, limit)
        if not suggestions:
            return [self.project(await self.fetch_compound("name", query))]

        records = await asyncio.gather(
            *(self.fetch_compound("name", name) for name in suggestions[:limit])
        )
        seen: set[Any] = set()
        results: list[Entity | None] = []
        for record in records:
            if not record or record["cid"] in seen:
                continue
            seen.add(record["cid"])
            results.append(self.project(record))
        return results

    async def get_by_id(self, cid: str) -> Entity | None:
        return self.project(await self.fetch_compound("cid", cid))

    async def fetch_suggestions(self, query: str, limit: int) -> list[str]:
        payload = await self.client.fetch_json(
            f"{self.base_url}/rest/autocomplete/compound/{quote(query, safe='')}/json",
            params={"limit": limit},
        )
        if not isinstance(payload, dict):
            return []
        names = (payload.get("dictionary_terms") or {}).get("compound") or []
        return [name.strip() for name in names if as_str(name)]

    async def fetch_compound(self, namespace: str, identifier: str) -> Entity | None:
        """Properties plus synonyms for one compound; None when PubChem has no CID for it."""
        payload = await self.client.fetch_json(
            f"{self.pug_base}/{namespace}/{quote(str(identifier), safe='')}/property/{PROPERTIES}/JSON"
        )
        properties = (payload.get("PropertyTable") or {}).get("Properties") if isinstance(payload, dict) else None
        prop = properties[0] if isinstance(properties, list) and properties else None
        if not isinstance(prop, dict) or not prop.get("CID"):
            return None

        cid = prop["CID"]
        synonyms = await self.fetch_synonyms(cid)
        return {
            "@id": f"https://pubchem.ncbi.nlm.nih.gov/compound/{cid}",
            "@type": self.type,
            "name": as_str(prop.get("Title")) or (identifier if namespace == "name" else None),
            "synonym": synonyms,
            "inchi": as_str(prop.get("InChI")),
            "inchikey": as_str(prop.get("InChIKey")),
            "formula": as_str(prop.get("MolecularFormula")),
            "mass": _to_float(prop.get("MolecularWeight")),
            "smiles": as_str(prop.get("IsomericSMILES")) or as_str(prop.get("SMILES")),
            "cid": cid,
        }

    async def fetch_synonyms(self, cid: Any) -> list[str]:
        return await self._synonyms.get_or_fetch(str(cid), lambda: self._load_synonyms(cid))

    async def _load_synonyms(self, cid: Any) -> list[str]:
        payload = await self.client.fetch_json(f"{self.pug_base}/cid/{quote(str(cid), safe='')}/synonyms/JSON")
        information = (payload.get("InformationList") or {}).get("Information") if isinstance(payload, dict) else None
        if not isinstance(information, list) or not information:
            return []
        synonyms = information[0].get("Synonym") if isinstance(information[0], dict) else None
        return [s for s in synonyms or [] if as_str(s)][:MAX_SYNONYMS]


def _to_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None
