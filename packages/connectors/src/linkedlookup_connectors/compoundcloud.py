"""
Compound Cloud connector (Wikibase instance for toxicology-relevant chemicals).

Endpoints:
- SPARQL: {base}/query/sparql
- Entity data: {base}/wiki/Special:EntityData/<Q>.json

Search finds candidate items with SPARQL, then resolves each item's claims
through the entity-data endpoint. Claims are keyed by property codes; the
``PROPERTY_MAP`` table turns them into named chemical identifier fields.
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import httpx

from linkedlookup_connectors.base import (
    ConnectorConfig,
    Entity,
    as_str,
    clamp,
    collect_in_batches,
    lookup_search,
)
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.singleflight import SingleFlight
from linkedlookup_connectors.text import unique_strings

ENTITY_BASE = "https://compoundcloud.wikibase.cloud/entity"
DEFAULT_LANGUAGE = "en"
MAX_SYNONYMS = 20

PROPERTY_MAP = {
    "inchi": "P9",
    "inchikey": "P10",
    "smiles": "P12",
    "formula": "P3",
    "mass": "P2",
    "cas": "P23",
    "pubchemCid": "P13",
    "dsstoxId": "P22",
    "keggId": "P27",
    "chebiId": "P28",
    "chemblId": "P41",
    "ecNumber": "P43",
    "echaInfocardId": "P44",
    "aopWikiStressorId": "P36",
}

# Fields holding a single string claim, in output order.
STRING_FIELDS = (
    "inchi",
    "inchikey",
    "smiles",
    "formula",
)
IDENTIFIER_FIELDS = (
    "pubchemCid",
    "dsstoxId",
    "keggId",
    "chebiId",
    "chemblId",
    "ecNumber",
    "echaInfocardId",
    "aopWikiStressorId",
)

ITEM_PATTERNS = (
    pattern(r"https?://compoundcloud\.wikibase\.cloud/(?:entity|wiki/Item:?)/(Q\d+)/?", lambda m: m.group(1).upper()),
    pattern(r"(?:wd:|item:)?(Q\d+)", lambda m: m.group(1).upper()),
)

SPARQL_ACCEPT = "application/sparql-results+json, application/json"


def escape_sparql_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_search_query(search_term: str, limit: int) -> str:
    """Case-insensitive label / English alias containment query."""
    lowered = escape_sparql_string(search_term.lower())
    return f"""
SELECT DISTINCT ?item ?itemLabel ?description
WHERE {{
  ?item rdfs:label ?itemLabel .

  OPTIONAL {{ ?item schema:description ?description FILTER(LANG(?description) = "{DEFAULT_LANGUAGE}") }}
  FILTER(
    CONTAINS(LCASE(?itemLabel), "{lowered}") ||
    EXISTS {{
      ?item skos:altLabel ?synonymSearch .
      FILTER(
        LANG(?synonymSearch) = "{DEFAULT_LANGUAGE}" &&
        CONTAINS(LCASE(?synonymSearch), "{lowered}")
      )
    }}
  )
}}
ORDER BY LCASE(?itemLabel)
LIMIT {min(limit * 10, 200)}
"""


def claim_values(claims: dict, property_id: str) -> list[Any]:
    values = []
    for statement in claims.get(property_id) or []:
        if not isinstance(statement, dict):
            continue
        value = ((statement.get("mainsnak") or {}).get("datavalue") or {}).get("value")
        if value is not None:
            values.append(value)
    return values


def first_string_claim(claims: dict, property_id: str) -> str | None:
    return next((v for v in claim_values(claims, property_id) if isinstance(v, str)), None)


def quantity_claim(claims: dict, property_id: str) -> float | None:
    for value in claim_values(claims, property_id):
        if isinstance(value, dict) and "amount" in value:
            try:
                return float(value["amount"])
            except (TypeError, ValueError):
                return None
    return None


def entity_label(entity: dict, language: str, fallback: str | None) -> str | None:
    labels = entity.get("labels") or {}
    preferred = as_str((labels.get(language) or {}).get("value"))
    if preferred:
        return preferred
    if fallback:
        return fallback
    for label in labels.values():
        if isinstance(label, dict) and as_str(label.get("value")):
            return label["value"].strip()
    return None


def entity_aliases(entity: dict) -> list[str]:
    values = []
    for group in (entity.get("aliases") or {}).values():
        for alias in group or []:
            if isinstance(alias, dict):
                values.append(alias.get("value"))
    return unique_strings(values)


class CompoundCloudConnector:
    """Connector for the Compound Cloud Wikibase."""

    name = "compoundcloud"
    DEFAULT_TYPE = "ChemicalSubstance"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    DEFAULT_BASE_URL = "https://compoundcloud.wikibase.cloud"
    RELAY_SLUG = "compoundcloud"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)
        self._entities: SingleFlight[dict | None] = SingleFlight()

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        item_id = classify(query, ITEM_PATTERNS)
        if item_id:
            entity = await self.get_by_id(item_id)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        candidates = await self.fetch_candidates(query, limit)
        return await collect_in_batches(candidates, self._resolve_candidate, limit)

    async def _resolve_candidate(self, candidate: dict[str, Any]) -> Entity | None:
        entity = await self.fetch_entity(candidate["wikibaseId"])
        return self.project(self.build_record(entity, candidate)) if entity else None

    async def get_by_id(self, item_id: str) -> Entity | None:
        entity = await self.fetch_entity(item_id)
        return self.project(self.build_record(entity)) if entity else None

    async def fetch_candidates(self, search_term: str, limit: int) -> list[dict[str, Any]]:
        """Distinct SPARQL hits in result order."""
        sparql = build_search_query(search_term, clamp(limit, 1, 100))
        payload = await self.client.fetch_json(
            f"{self.base_url}/query/sparql",
            params={"query": sparql, "format": "json"},
            headers={"Accept": SPARQL_ACCEPT},
        )
        bindings = (payload.get("results") or {}).get("bindings") if isinstance(payload, dict) else None
        seen: dict[str, dict[str, Any]] = {}
        for binding in bindings or []:
            item_uri = as_str(((binding or {}).get("item") or {}).get("value"))
            if not item_uri or item_uri in seen:
                continue
            wikibase_id = item_uri.replace(f"{ENTITY_BASE}/", "").strip()
            if not wikibase_id:
                continue
            seen[item_uri] = {
                "id": item_uri,
                "wikibaseId": wikibase_id,
                "label": as_str((binding.get("itemLabel") or {}).get("value")),
                "description": as_str((binding.get("description") or {}).get("value")),
            }
        return list(seen.values())

    def fetch_entity(self, item_id: str) -> asyncio.Future[dict | None]:
        return self._entities.get_or_fetch(item_id, lambda: self._load_entity(item_id))

    async def _load_entity(self, item_id: str) -> dict | None:
        payload = await self.client.fetch_json(
            f"{self.base_url}/wiki/Special:EntityData/{quote(item_id, safe='')}.json"
        )
        entities = payload.get("entities") if isinstance(payload, dict) else None
        entity = entities.get(item_id) if isinstance(entities, dict) else None
        return entity if isinstance(entity, dict) else None

    def build_record(self, entity: dict, metadata: dict[str, Any] | None = None) -> Entity | None:
        """Map a Wikibase entity document; None without id or any label."""
        metadata = metadata or {}
        if not as_str(entity.get("id")):
            return None
        name = entity_label(entity, DEFAULT_LANGUAGE, metadata.get("label"))
        if not name:
            return None
        claims = entity.get("claims") or {}
        descriptions = entity.get("descriptions") or {}

        record: Entity = {
            "@id": f"{ENTITY_BASE}/{entity['id']}",
            "@type": self.type,
            "name": name,
            "description": metadata.get("description")
            or as_str((descriptions.get(DEFAULT_LANGUAGE) or {}).get("value")),
            "synonym": entity_aliases(entity)[:MAX_SYNONYMS],
        }
        for field in STRING_FIELDS:
            record[field] = first_string_claim(claims, PROPERTY_MAP[field])
        record["cas"] = unique_strings(claim_values(claims, PROPERTY_MAP["cas"]))
        for field in IDENTIFIER_FIELDS:
            record[field] = first_string_claim(claims, PROPERTY_MAP[field])
        record["mass"] = quantity_claim(claims, PROPERTY_MAP["mass"])
        record["wikibaseId"] = entity["id"]
        return record
