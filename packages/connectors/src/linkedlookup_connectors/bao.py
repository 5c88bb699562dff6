"""
BioAssay Ontology (BAO) connector via the EBI Ontology Lookup Service.

API: https://www.ebi.ac.uk/ols4/api/
"""

from __future__ import annotations

from typing import Any

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, lookup_search
from linkedlookup_connectors.classify import classify, pattern
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector
from linkedlookup_connectors.text import unique_strings

BAO_PATTERNS = (
    pattern(r"https?://www\.bioassayontology\.org/bao#BAO_(\d{7})", lambda m: f"BAO:{m.group(1)}"),
    pattern(r"BAO[:_](\d{7})", lambda m: f"BAO:{m.group(1)}"),
)

DEFAULT_FIELDS = (
    "@id",
    "name",
    "description",
    "synonym",
    "oboId",
    "shortForm",
    "curie",
    "ontologyName",
)


def first_description(value: Any) -> str | None:
    if isinstance(value, list):
        return next((v.strip() for v in value if as_str(v)), None)
    return as_str(value)


def ensure_list(value: Any) -> list[str]:
    if not value:
        return []
    values = value if isinstance(value, list) else [value]
    return unique_strings(values)


class BaoConnector:
    """
    Connector for BAO classes in OLS.

    Without a configured field list the output is restricted to ``DEFAULT_FIELDS``.
    """

    name = "bao"
    DEFAULT_TYPE = "BAOTerm"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 2
    MAX_ROWS = 100
    ONTOLOGY = "bao"
    DEFAULT_BASE_URL = "https://www.ebi.ac.uk/ols4"
    RELAY_SLUG = "bao"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields or DEFAULT_FIELDS)

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        obo_id = classify(query, BAO_PATTERNS)
        if obo_id:
            entity = await self.get_by_id(obo_id)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        payload = await self.client.fetch_json(
            f"{self.base_url}/api/search",
            params={
                "q": query,
                "ontology": self.ONTOLOGY,
                "rows": min(limit * 4, self.MAX_ROWS),
                "start": 0,
                "type": "class",
            },
        )
        docs = (payload.get("response") or {}).get("docs") if isinstance(payload, dict) else None
        if not isinstance(docs, list):
            return []

        seen: set[str] = set()
        results: list[Entity | None] = []
        for doc in docs:
            if len(results) >= limit:
                break
            if not isinstance(doc, dict) or not doc.get("iri") or not doc.get("label"):
                continue
            if doc["iri"] in seen:
                continue
            seen.add(doc["iri"])
            record = self.project(self.to_record(doc))
            if record:
                results.append(record)
        return results

    async def get_by_id(self, obo_id: str) -> Entity | None:
        payload = await self.client.fetch_json(
            f"{self.base_url}/api/ontologies/{self.ONTOLOGY}/terms",
            params={"obo_id": obo_id},
        )
        terms = (payload.get("_embedded") or {}).get("terms") if isinstance(payload, dict) else None
        for term in terms or []:
            entity = self.project(self.to_record(term))
            if entity:
                return entity
        return None

    def to_record(self, doc: Any) -> Entity | None:
        """Map an OLS search doc or term resource."""
        if not isinstance(doc, dict) or not as_str(doc.get("iri")) or not as_str(doc.get("label")):
            return None
        obo_id = as_str(doc.get("obo_id"))
        short_form = as_str(doc.get("short_form"))
        return {
            "@id": doc["iri"],
            "@type": self.type,
            "name": doc["label"].strip(),
            "description": first_description(doc.get("description")),
            # search docs use "synonym", term resources "synonyms"
            "synonym": ensure_list(doc.get("synonym") or doc.get("synonyms")),
            "shortForm": short_form,
            "oboId": obo_id or short_form,
            "curie": as_str(doc.get("curie")) or obo_id,
            "ontologyName": as_str(doc.get("ontology_name")),
            "ontologyIri": as_str(doc.get("ontology_iri")),
            "isObsolete": doc.get("is_obsolete") is True,
        }
