"""
Crossref connector for scholarly work lookup.

API: https://api.crossref.org/
Rate limit: public, please be polite and send a mailto via User-Agent if possible.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from linkedlookup_connectors.base import ConnectorConfig, Entity, as_str, clamp, lookup_search
from linkedlookup_connectors.classify import extract_doi
from linkedlookup_connectors.http import UpstreamClient
from linkedlookup_connectors.projection import FieldProjector, clean_entity
from linkedlookup_connectors.text import strip_html


class CrossrefConnector:
    """
    Connector for the Crossref works API.

    Features:
    - DOI / doi.org URL resolution
    - Author persons with ORCID ids
    - Plain-text citation string
    """

    name = "crossref"
    DEFAULT_TYPE = "ScholarlyArticle"
    DEFAULT_LIMIT = 10
    MIN_QUERY_LENGTH = 3
    MAX_ROWS = 20
    DEFAULT_BASE_URL = "https://api.crossref.org"
    RELAY_SLUG = "crossref"

    def __init__(self, config: ConnectorConfig | None = None, *, http_client: httpx.AsyncClient | None = None):
        self.config = config or ConnectorConfig()
        self.base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.type = self.config.type or self.DEFAULT_TYPE
        self.client = UpstreamClient(self.name, self.config, http_client)
        self.project = FieldProjector(self.config.fields)

    @lookup_search
    async def search(self, query: str, limit: int) -> list[Entity | None]:
        doi = extract_doi(query)
        if doi:
            entity = await self.get_by_id(doi)
            if entity:
                return [entity]
            if not self.config.fallback_to_search:
                return []

        payload = await self.client.fetch_json(
            f"{self.base_url}/works",
            params={"query": query, "rows": clamp(limit, 1, self.MAX_ROWS)},
        )
        items = (payload.get("message") or {}).get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            return []
        return [self.project(self.format_work(work)) for work in items[:limit]]

    async def get_by_id(self, doi: str) -> Entity | None:
        """Get work by DOI."""
        doi = doi.replace("doi:", "").strip()
        payload = await self.client.fetch_json(f"{self.base_url}/works/{quote(doi.lower(), safe='')}")
        work = payload.get("message") if isinstance(payload, dict) else None
        return self.project(self.format_work(work))

    def format_work(self, work: Any) -> Entity | None:
        """Map a Crossref work; None without DOI and title."""
        if not isinstance(work, dict):
            return None
        doi = as_str(work.get("DOI"))
        title = _first(work.get("title"))
        if not doi and not title:
            return None
        doi_url = f"https://doi.org/{doi}" if doi else None
        authors = format_authors(work.get("author"))
        journal = _first(work.get("container-title"))
        date_published = format_date(work)
        issn = _first(work.get("ISSN"))
        if not issn:
            issn_types = work.get("issn-type") or []
            issn = as_str(issn_types[0].get("value")) if issn_types and isinstance(issn_types[0], dict) else None

        credit_text = build_citation(
            authors=authors,
            title=title,
            journal=journal,
            volume=as_str(work.get("volume")),
            issue=as_str(work.get("issue")),
            pages=as_str(work.get("page")),
            year=date_published[:4] if date_published else None,
            doi=doi_url,
        )
        return {
            "@id": doi_url,
            "@type": self.type,
            "name": title,
            "author": authors,
            "identifier": doi_url,
            "issn": issn,
            "journal": journal,
            "datePublished": date_published,
            "creditText": credit_text,
            "publisher": as_str(work.get("publisher")),
            "abstract": strip_html(work.get("abstract")) or None,
        }


def _first(values: Any) -> str | None:
    if isinstance(values, list) and values:
        return as_str(values[0])
    return as_str(values)


def format_date_parts(parts: Any) -> str | None:
    """``[[2020, 5, 3]]`` -> ``2020-05-03``; shorter parts give shorter dates."""
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], list) or not parts[0]:
        return None
    year, month, day = (parts[0] + [None, None])[:3]
    if not year:
        return None
    if not month:
        return str(year)
    if not day:
        return f"{year}-{int(month):02d}"
    return f"{year}-{int(month):02d}-{int(day):02d}"


def format_date(work: dict) -> str | None:
    """Publication date, preferring print over online over issued."""
    for key in ("published-print", "published-online", "issued"):
        part = work.get(key)
        formatted = format_date_parts(part.get("date-parts")) if isinstance(part, dict) else None
        if formatted:
            return formatted
    published = work.get("published")
    if isinstance(published, dict):
        parts = published.get("date-parts")
        if isinstance(parts, list) and parts and isinstance(parts[0], list) and parts[0] and parts[0][0]:
            return str(parts[0][0])
    return None


def format_authors(authors: Any) -> list[Entity]:
    """Crossref authors as Person objects; authors with neither ORCID nor name are dropped."""
    if not isinstance(authors, list):
        return []
    persons: list[Entity] = []
    for author in authors:
        if not isinstance(author, dict):
            continue
        given = as_str(author.get("given"))
        family = as_str(author.get("family"))
        label = " ".join(part for part in (given, family) if part)
        orcid = as_str(author.get("ORCID"))
        person = clean_entity(
            {
                "@id": orcid.replace("http://", "https://") if orcid else None,
                "@type": "Person",
                "name": label,
                "givenName": given,
                "familyName": family,
            }
        )
        if person.get("@id") or person.get("name"):
            persons.append(person)
    return persons


def build_citation(
    *,
    authors: list[Entity],
    title: str | None,
    journal: str | None,
    volume: str | None,
    issue: str | None,
    pages: str | None,
    year: str | None,
    doi: str | None,
) -> str:
    names = [author["name"] for author in authors if author.get("name")]
    pieces = [
        ", ".join(names) if names else None,
        f'"{title}"' if title else None,
        journal,
        f"vol. {volume}" if volume else None,
        f"no. {issue}" if issue else None,
        f"pp. {pages}" if pages else None,
        year,
        "doi: " + doi.split("://", 1)[-1] if doi else None,
    ]
    return ", ".join(piece for piece in pieces if piece)
