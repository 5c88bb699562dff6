from __future__ import annotations

import asyncio

from linkedlookup_connectors import ConnectorConfig, CrossrefConnector
from linkedlookup_connectors.crossref import build_citation, format_authors, format_date, format_date_parts

WORK = {
    "DOI": "10.1000/xyz123",
    "title": ["A study of <i>things</i>"],
    "author": [
        {"given": "Jane", "family": "Doe", "ORCID": "http://orcid.org/0000-0002-1825-0097"},
        {"given": "  ", "family": None},
        {"family": "Roe"},
    ],
    "container-title": ["Journal of Tests"],
    "ISSN": ["1234-5678"],
    "volume": "4",
    "issue": "2",
    "page": "1-10",
    "publisher": "Test Press",
    "published-print": {"date-parts": [[2020, 5, 3]]},
    "issued": {"date-parts": [[2019]]},
    "abstract": "<jats:p>We   studied <jats:italic>things</jats:italic>.</jats:p>",
}


def test_doi_query_uses_the_doi_path_once(upstream) -> None:
    fake = upstream({"/works/10.1000/xyz123": {"status": "ok", "message": WORK}})
    connector = CrossrefConnector(http_client=fake.client())

    results = asyncio.run(connector.search("10.1000/xyz123"))

    assert fake.paths() == ["/works/10.1000/xyz123"]
    assert len(results) == 1
    assert results[0]["@id"] == "https://doi.org/10.1000/xyz123"
    assert results[0]["@type"] == "ScholarlyArticle"


def test_doi_url_is_lowercased_for_the_lookup(upstream) -> None:
    fake = upstream({"/works/10.1000/abc": {"message": {**WORK, "DOI": "10.1000/ABC"}}})
    connector = CrossrefConnector(http_client=fake.client())
    results = asyncio.run(connector.search("https://doi.org/10.1000/ABC"))
    assert [r["@id"] for r in results] == ["https://doi.org/10.1000/ABC"]


def test_work_mapping(upstream) -> None:
    fake = upstream({"/works/10.1000/xyz123": {"message": WORK}})
    entity = asyncio.run(CrossrefConnector(http_client=fake.client()).search("doi:10.1000/xyz123"))[0]

    assert entity["name"] == "A study of <i>things</i>"
    assert entity["author"] == [
        {
            "@id": "https://orcid.org/0000-0002-1825-0097",
            "@type": "Person",
            "name": "Jane Doe",
            "givenName": "Jane",
            "familyName": "Doe",
        },
        {"@type": "Person", "name": "Roe", "familyName": "Roe"},
    ]
    assert entity["identifier"] == "https://doi.org/10.1000/xyz123"
    assert entity["issn"] == "1234-5678"
    assert entity["journal"] == "Journal of Tests"
    assert entity["datePublished"] == "2020-05-03"
    assert entity["publisher"] == "Test Press"
    assert entity["abstract"] == "We studied things ."
    assert entity["creditText"] == (
        'Jane Doe, Roe, "A study of <i>things</i>", Journal of Tests, vol. 4, no. 2, '
        "pp. 1-10, 2020, doi: doi.org/10.1000/xyz123"
    )


def test_free_text_search_maps_items(upstream) -> None:
    items = [
        {**WORK, "DOI": "10.1000/a"},
        {"title": ["No DOI but titled"]},
        {"publisher": "dropped: neither DOI nor title"},
        {**WORK, "DOI": "10.1000/b"},
    ]
    fake = upstream({"/works": {"message": {"items": items}}})
    connector = CrossrefConnector(http_client=fake.client())

    results = asyncio.run(connector.search("things", 3))

    assert fake.requests[0].url.params["query"] == "things"
    assert fake.requests[0].url.params["rows"] == "3"
    assert [r.get("@id") for r in results] == ["https://doi.org/10.1000/a", None]
    assert results[1]["name"] == "No DOI but titled"


def test_projected_work_without_doi_keeps_its_name(upstream) -> None:
    work = {"title": ["Preprint without DOI"], "container-title": ["J"]}
    fake = upstream({"/works": {"message": {"items": [work]}}})
    connector = CrossrefConnector(ConnectorConfig(fields=("journal",)), http_client=fake.client())

    results = asyncio.run(connector.search("preprint"))

    assert results == [{"journal": "J", "@type": "ScholarlyArticle", "name": "Preprint without DOI"}]


def test_unresolved_doi_falls_back_to_free_text(upstream) -> None:
    fake = upstream({"/works": {"message": {"items": [WORK]}}})
    results = asyncio.run(CrossrefConnector(http_client=fake.client()).search("10.1000/missing"))
    assert fake.paths() == ["/works/10.1000/missing", "/works"]
    assert len(results) == 1


def test_unresolved_doi_without_fallback_is_empty(upstream) -> None:
    fake = upstream({"/works": {"message": {"items": [WORK]}}})
    connector = CrossrefConnector(ConnectorConfig(fallback_to_search=False), http_client=fake.client())
    assert asyncio.run(connector.search("10.1000/missing")) == []
    assert fake.paths() == ["/works/10.1000/missing"]


def test_server_error_yields_empty_list(upstream) -> None:
    fake = upstream({"/works": 500})
    assert asyncio.run(CrossrefConnector(http_client=fake.client()).search("climate")) == []


def test_format_date_helpers() -> None:
    assert format_date_parts([[2021]]) == "2021"
    assert format_date_parts([[2021, 7]]) == "2021-07"
    assert format_date_parts([[]]) is None
    assert format_date({"published-online": {"date-parts": [[2018, 1, 9]]}}) == "2018-01-09"
    assert format_date({"published": {"date-parts": [[2017, 3]]}}) == "2017"
    assert format_date({}) is None


def test_format_authors_and_citation() -> None:
    authors = format_authors([{"given": "Ann", "family": "Lee"}, "junk"])
    assert authors == [{"@type": "Person", "name": "Ann Lee", "givenName": "Ann", "familyName": "Lee"}]
    citation = build_citation(
        authors=authors, title="T", journal=None, volume=None, issue=None, pages=None, year="2001", doi=None
    )
    assert citation == 'Ann Lee, "T", 2001'
