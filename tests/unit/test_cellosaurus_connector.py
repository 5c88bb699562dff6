from __future__ import annotations

import asyncio

from linkedlookup_connectors import CellosaurusConnector, ConnectorConfig

HELA = {
    "accession-list": [{"type": "primary", "value": "CVCL_0030"}, {"type": "secondary", "value": "CVCL_9999"}],
    "name-list": [
        {"type": "identifier", "value": "HeLa"},
        {"type": "synonym", "value": "HELA"},
        {"type": "synonym", "value": "Hela"},
    ],
    "species-list": [{"accession": "9606", "label": "Homo sapiens"}],
    "disease-list": [{"accession": "C4029", "label": "Cervical adenocarcinoma"}],
    "category": "Cancer cell line",
}


def _payload(*entries) -> dict:
    return {"Cellosaurus": {"cell-line-list": list(entries)}}


def test_accession_resolves_directly(upstream) -> None:
    fake = upstream({"/cell-line/CVCL_0030": _payload(HELA)})
    results = asyncio.run(CellosaurusConnector(http_client=fake.client()).search("cvcl_0030"))

    assert fake.paths() == ["/cell-line/CVCL_0030"]
    assert fake.requests[0].url.params["format"] == "json"
    assert results == [
        {
            "@id": "https://www.cellosaurus.org/CVCL_0030",
            "@type": "CellLine",
            "name": "HeLa",
            "accession": "CVCL_0030",
            "synonym": ["HELA", "Hela"],
            "species": ["Homo sapiens"],
            "category": "Cancer cell line",
            "disease": ["Cervical adenocarcinoma"],
        }
    ]


def test_lowercase_page_url_resolves_to_canonical_accession(upstream) -> None:
    fake = upstream({"/cell-line/CVCL_0030": _payload(HELA)})

    results = asyncio.run(
        CellosaurusConnector(http_client=fake.client()).search("https://www.cellosaurus.org/cvcl_0030")
    )

    assert fake.paths() == ["/cell-line/CVCL_0030"]
    assert [r["@id"] for r in results] == ["https://www.cellosaurus.org/CVCL_0030"]


def test_free_text_drops_entries_without_accession(upstream) -> None:
    broken = {"name-list": [{"type": "identifier", "value": "Ghost"}]}
    fake = upstream({"/search/cell-line": _payload(broken, HELA)})
    connector = CellosaurusConnector(ConnectorConfig(fields=("name",)), http_client=fake.client())

    results = asyncio.run(connector.search("hela", 5))

    assert fake.requests[0].url.params["q"] == "hela"
    assert fake.requests[0].url.params["rows"] == "5"
    assert results == [{"name": "HeLa", "@id": "https://www.cellosaurus.org/CVCL_0030", "@type": "CellLine"}]
