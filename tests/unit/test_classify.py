from __future__ import annotations

import pytest

from linkedlookup_connectors.aopwiki import AOP_PATTERNS
from linkedlookup_connectors.aopwiki_events import EVENT_PATTERNS
from linkedlookup_connectors.aopwiki_relationships import RELATIONSHIP_PATTERNS
from linkedlookup_connectors.bao import BAO_PATTERNS
from linkedlookup_connectors.cellosaurus import ACCESSION_PATTERNS
from linkedlookup_connectors.classify import classify, extract_doi, pattern
from linkedlookup_connectors.compoundcloud import ITEM_PATTERNS
from linkedlookup_connectors.orcid import ORCID_PATTERNS
from linkedlookup_connectors.pubchem import CID_PATTERNS
from linkedlookup_connectors.ror import ROR_ID_PATTERNS


def test_first_matching_pattern_wins() -> None:
    patterns = (
        pattern(r"id-(\d+)", lambda m: f"first:{m.group(1)}"),
        pattern(r"id-(\d+)", lambda m: f"second:{m.group(1)}"),
    )
    assert classify("id-7", patterns) == "first:7"


def test_free_text_is_not_an_identifier() -> None:
    assert classify("aspirin", CID_PATTERNS) is None
    assert classify("   ", CID_PATTERNS) is None


@pytest.mark.parametrize(
    ("patterns", "query", "expected"),
    [
        (ROR_ID_PATTERNS, "https://ror.org/02mhbdp94", "02mhbdp94"),
        (ROR_ID_PATTERNS, "ror:02mhbdp94", "02mhbdp94"),
        (ROR_ID_PATTERNS, "02mhbdp94", "02mhbdp94"),
        (ACCESSION_PATTERNS, "CVCL_0030", "CVCL_0030"),
        (ACCESSION_PATTERNS, "cvcl 0030", "CVCL_0030"),
        (ACCESSION_PATTERNS, "https://www.cellosaurus.org/CVCL_0030", "CVCL_0030"),
        (ITEM_PATTERNS, "q42", "Q42"),
        (ITEM_PATTERNS, "https://compoundcloud.wikibase.cloud/entity/Q42", "Q42"),
        (CID_PATTERNS, "2244", "2244"),
        (CID_PATTERNS, "CID 2244", "2244"),
        (CID_PATTERNS, "https://pubchem.ncbi.nlm.nih.gov/compound/2244", "2244"),
        (BAO_PATTERNS, "BAO_0000015", "BAO:0000015"),
        (BAO_PATTERNS, "http://www.bioassayontology.org/bao#BAO_0000015", "BAO:0000015"),
        (AOP_PATTERNS, "12345", "12345"),
        (AOP_PATTERNS, "AOP:12", "12"),
        (AOP_PATTERNS, "aop 12", "12"),
        (EVENT_PATTERNS, "KE 55", "55"),
        (EVENT_PATTERNS, "mie-8", "8"),
        (RELATIONSHIP_PATTERNS, "KER 2", "2"),
        (RELATIONSHIP_PATTERNS, "relationship_10", "10"),
        (ORCID_PATTERNS, "https://orcid.org/0000-0002-1825-009x", "0000-0002-1825-009X"),
        (ORCID_PATTERNS, "0000-0002-1825-0097", "0000-0002-1825-0097"),
    ],
)
def test_source_identifier_tables(patterns, query: str, expected: str) -> None:
    assert classify(query, patterns) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10.1000/xyz123", "10.1000/xyz123"),
        ("doi:10.1000/xyz123", "10.1000/xyz123"),
        ("https://doi.org/10.1000/xyz123", "10.1000/xyz123"),
        ("https://dx.doi.org/10.1000%2Fxyz123", "10.1000/xyz123"),
        ("see 10.1000/xyz123 for details", "10.1000/xyz123"),
        ("climate change", None),
        ("", None),
    ],
)
def test_extract_doi(raw: str, expected: str | None) -> None:
    assert extract_doi(raw) == expected


def test_non_doi_url_falls_through_to_embedded_doi() -> None:
    assert extract_doi("https://example.org/article/10.1000/xyz123") == "10.1000/xyz123"
