"""
Query classification: identifier-shaped query vs free text.

Each source declares an ordered table of ``IdentifierPattern`` entries. The
first pattern whose regex matches decides, and its extractor turns the match
into the source-native identifier.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from urllib.parse import unquote, urlparse


def _first_group(match: re.Match[str]) -> str | None:
    return match.group(1) if match.groups() else match.group(0)


@dataclass(frozen=True)
class IdentifierPattern:
    """Regex plus the function extracting the identifier from its match."""

    regex: re.Pattern[str]
    extractor: Callable[[re.Match[str]], str | None] = _first_group
    search: bool = False
    """Use ``re.search`` instead of ``re.fullmatch``."""

    def extract(self, query: str) -> str | None:
        match = self.regex.search(query) if self.search else self.regex.fullmatch(query)
        if not match:
            return None
        return self.extractor(match)


def pattern(
    expression: str,
    extractor: Callable[[re.Match[str]], str | None] = _first_group,
    *,
    search: bool = False,
    flags: int = re.IGNORECASE,
) -> IdentifierPattern:
    return IdentifierPattern(re.compile(expression, flags), extractor, search)


def classify(query: str, patterns: Sequence[IdentifierPattern]) -> str | None:
    """Identifier extracted by the first matching pattern, else None (free text)."""
    candidate = query.strip()
    if not candidate:
        return None
    for entry in patterns:
        identifier = entry.extract(candidate)
        if identifier:
            return identifier
    return None


DOI_REGEX = re.compile(r"10\.\d{4,9}/[-._;()/:a-z0-9]+", re.IGNORECASE)


def _doi_from_url(match: re.Match[str]) -> str | None:
    parsed = urlparse(match.group(0))
    if "doi.org" not in parsed.netloc.lower():
        return None
    path = unquote(parsed.path).lstrip("/")
    return path or None


# A URL that is not on doi.org falls through to the plain DOI search.
DOI_PATTERNS: tuple[IdentifierPattern, ...] = (
    pattern(r"https?://\S+", _doi_from_url),
    pattern(r"(?:^doi:\s*)?(" + DOI_REGEX.pattern + ")", search=True),
)


def extract_doi(raw: str) -> str | None:
    """DOI from a ``doi.org`` URL, a ``doi:`` prefixed string or any text holding one."""
    return classify(raw or "", DOI_PATTERNS)
