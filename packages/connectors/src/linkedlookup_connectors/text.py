"""
Text helpers for upstream free text (abstracts, descriptions).
"""

from __future__ import annotations

import re
import warnings
from typing import Any

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

_WHITESPACE = re.compile(r"\s+")


def strip_html(html: str | None) -> str:
    """Remove HTML/JATS markup and collapse whitespace."""
    if not html:
        return ""
    with warnings.catch_warnings():
        # plain strings that look like URLs or paths are expected here
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(html, "html.parser")
    text = soup.get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


def normalize_text(value: Any) -> str:
    """Lowercased, trimmed string for containment matching."""
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def contains_text(values: list[Any], needle: str) -> bool:
    """Case-insensitive substring containment over any of ``values``."""
    lowered = needle.lower()
    return any(lowered in normalize_text(value) for value in values if value)


def unique_strings(values: list[Any]) -> list[str]:
    """Trimmed non-empty strings, first occurrence wins."""
    seen: dict[str, None] = {}
    for value in values:
        if isinstance(value, str) and value.strip():
            seen.setdefault(value.strip(), None)
    return list(seen)
