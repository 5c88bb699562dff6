"""Unit tests for upstream text helpers."""

from __future__ import annotations

from linkedlookup_connectors.text import contains_text, normalize_text, strip_html, unique_strings


class TestStripHtml:
    def test_removes_html_tags(self):
        assert strip_html("<p>Hello <strong>world</strong>!</p>") == "Hello world !"

    def test_removes_jats_markup(self):
        abstract = "<jats:title>Abstract</jats:title><jats:p>Cells   divide.</jats:p>"
        assert strip_html(abstract) == "Abstract Cells divide."

    def test_plain_text_and_empty(self):
        assert strip_html("just text") == "just text"
        assert strip_html(None) == ""
        assert strip_html("") == ""

    def test_url_like_text_is_kept(self):
        assert strip_html("https://example.org/page") == "https://example.org/page"


def test_normalize_text() -> None:
    assert normalize_text("  Liver Fibrosis ") == "liver fibrosis"
    assert normalize_text(None) == ""
    assert normalize_text(12) == ""


def test_contains_text_is_case_insensitive_substring() -> None:
    assert contains_text(["Liver fibrosis", None], "FIBRO")
    assert not contains_text(["Liver fibrosis"], "kidney")
    assert not contains_text([], "x")


def test_unique_strings_keeps_first_occurrence() -> None:
    assert unique_strings([" a", "b", "a", "", None, 3, "b "]) == ["a", "b"]
