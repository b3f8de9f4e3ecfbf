"""Unit tests for WebPage and DocumentRecord."""

import pytest

from minisearch.search.document import DocumentRecord
from minisearch.search.models import WebPage


pytestmark = pytest.mark.unit


class TestWebPage:
    def test_content_length_is_derived(self):
        page = WebPage(url="https://example.com", content="hello")
        assert page.content_length == 5
        assert page.model_dump()["content_length"] == 5

    @pytest.mark.parametrize("url,expected", [("https://example.com", True), ("   ", False), ("", False)])
    def test_has_valid_url(self, url, expected):
        assert WebPage(url=url).has_valid_url() is expected


class TestDocumentRecord:
    def test_from_page_copies_fields(self):
        page = WebPage(
            url="https://example.com/a",
            title="A",
            domain="example.com",
            content="alpha beta",
            links=["https://example.com/b"],
            metadata={"language": "en"},
        )
        document = DocumentRecord.from_page(page)

        assert document.url == page.url
        assert document.content_length == 10
        assert document.links == ["https://example.com/b"]
        assert document.metadata == {"language": "en"}
        assert document.indexed_at == document.last_updated
        assert document.term_frequencies == {}
        assert document.relevance_score == 0.0

    def test_add_term_upserts_both_maps(self):
        document = DocumentRecord(url="u")
        document.add_term("java", 2, [0, 5])
        document.add_term("java", 1, [3])

        assert document.term_frequency("java") == 1
        assert document.positions_for("java") == [3]
        assert document.contains_term("java")
        assert document.all_terms() == ["java"]

    def test_missing_term_lookups(self):
        document = DocumentRecord(url="u")
        assert document.term_frequency("nope") == 0
        assert document.positions_for("nope") == []
        assert not document.contains_term("nope")

    def test_update_content_clears_term_maps(self):
        document = DocumentRecord(url="u", content="old")
        document.add_term("old", 1, [0])
        before = document.last_updated

        document.update_content("brand new content")

        assert document.content == "brand new content"
        assert document.content_length == len("brand new content")
        assert document.term_frequencies == {}
        assert document.term_positions == {}
        assert document.last_updated >= before

    def test_calculate_relevance_score(self):
        document = DocumentRecord(url="u", content_length=2500)
        document.add_term("alpha", 1, [0])
        document.add_term("beta", 1, [1])

        assert document.calculate_relevance_score() == pytest.approx(4.5)
        assert document.relevance_score == pytest.approx(4.5)

    def test_relevance_score_length_bonus_is_capped(self):
        document = DocumentRecord(url="u", content_length=50_000)
        assert document.calculate_relevance_score() == pytest.approx(10.0)
