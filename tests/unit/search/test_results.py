"""Unit tests for SearchResult projection and pagination."""

from datetime import datetime, timezone

import pytest

from minisearch.search.results import PaginatedSearchResult, SearchResult


def _results(count: int) -> list[SearchResult]:
    indexed_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [SearchResult(url=f"https://example.com/{i:02d}", indexed_at=indexed_at) for i in range(count)]


@pytest.mark.unit
class TestSearchResult:
    def test_from_document_keeps_only_present_terms(self, make_document):
        document = make_document(
            "https://a",
            "Java is a programming language used for web development",
            title="Java Guide",
            domain="example.com",
        )
        result = SearchResult.from_document(document, ["java", "missing", "java"], index_score=1.5, snippet="s")

        assert result.matched_terms == ["java"]
        assert result.term_positions == {"java": [0]}
        assert result.index_score == 1.5
        assert result.snippet == "s"
        assert result.has_matched_term("java")
        assert result.total_term_matches == 1
        # 1 matched + 0.5 position + 2 title + 0.5 domain + 1 length bonus
        assert result.relevance_score == pytest.approx(5.0)

    def test_from_document_copies_metadata(self, make_document):
        document = make_document("https://a", "java")
        document.metadata["language"] = "en"
        result = SearchResult.from_document(document, ["java"])
        document.metadata["language"] = "de"
        assert result.metadata == {"language": "en"}


@pytest.mark.unit
class TestPagination:
    def test_first_page(self):
        page = PaginatedSearchResult.from_results(_results(25), 0, 10)

        assert len(page.results) == 10
        assert page.total_results == 25
        assert page.total_pages == 3
        assert page.has_next
        assert not page.has_previous
        assert page.next_page == 1
        assert page.previous_page == 0
        assert page.is_first_page()

    def test_last_partial_page(self):
        page = PaginatedSearchResult.from_results(_results(25), 2, 10)

        assert [r.url for r in page.results] == [f"https://example.com/{i}" for i in range(20, 25)]
        assert not page.has_next
        assert page.has_previous
        assert page.is_last_page()
        assert (page.start_index, page.end_index) == (20, 25)

    def test_page_past_the_end_is_empty(self):
        page = PaginatedSearchResult.from_results(_results(25), 5, 10)

        assert page.results == []
        assert not page.has_next
        assert not page.has_previous
        assert page.page_info() == "No results on page 6 of 3"

    def test_non_positive_page_size_uses_default(self):
        page = PaginatedSearchResult.from_results(_results(25), 0, 0)
        assert page.page_size == 10
        assert len(page.results) == 10

        custom = PaginatedSearchResult.from_results(_results(25), 0, -3, default_page_size=5)
        assert custom.page_size == 5

    def test_negative_page_clamps_to_zero(self):
        page = PaginatedSearchResult.from_results(_results(25), -4, 10)
        assert page.current_page == 0
        assert len(page.results) == 10

    def test_none_results(self):
        page = PaginatedSearchResult.from_results(None, 0, 10)
        assert page.total_results == 0
        assert page.total_pages == 0
        assert page.page_info() == "No results found"

    def test_page_info(self):
        page = PaginatedSearchResult.from_results(_results(25), 1, 10)
        assert page.page_info() == "Showing 11-20 of 25 results (Page 2 of 3)"

    def test_page_numbers_window(self):
        page = PaginatedSearchResult.from_results(_results(100), 5, 10)
        assert page.page_numbers(5) == [3, 4, 5, 6, 7]
        assert PaginatedSearchResult.from_results(_results(100), 9, 10).page_numbers(5) == [5, 6, 7, 8, 9]
        assert PaginatedSearchResult.from_results(_results(25), 0, 10).page_numbers(5) == [0, 1, 2]
        assert page.page_numbers(0) == []

    def test_summary(self):
        summary = PaginatedSearchResult.from_results(_results(25), 1, 10).summary()
        assert summary["total_pages"] == 3
        assert summary["has_next"] is True
        assert summary["page_result_count"] == 10
        assert summary["page_info"].startswith("Showing 11-20")

    def test_serializes_navigation_fields(self):
        data = PaginatedSearchResult.from_results(_results(3), 0, 2).model_dump()
        assert data["total_pages"] == 2
        assert data["has_next"] is True
        assert data["has_previous"] is False
