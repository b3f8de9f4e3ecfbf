"""Result value objects returned by the search engine."""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from minisearch.search.document import DocumentRecord
from minisearch.search.scoring import result_relevance


DEFAULT_PAGE_SIZE = 10


class SearchResult(BaseModel):
    """Immutable projection of an indexed document for one query.

    ``relevance_score`` is the canonical score used for final ordering;
    ``index_score`` is the coarse score the candidate was pre-ranked with.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    domain: str = ""
    snippet: str = ""
    content_length: int = 0
    indexed_at: datetime
    matched_terms: list[str] = Field(default_factory=list)
    term_positions: dict[str, list[int]] = Field(default_factory=dict)
    metadata: dict[str, str] = Field(default_factory=dict)
    relevance_score: float = 0.0
    index_score: float = 0.0

    @classmethod
    def from_document(
        cls,
        document: DocumentRecord,
        matched_terms: list[str],
        *,
        index_score: float = 0.0,
        snippet: str = "",
    ) -> "SearchResult":
        """Project a document, keeping only the query terms it actually contains."""
        present = [term for term in dict.fromkeys(matched_terms) if document.contains_term(term)]
        positions = {term: document.positions_for(term) for term in present}
        score = result_relevance(
            present,
            positions,
            title=document.title,
            domain=document.domain,
            content_length=document.content_length,
        )
        return cls(
            url=document.url,
            title=document.title,
            domain=document.domain,
            snippet=snippet,
            content_length=document.content_length,
            indexed_at=document.indexed_at,
            matched_terms=present,
            term_positions=positions,
            metadata=dict(document.metadata),
            relevance_score=score,
            index_score=index_score,
        )

    def has_matched_term(self, term: str) -> bool:
        return term in self.matched_terms

    @property
    def total_term_matches(self) -> int:
        return sum(len(positions) for positions in self.term_positions.values())


class PaginatedSearchResult(BaseModel):
    """One page of an already ranked result list plus navigation data."""

    model_config = ConfigDict(frozen=True)

    results: list[SearchResult] = Field(default_factory=list)
    current_page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    total_results: int = 0

    @classmethod
    def from_results(
        cls,
        all_results: list[SearchResult] | None,
        page: int,
        page_size: int,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "PaginatedSearchResult":
        """Slice ``[page * size, page * size + size)`` out of the full list.

        A page size of zero or less falls back to ``default_page_size`` and a
        negative page is treated as page 0. Pages past the end are empty.
        """
        size = page_size if page_size > 0 else default_page_size
        page = max(page, 0)
        items = all_results or []
        start = page * size
        return cls(
            results=items[start : start + size],
            current_page=page,
            page_size=size,
            total_results=len(items),
        )

    @classmethod
    def empty(cls, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> "PaginatedSearchResult":
        return cls.from_results([], page, page_size)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_results / self.page_size)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages - 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous(self) -> bool:
        return 0 < self.current_page < self.total_pages

    @property
    def next_page(self) -> int:
        return self.current_page + 1 if self.has_next else self.current_page

    @property
    def previous_page(self) -> int:
        return self.current_page - 1 if self.has_previous else self.current_page

    @property
    def start_index(self) -> int:
        return min(self.current_page * self.page_size, self.total_results)

    @property
    def end_index(self) -> int:
        return min(self.start_index + self.page_size, self.total_results)

    def is_first_page(self) -> bool:
        return self.current_page == 0

    def is_last_page(self) -> bool:
        return self.current_page == self.total_pages - 1

    def page_info(self) -> str:
        if self.total_results == 0:
            return "No results found"
        if not self.results:
            return f"No results on page {self.current_page + 1} of {self.total_pages}"
        return (
            f"Showing {self.start_index + 1}-{self.end_index} of {self.total_results} results "
            f"(Page {self.current_page + 1} of {self.total_pages})"
        )

    def page_numbers(self, max_visible: int) -> list[int]:
        """Zero-based page numbers for a navigation bar centred on the current page."""
        if max_visible <= 0:
            return []
        if self.total_pages <= max_visible:
            return list(range(self.total_pages))

        start = max(0, self.current_page - max_visible // 2)
        end = min(self.total_pages, start + max_visible)
        start = max(0, end - max_visible)
        return list(range(start, end))

    def summary(self) -> dict[str, Any]:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_results": self.total_results,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
            "next_page": self.next_page,
            "previous_page": self.previous_page,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "page_result_count": len(self.results),
            "page_info": self.page_info(),
        }
