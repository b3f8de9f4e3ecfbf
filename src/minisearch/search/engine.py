"""Query facade: dispatch, ranking, result assembly and statistics.

The engine shares the indexer's reader/writer lock. Each public query takes
the read side once and then works directly on the indexer's inverted index,
so nothing inside a query re-acquires the lock.

Ranking runs in two stages. The inverted index pre-ranks candidates with
its own score; every candidate is then projected into a ``SearchResult``
whose result-level score is the one callers see and the one used for the
final ordering. Neither stage writes to the indexed records.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Sequence
import logging
import time
from typing import Any

from minisearch.config import Settings
from minisearch.observability.metrics import ERROR_COUNT, SEARCH_COUNT, SEARCH_LATENCY, track_latency
from minisearch.observability.tracing import create_span, span_attributes
from minisearch.search.errors import UnsupportedQueryError
from minisearch.search.filters import SearchFilters, matches_language
from minisearch.search.fuzzy import expand_fuzzy_term, expand_wildcard, has_wildcards
from minisearch.search.indexer import SearchIndexer
from minisearch.search.inverted_index import IndexStats, InvertedIndex, RankedDocument
from minisearch.search.phrase import matches_phrase, phrase_offsets
from minisearch.search.query import QueryType, SearchQuery
from minisearch.search.results import PaginatedSearchResult, SearchResult
from minisearch.search.snippet import build_snippet
from minisearch.search.stats import SearchStats, SearchStatsSnapshot


logger = logging.getLogger(__name__)

_SORT_KEYS: dict[str, Callable[[SearchResult], Any]] = {
    "date": lambda result: result.indexed_at,
    "length": lambda result: result.content_length,
    "title": lambda result: result.title.lower(),
}


class SearchEngine:
    """Answer queries against a ``SearchIndexer``'s index."""

    def __init__(self, indexer: SearchIndexer, settings: Settings | None = None) -> None:
        self.indexer = indexer
        self.settings = settings or indexer.settings
        self._stats = SearchStats(
            recent_capacity=self.settings.recent_queries_capacity,
            top_limit=self.settings.popular_queries_limit,
        )

    @property
    def _index(self) -> InvertedIndex:
        return self.indexer.inverted_index

    # ------------------------------------------------------------------
    # Query entry points
    # ------------------------------------------------------------------
    def search(self, query: SearchQuery | None, filters: SearchFilters | None = None) -> list[SearchResult]:
        """Run a query and return ranked, filtered and capped results.

        Blank queries return an empty list. Any failure during execution is
        logged, counted as a failed search and also yields an empty list.
        """
        if query is None or not query.has_terms():
            logger.warning("Ignoring empty search query")
            return []

        query_key = query.original_text or " ".join(query.all_search_terms())
        query_type = query.query_type.value
        attributes = span_attributes("search", query=query_key, type=query_type, language=query.language)
        start = time.perf_counter()

        try:
            with (
                track_latency(SEARCH_LATENCY, query_type=query_type),
                create_span("search.query", attributes=attributes),
                self.indexer.lock.read_locked(),
            ):
                results = self._execute(query, filters)
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "Search failed for query: %s", query_key, extra={"query": query_key, "query_type": query_type}
            )
            self._stats.record_failure(query_key, elapsed_ms)
            SEARCH_COUNT.labels(query_type=query_type, status="error").inc()
            ERROR_COUNT.labels(component="engine", error_type=type(exc).__name__).inc()
            return []

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._stats.record_success(query_key, elapsed_ms, len(results))
        SEARCH_COUNT.labels(query_type=query_type, status="success").inc()
        logger.info(
            "Search %r completed in %.2fms with %d results",
            query_key,
            elapsed_ms,
            len(results),
            extra={
                "query": query_key,
                "query_type": query_type,
                "result_count": len(results),
                "duration_ms": elapsed_ms,
            },
        )
        return results

    def search_with_pagination(
        self,
        query: SearchQuery | None,
        page: int,
        page_size: int,
        filters: SearchFilters | None = None,
    ) -> PaginatedSearchResult:
        """Rank the full result set, then return one page of it."""
        size = page_size if page_size > 0 else self.settings.default_page_size
        if query is None:
            return PaginatedSearchResult.empty(max(page, 0), size)
        results = self.search(query.with_options(max_results=0), filters)
        return PaginatedSearchResult.from_results(
            results, page, size, default_page_size=self.settings.default_page_size
        )

    def search_terms(self, terms: Sequence[str] | None) -> list[SearchResult]:
        """AND search over raw terms."""
        if not terms:
            return []
        return self.search(SearchQuery.all_terms(*terms, max_results=self.settings.default_max_results))

    def search_all(self, terms: Sequence[str] | None) -> list[SearchResult]:
        return self.search_terms(terms)

    def search_any(self, terms: Sequence[str] | None) -> list[SearchResult]:
        """OR search over raw terms."""
        if not terms:
            return []
        return self.search(SearchQuery.any_terms(*terms, max_results=self.settings.default_max_results))

    def search_phrase(self, phrase: str | None) -> list[SearchResult]:
        if not phrase or not phrase.strip():
            return []
        return self.search(SearchQuery.exact_phrase(phrase, max_results=self.settings.default_max_results))

    def fuzzy_search(self, text: str | None, max_distance: int | None = None) -> list[SearchResult]:
        if not text or not text.strip():
            return []
        distance = self.settings.fuzzy_max_distance if max_distance is None else max_distance
        return self.search(
            SearchQuery.fuzzy(text, max_distance=distance, max_results=self.settings.default_max_results)
        )

    def wildcard_search(self, pattern: str | None) -> list[SearchResult]:
        if not pattern or not pattern.strip():
            return []
        return self.search(SearchQuery.wildcard(pattern, max_results=self.settings.default_max_results))

    def result_count(self, query: SearchQuery | None, filters: SearchFilters | None = None) -> int:
        """Number of results the query matches, ignoring its result cap."""
        if query is None:
            return 0
        return len(self.search(query.with_options(max_results=0), filters))

    # ------------------------------------------------------------------
    # Vocabulary helpers
    # ------------------------------------------------------------------
    def suggestions(self, partial_query: str | None, limit: int | None = None) -> list[str]:
        """Indexed terms starting with ``partial_query``, alphabetically."""
        if not partial_query or not partial_query.strip():
            return []
        prefix = partial_query.strip().lower()
        cap = self.settings.suggestion_limit if limit is None else limit
        with self.indexer.lock.read_locked():
            matches = sorted(term for term in self._index.all_terms() if term.lower().startswith(prefix))
        return matches[: max(cap, 0)]

    def related_terms(self, query: str | None, limit: int = 10) -> list[str]:
        """Terms co-occurring with ``query``, ranked by summed frequency."""
        if not query or not query.strip():
            return []
        term = self.indexer.text_processor.process_word(query.strip())
        if term is None:
            return []

        totals: Counter[str] = Counter()
        with self.indexer.lock.read_locked():
            for document in self._index.documents_for_term(term):
                totals.update(document.term_frequencies)
        totals.pop(term, None)

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [related for related, _count in ranked[: max(limit, 0)]]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def search_stats(self) -> SearchStatsSnapshot:
        return self._stats.snapshot()

    def popular_search_terms(self, limit: int | None = None) -> list[str]:
        return [query for query, _count in self._stats.popular_queries(limit)]

    def slowest_queries(self, limit: int | None = None) -> list[tuple[str, float]]:
        return self._stats.slowest_queries(limit)

    def recent_queries(self, limit: int | None = None) -> list[str]:
        return self._stats.recent_queries(limit)

    def index_stats(self) -> IndexStats:
        return self.indexer.index_stats()

    def is_ready(self) -> bool:
        return self.total_documents() > 0

    def total_documents(self) -> int:
        return self.indexer.index_size()

    def total_terms(self) -> int:
        """Size of the indexed vocabulary."""
        with self.indexer.lock.read_locked():
            return self._index.unique_terms

    # ------------------------------------------------------------------
    # Execution (caller holds the read lock)
    # ------------------------------------------------------------------
    def _execute(self, query: SearchQuery, filters: SearchFilters | None) -> list[SearchResult]:
        candidates, terms = self._candidates(query)

        required = self._normalize(query.required_terms)
        excluded = self._normalize(query.excluded_terms)
        if required or excluded:
            candidates = [
                ranked
                for ranked in candidates
                if all(ranked.document.contains_term(term) for term in required)
                and not any(ranked.document.contains_term(term) for term in excluded)
            ]

        results = [self._to_result(ranked, terms, query) for ranked in candidates]
        self._sort(results, query)

        if filters is not None:
            results = [result for result in results if filters.allows(result)]
        if query.language:
            results = [result for result in results if matches_language(result.metadata, query.language)]

        if not query.is_unlimited():
            results = results[: query.max_results]
        return results

    def _candidates(self, query: SearchQuery) -> tuple[list[RankedDocument], list[str]]:
        """Dispatch on query type; returns pre-ranked candidates and the terms they matched on."""
        query_type = query.query_type

        if query_type is QueryType.ALL_TERMS:
            terms = self._normalize(query.all_search_terms())
            return self._index.search(terms), terms

        if query_type is QueryType.ANY_TERMS:
            terms = self._normalize(query.all_search_terms())
            return self._index.search_any(terms), terms

        if query_type is QueryType.EXACT_MATCH:
            return self._phrase_candidates(query)

        if query_type is QueryType.FUZZY:
            vocabulary = sorted(self._index.all_terms())
            expanded: set[str] = set()
            for term in self._normalize(query.all_search_terms()):
                expanded.update(expand_fuzzy_term(term, vocabulary, query.max_distance))
            terms = sorted(expanded)
            return self._index.search_any(terms), terms

        if query_type is QueryType.WILDCARD:
            vocabulary = sorted(self._index.all_terms())
            expanded = set()
            for pattern in query.all_search_terms():
                if has_wildcards(pattern):
                    expanded.update(expand_wildcard(pattern, vocabulary))
                else:
                    expanded.update(self._normalize([pattern]))
            terms = sorted(expanded)
            return self._index.search_any(terms), terms

        raise UnsupportedQueryError(f"unsupported query type: {query_type}")

    def _phrase_candidates(self, query: SearchQuery) -> tuple[list[RankedDocument], list[str]]:
        # Excluded words keep their slot in the phrase but are not required
        excluded = set(self._normalize(query.excluded_terms))
        tokens = [
            token
            for token in self.indexer.text_processor.analyze(query.phrase_text())
            if token.text not in excluded
        ]
        terms = [token.text for token in tokens]
        candidates = self._index.search(terms)
        if not self.settings.is_positional_phrase_matching():
            return candidates, terms

        offsets = phrase_offsets(tokens)
        return [ranked for ranked in candidates if matches_phrase(ranked.document, offsets)], terms

    def _normalize(self, words: Sequence[str]) -> list[str]:
        """Normalize raw query words, dropping filtered ones and duplicates."""
        processor = self.indexer.text_processor
        normalized = (processor.process_word(word) for word in words)
        return list(dict.fromkeys(term for term in normalized if term))

    def _to_result(self, ranked: RankedDocument, terms: list[str], query: SearchQuery) -> SearchResult:
        document = ranked.document
        snippet = ""
        if query.include_snippets:
            present = [term for term in terms if document.contains_term(term)]
            snippet = build_snippet(
                document.content,
                present,
                max_length=self.settings.snippet_length,
                stride=self.settings.snippet_stride,
                tag=self.settings.highlight_tag,
                highlight=query.highlight_terms,
            )
        return SearchResult.from_document(document, terms, index_score=ranked.score, snippet=snippet)

    @staticmethod
    def _sort(results: list[SearchResult], query: SearchQuery) -> None:
        if query.sort_by == "relevance":
            sign = 1 if query.sort_ascending else -1
            results.sort(key=lambda result: (sign * result.relevance_score, result.url))
            return

        results.sort(key=lambda result: result.url)
        results.sort(key=_SORT_KEYS[query.sort_by], reverse=not query.sort_ascending)
