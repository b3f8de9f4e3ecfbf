"""
Search indexing and query engine package.

This package provides an in-memory search stack:
- analyzers: Tokenizer/filter pipeline and the text processor
- document: Per-document term statistics
- inverted_index: Posting structure with AND/OR lookups
- scoring: Index-level and result-level relevance
- phrase, fuzzy, snippet: Query-time helpers
- indexer: Thread-safe indexing facade
- engine: Query dispatch, ranking and statistics
"""

from minisearch.search.engine import SearchEngine
from minisearch.search.filters import SearchFilters
from minisearch.search.indexer import BatchIndexResult, SearchIndexer
from minisearch.search.models import WebPage
from minisearch.search.query import QueryType, SearchQuery
from minisearch.search.results import PaginatedSearchResult, SearchResult


__all__ = [
    "BatchIndexResult",
    "PaginatedSearchResult",
    "QueryType",
    "SearchEngine",
    "SearchFilters",
    "SearchIndexer",
    "SearchQuery",
    "SearchResult",
    "WebPage",
]
