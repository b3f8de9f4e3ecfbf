"""minisearch: a small in-memory full-text search engine."""

from minisearch.bootstrap import build_engine, setup_observability
from minisearch.config import Settings, get_settings
from minisearch.search import (
    PaginatedSearchResult,
    QueryType,
    SearchEngine,
    SearchFilters,
    SearchIndexer,
    SearchQuery,
    SearchResult,
    WebPage,
)


__all__ = [
    "PaginatedSearchResult",
    "QueryType",
    "SearchEngine",
    "SearchFilters",
    "SearchIndexer",
    "SearchQuery",
    "SearchResult",
    "Settings",
    "WebPage",
    "build_engine",
    "get_settings",
    "setup_observability",
]
