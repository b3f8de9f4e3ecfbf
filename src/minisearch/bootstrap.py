"""Wire settings, observability and the search facades together."""

from __future__ import annotations

import logging

from minisearch.config import Settings, get_settings
from minisearch.observability import configure_logging, init_metrics, init_tracing
from minisearch.search.engine import SearchEngine
from minisearch.search.indexer import SearchIndexer


logger = logging.getLogger(__name__)

SERVICE_NAME = "minisearch"


def setup_observability(settings: Settings) -> None:
    """Configure logging, metrics and tracing from ``settings``."""
    configure_logging(level=settings.log_level, json_output=settings.log_json)
    init_metrics(service_name=SERVICE_NAME)
    init_tracing(service_name=SERVICE_NAME)


def build_engine(settings: Settings | None = None, *, observability: bool = True) -> SearchEngine:
    """Create an indexer and an engine sharing it.

    Pages are indexed through ``engine.indexer``; the engine reads the same
    index under the same lock.
    """
    settings = settings or get_settings()
    if observability:
        setup_observability(settings)

    indexer = SearchIndexer(settings)
    engine = SearchEngine(indexer, settings)
    logger.info(
        "Search engine ready (phrase matching: %s, snippet length: %d)",
        settings.phrase_matching,
        settings.snippet_length,
    )
    return engine
