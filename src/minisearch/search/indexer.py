"""Thread-safe indexing facade over the inverted index.

``SearchIndexer`` owns the inverted index, the text processor, the indexing
statistics and the reader/writer lock. Every public method takes the lock
exactly once; the ``_locked`` helpers assume the caller already holds the
write side. Failures inside an operation are logged, counted and turned into
a no-op so crawlers and loaders are never interrupted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import logging
import time

from minisearch.config import Settings
from minisearch.observability.metrics import ERROR_COUNT, INDEX_DOC_COUNT, INDEX_OPERATIONS
from minisearch.observability.tracing import create_span, span_attributes
from minisearch.search.analyzers import TextProcessor
from minisearch.search.document import DocumentRecord
from minisearch.search.errors import IndexingError, InvalidInputError
from minisearch.search.inverted_index import IndexStats, InvertedIndex
from minisearch.search.locking import ReadWriteLock
from minisearch.search.models import WebPage
from minisearch.search.stats import IndexingStats, IndexingStatsSnapshot


logger = logging.getLogger(__name__)

OUTCOME_INDEXED = "indexed"
OUTCOME_UPDATED = "updated"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"


@dataclass(frozen=True)
class BatchIndexResult:
    """Outcome of a batch indexing run."""

    indexed: int
    updated: int
    skipped: int
    failed: int
    errors: tuple[str, ...]

    @property
    def total(self) -> int:
        return self.indexed + self.updated + self.skipped + self.failed


class SearchIndexer:
    """Index, update and remove pages while keeping statistics current."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        text_processor: TextProcessor | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._text_processor = text_processor or TextProcessor()
        self._index = InvertedIndex()
        self._stats = IndexingStats()
        self._lock = ReadWriteLock()
        logger.debug("SearchIndexer initialized")

    @property
    def lock(self) -> ReadWriteLock:
        """Lock shared with search engines built on this indexer."""
        return self._lock

    @property
    def inverted_index(self) -> InvertedIndex:
        """Underlying index. Callers must hold ``lock`` while using it."""
        return self._index

    @property
    def text_processor(self) -> TextProcessor:
        return self._text_processor

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def index_page(self, page: WebPage | None) -> None:
        """Index a page, or update it when the URL is already indexed.

        Invalid pages (missing, blank URL) are skipped with a warning.
        """
        self._index_one(page)

    def index_pages(self, pages: Iterable[WebPage | None] | None) -> BatchIndexResult:
        """Index pages one by one; a failing page never aborts the batch."""
        page_list = list(pages or [])
        if not page_list:
            logger.warning("No pages to index")
            return BatchIndexResult(indexed=0, updated=0, skipped=0, failed=0, errors=())

        logger.info("Starting batch indexing of %d pages", len(page_list))
        counts = {OUTCOME_INDEXED: 0, OUTCOME_UPDATED: 0, OUTCOME_SKIPPED: 0, OUTCOME_FAILED: 0}
        errors: list[str] = []

        with create_span("index.batch", attributes=span_attributes("index", batch_size=len(page_list))):
            for page in page_list:
                outcome, error = self._index_one(page)
                counts[outcome] += 1
                if error:
                    errors.append(error)

        result = BatchIndexResult(
            indexed=counts[OUTCOME_INDEXED],
            updated=counts[OUTCOME_UPDATED],
            skipped=counts[OUTCOME_SKIPPED],
            failed=counts[OUTCOME_FAILED],
            errors=tuple(errors),
        )
        logger.info(
            "Batch indexing completed: %d indexed, %d updated, %d skipped, %d failed",
            result.indexed,
            result.updated,
            result.skipped,
            result.failed,
        )
        return result

    def update_page(self, page: WebPage | None) -> bool:
        """Replace an indexed page; unknown URLs are indexed as new pages."""
        try:
            page = self._validate(page)
        except InvalidInputError as exc:
            logger.warning("Cannot update page: %s", exc)
            return False

        try:
            with (
                create_span("index.update", attributes=span_attributes("index", url=page.url)),
                self._lock.write_locked(),
            ):
                if self._index.is_document_indexed(page.url):
                    self._update_locked(page)
                else:
                    logger.info("Page not found in index, adding as new: %s", page.url)
                    self._add_locked(page, time.perf_counter())
        except Exception as exc:
            self._record_failure("update", page.url, exc)
            return False
        return True

    def remove_page(self, url: str | None) -> bool:
        """Remove a page. Returns False when the URL is blank or not indexed."""
        if not url or not url.strip():
            logger.warning("Cannot remove page with empty URL")
            return False

        try:
            with self._lock.write_locked():
                removed = self._index.remove_document(url)
                if removed is None:
                    logger.warning("Page not found in index: %s", url)
                    return False
                self._stats.record_removed()
                self._refresh_size_locked()
        except Exception as exc:
            self._record_failure("remove", url, exc)
            return False

        INDEX_OPERATIONS.labels(operation="remove", status="success").inc()
        logger.info("Removed page from index: %s", url)
        return True

    def clear_index(self) -> None:
        try:
            with self._lock.write_locked():
                logger.info("Clearing entire search index")
                self._index.clear()
                self._refresh_size_locked()
        except Exception as exc:
            self._record_failure("clear", "*", exc)
            return
        INDEX_OPERATIONS.labels(operation="clear", status="success").inc()
        logger.info("Search index cleared")

    def optimize_index(self) -> None:
        """Reserved maintenance hook; logs index statistics and changes nothing."""
        try:
            with self._lock.write_locked():
                before = self._index.index_stats()
                logger.info("Starting index optimization: %s", before.to_dict())
                after = self._index.index_stats()
                logger.info("Index optimization completed: %s", after.to_dict())
        except Exception as exc:
            self._record_failure("optimize", "*", exc)
            return
        INDEX_OPERATIONS.labels(operation="optimize", status="success").inc()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def index_size(self) -> int:
        with self._lock.read_locked():
            return self._index.total_documents

    def is_indexed(self, url: str) -> bool:
        with self._lock.read_locked():
            return self._index.is_document_indexed(url)

    def indexing_stats(self) -> IndexingStatsSnapshot:
        with self._lock.read_locked():
            self._stats.set_index_size(self._index.total_documents)
            return self._stats.snapshot()

    def reset_daily_counters(self) -> None:
        self._stats.reset_daily_counters()

    def search(self, terms: Sequence[str]) -> list[DocumentRecord]:
        """AND lookup of already-normalized terms, best match first."""
        with self._lock.read_locked():
            return [ranked.document for ranked in self._index.search(terms)]

    def search_any(self, terms: Sequence[str]) -> list[DocumentRecord]:
        """OR lookup of already-normalized terms, best match first."""
        with self._lock.read_locked():
            return [ranked.document for ranked in self._index.search_any(terms)]

    def documents_for_term(self, term: str) -> list[DocumentRecord]:
        with self._lock.read_locked():
            return self._index.documents_for_term(term)

    def index_stats(self) -> IndexStats:
        with self._lock.read_locked():
            return self._index.index_stats()

    def all_indexed_terms(self) -> list[str]:
        with self._lock.read_locked():
            return sorted(self._index.all_terms())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _validate(page: WebPage | None) -> WebPage:
        if page is None:
            raise InvalidInputError("page is None")
        if not page.has_valid_url():
            raise InvalidInputError("page URL is blank")
        return page

    def _index_one(self, page: WebPage | None) -> tuple[str, str | None]:
        try:
            page = self._validate(page)
        except InvalidInputError as exc:
            logger.warning("Cannot index page: %s", exc)
            return OUTCOME_SKIPPED, None

        start = time.perf_counter()
        try:
            with (
                create_span("index.page", attributes=span_attributes("index", url=page.url)),
                self._lock.write_locked(),
            ):
                if self._index.is_document_indexed(page.url):
                    logger.info("Updating existing indexed page: %s", page.url)
                    self._update_locked(page)
                    return OUTCOME_UPDATED, None
                self._add_locked(page, start)
                return OUTCOME_INDEXED, None
        except Exception as exc:
            self._record_failure("index", page.url, exc)
            return OUTCOME_FAILED, f"{page.url}: {exc}"

    def _add_locked(self, page: WebPage, start: float) -> None:
        document = self._process_page(page)
        self._index.add_document(document)
        elapsed_ms = (time.perf_counter() - start) * 1000
        self._stats.record_indexed(elapsed_ms)
        self._refresh_size_locked()
        INDEX_OPERATIONS.labels(operation="index", status="success").inc()
        logger.info(
            "Indexed page: %s (%d terms, %.2fms)",
            page.url,
            len(document.term_frequencies),
            elapsed_ms,
            extra={"url": page.url, "operation": "index", "duration_ms": elapsed_ms},
        )

    def _update_locked(self, page: WebPage) -> None:
        document = self._process_page(page)
        self._index.update_document(document)
        self._stats.record_updated()
        self._refresh_size_locked()
        INDEX_OPERATIONS.labels(operation="update", status="success").inc()
        logger.info("Updated indexed page: %s", page.url)

    def _refresh_size_locked(self) -> None:
        size = self._index.total_documents
        self._stats.set_index_size(size)
        INDEX_DOC_COUNT.labels().set(size)

    def _process_page(self, page: WebPage) -> DocumentRecord:
        """Build a fully populated record from a page's content."""
        try:
            document = DocumentRecord.from_page(page)
            frequencies = self._text_processor.term_frequencies(page.content)
            positions = self._text_processor.term_positions(page.content)
            for term, frequency in frequencies.items():
                document.add_term(term, frequency, positions[term])
            document.calculate_relevance_score()
        except Exception as exc:
            raise IndexingError(f"failed to process {page.url}: {exc}") from exc
        return document

    def _record_failure(self, operation: str, url: str, exc: Exception) -> None:
        logger.exception("Error during %s of %s", operation, url, extra={"url": url, "operation": operation})
        self._stats.record_failed()
        INDEX_OPERATIONS.labels(operation=operation, status="error").inc()
        ERROR_COUNT.labels(component="indexer", error_type=type(exc).__name__).inc()
