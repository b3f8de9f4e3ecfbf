"""Running statistics for searches and indexing.

Recorders are updated while the engine holds only the shared side of the
index lock, so each one serializes its own updates with a private mutex.
Callers read immutable snapshots.
"""

from __future__ import annotations

from collections import Counter, OrderedDict
from datetime import datetime, timezone
import threading

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchStatsSnapshot(BaseModel):
    """Point-in-time view of search activity."""

    model_config = ConfigDict(frozen=True)

    total_searches: int = 0
    successful_searches: int = 0
    failed_searches: int = 0
    total_search_time_ms: float = 0.0
    average_search_time_ms: float = 0.0
    total_results_returned: int = 0
    success_rate: float = Field(default=0.0, description="Percentage of successful searches")
    average_results_per_search: float = 0.0
    last_search_time: datetime | None = None
    popular_queries: list[tuple[str, int]] = Field(default_factory=list)
    slowest_queries: list[tuple[str, float]] = Field(default_factory=list)
    recent_queries: list[str] = Field(default_factory=list)


class IndexingStatsSnapshot(BaseModel):
    """Point-in-time view of indexing activity."""

    model_config = ConfigDict(frozen=True)

    total_pages_indexed: int = 0
    pages_indexed_today: int = 0
    pages_updated: int = 0
    pages_removed: int = 0
    pages_failed: int = 0
    total_indexing_time_ms: float = 0.0
    average_indexing_time_ms: float = 0.0
    index_size: int = 0
    last_index_time: datetime | None = None


class SearchStats:
    """Thread-safe search counters with popular, slow and recent query tracking."""

    def __init__(self, recent_capacity: int = 100, top_limit: int = 10) -> None:
        self._lock = threading.Lock()
        self._recent_capacity = recent_capacity
        self._top_limit = top_limit
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._total_time_ms = 0.0
        self._total_results = 0
        self._last_search_time: datetime | None = None
        self._popular: Counter[str] = Counter()
        self._query_time_ms: dict[str, float] = {}
        # Most recent first
        self._recent: OrderedDict[str, None] = OrderedDict()

    def record_success(self, query: str, elapsed_ms: float, result_count: int) -> None:
        with self._lock:
            self._total += 1
            self._successful += 1
            self._total_time_ms += elapsed_ms
            self._total_results += result_count
            self._last_search_time = _utcnow()
            self._popular[query] += 1
            self._track_query(query, elapsed_ms)

    def record_failure(self, query: str, elapsed_ms: float) -> None:
        with self._lock:
            self._total += 1
            self._failed += 1
            self._total_time_ms += elapsed_ms
            self._last_search_time = _utcnow()
            self._track_query(query, elapsed_ms)

    def _track_query(self, query: str, elapsed_ms: float) -> None:
        self._query_time_ms[query] = self._query_time_ms.get(query, 0.0) + elapsed_ms
        self._recent[query] = None
        self._recent.move_to_end(query, last=False)
        while len(self._recent) > self._recent_capacity:
            self._recent.popitem(last=True)

    def popular_queries(self, limit: int | None = None) -> list[tuple[str, int]]:
        """Queries by hit count descending, ties by query text."""
        with self._lock:
            return self._popular_locked(self._top_limit if limit is None else limit)

    def slowest_queries(self, limit: int | None = None) -> list[tuple[str, float]]:
        """Queries by cumulative time descending, ties by query text."""
        with self._lock:
            return self._slowest_locked(self._top_limit if limit is None else limit)

    def recent_queries(self, limit: int | None = None) -> list[str]:
        with self._lock:
            recent = list(self._recent)
        return recent if limit is None else recent[: max(limit, 0)]

    def _popular_locked(self, limit: int) -> list[tuple[str, int]]:
        ranked = sorted(self._popular.items(), key=lambda item: (-item[1], item[0]))
        return ranked[: max(limit, 0)]

    def _slowest_locked(self, limit: int) -> list[tuple[str, float]]:
        ranked = sorted(self._query_time_ms.items(), key=lambda item: (-item[1], item[0]))
        return ranked[: max(limit, 0)]

    def snapshot(self) -> SearchStatsSnapshot:
        with self._lock:
            return SearchStatsSnapshot(
                total_searches=self._total,
                successful_searches=self._successful,
                failed_searches=self._failed,
                total_search_time_ms=self._total_time_ms,
                average_search_time_ms=self._total_time_ms / self._total if self._total else 0.0,
                total_results_returned=self._total_results,
                success_rate=self._successful / self._total * 100 if self._total else 0.0,
                average_results_per_search=self._total_results / self._successful if self._successful else 0.0,
                last_search_time=self._last_search_time,
                popular_queries=self._popular_locked(self._top_limit),
                slowest_queries=self._slowest_locked(self._top_limit),
                recent_queries=list(self._recent),
            )


class IndexingStats:
    """Thread-safe indexing counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_indexed = 0
        self._indexed_today = 0
        self._updated = 0
        self._removed = 0
        self._failed = 0
        self._total_time_ms = 0.0
        self._index_size = 0
        self._last_index_time: datetime | None = None

    def record_indexed(self, elapsed_ms: float) -> None:
        with self._lock:
            self._total_indexed += 1
            self._indexed_today += 1
            self._total_time_ms += elapsed_ms
            self._last_index_time = _utcnow()

    def record_updated(self) -> None:
        with self._lock:
            self._updated += 1
            self._last_index_time = _utcnow()

    def record_removed(self) -> None:
        with self._lock:
            self._removed += 1
            self._last_index_time = _utcnow()

    def record_failed(self) -> None:
        with self._lock:
            self._failed += 1

    def set_index_size(self, size: int) -> None:
        with self._lock:
            self._index_size = size

    def reset_daily_counters(self) -> None:
        with self._lock:
            self._indexed_today = 0

    def snapshot(self) -> IndexingStatsSnapshot:
        with self._lock:
            return IndexingStatsSnapshot(
                total_pages_indexed=self._total_indexed,
                pages_indexed_today=self._indexed_today,
                pages_updated=self._updated,
                pages_removed=self._removed,
                pages_failed=self._failed,
                total_indexing_time_ms=self._total_time_ms,
                average_indexing_time_ms=self._total_time_ms / self._total_indexed if self._total_indexed else 0.0,
                index_size=self._index_size,
                last_index_time=self._last_index_time,
            )
