"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from minisearch.observability.context import get_trace_context, set_trace_context, trace_context
from minisearch.observability.logging import JsonFormatter, configure_logging
from minisearch.observability.metrics import (
    ERROR_COUNT,
    INDEX_DOC_COUNT,
    INDEX_OPERATIONS,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from minisearch.observability.tracing import create_span, get_tracer, init_tracing, span_attributes


__all__ = [
    "ERROR_COUNT",
    "INDEX_DOC_COUNT",
    "INDEX_OPERATIONS",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "span_attributes",
    "trace_context",
    "track_latency",
]
