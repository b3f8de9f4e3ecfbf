"""Unit tests for observability module."""

import json
import logging
import sys

from opentelemetry import trace as trace_api
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
import pytest

from minisearch.observability import (
    INDEX_DOC_COUNT,
    SEARCH_COUNT,
    SEARCH_LATENCY,
    JsonFormatter,
    configure_logging,
    create_span,
    get_metrics,
    get_metrics_content_type,
    get_trace_context,
    init_metrics,
    init_tracing,
    set_trace_context,
    span_attributes,
    track_latency,
)
from minisearch.observability import metrics as metrics_module, tracing as tracing_module
from minisearch.observability.context import sync_from_span


def _record(msg: str = "test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="minisearch.search.engine",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def span_exporter():
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    previous = tracing_module._tracer_holder["tracer"]
    tracing_module._tracer_holder["tracer"] = provider.get_tracer("test")
    yield exporter
    tracing_module._tracer_holder["tracer"] = previous


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestJsonFormatter:
    """Tests for structured JSON logging."""

    def test_format_includes_trace_context(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["logger"] == "minisearch.search.engine"
        assert data["component"] == "engine"
        assert "timestamp" in data
        assert "trace_id" in data
        assert "span_id" in data

    def test_format_includes_extra_fields(self):
        record = _record(level=logging.ERROR)
        record.batch_id = "nightly"
        data = json.loads(JsonFormatter().format(record))

        assert data["batch_id"] == "nightly"
        assert "search" not in data

    def test_search_fields_are_grouped(self):
        record = _record()
        record.query = "q" * 500
        record.query_type = "fuzzy"
        record.result_count = 3
        record.duration_ms = 1.234567
        data = json.loads(JsonFormatter().format(record))

        assert data["search"]["query_type"] == "fuzzy"
        assert data["search"]["result_count"] == 3
        assert data["search"]["duration_ms"] == 1.235
        assert data["search"]["query"] == "q" * 200 + "..."
        assert "query_type" not in data

    def test_engine_log_records_carry_search_fields(self, engine, caplog):
        with caplog.at_level(logging.INFO, logger="minisearch.search.engine"):
            engine.search_terms(["java"])

        [record] = [r for r in caplog.records if r.getMessage().startswith("Search")]
        data = json.loads(JsonFormatter().format(record))
        assert data["search"]["query"] == "java"
        assert data["search"]["query_type"] == "all_terms"
        assert data["search"]["result_count"] == 1

    def test_format_truncates_and_redacts(self):
        record = _record("x" * 5000)
        record.api_key = "secret"
        data = json.loads(JsonFormatter().format(record))

        assert data["message"].endswith("...")
        assert data["api_key"] == "[REDACTED]"

    def test_format_includes_exception(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, "t.py", 1, "failed", (), exc_info=sys.exc_info())
        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: broken" in data["exception"]

    def test_json_default_handles_set_and_bytes(self):
        formatter = JsonFormatter()
        assert formatter._json_default({3, 1, 2}) == [1, 2, 3]
        assert formatter._json_default(b"ok") == "ok"
        assert isinstance(formatter._json_default({1, "a"}), list)


@pytest.mark.unit
class TestTraceContext:
    """Tests for trace context propagation."""

    def test_get_trace_context_generates_ids(self):
        ctx = get_trace_context()
        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16

    def test_set_trace_context_preserves_values(self):
        set_trace_context("ab" * 16, "cd" * 8, query="java")
        ctx = get_trace_context()
        assert ctx["trace_id"] == "ab" * 16
        assert ctx["span_id"] == "cd" * 8
        assert ctx["query"] == "java"

    def test_sync_from_span_copies_ids(self, span_exporter):
        with create_span("search.query") as span:
            sync_from_span(span)
            ctx = get_trace_context()
            expected = span.get_span_context()
        assert ctx["trace_id"] == format(expected.trace_id, "032x")
        assert ctx["span_id"] == format(expected.span_id, "016x")

    def test_sync_from_invalid_span_is_ignored(self):
        set_trace_context("ab" * 16, "cd" * 8)
        sync_from_span(trace_api.INVALID_SPAN)
        assert get_trace_context()["trace_id"] == "ab" * 16


@pytest.mark.unit
class TestTracing:
    """Tests for OpenTelemetry tracing."""

    def test_init_tracing_applies_resource_attributes(self):
        provider = init_tracing("test-service", resource_attributes={"service.version": "2.0.0"})
        assert provider.resource.attributes["service.name"] == "test-service"
        assert provider.resource.attributes["service.version"] == "2.0.0"

    def test_span_attributes_are_namespaced(self):
        attributes = span_attributes("search", query="java", type="fuzzy", language=None, limit=5, terms=["a"])
        assert attributes == {
            "search.query": "java",
            "search.type": "fuzzy",
            "search.limit": 5,
            "search.terms": "['a']",
        }

    def test_get_tracer_initializes_when_missing(self):
        tracing_module._tracer_holder["tracer"] = None
        assert tracing_module.get_tracer() is not None

    def test_create_span_records_attributes(self, span_exporter):
        with create_span("index.batch", attributes={"index.batch_size": 3}):
            pass

        [span] = span_exporter.get_finished_spans()
        assert span.name == "index.batch"
        assert span.attributes["index.batch_size"] == 3

    def test_create_span_marks_errors(self, span_exporter):
        with pytest.raises(RuntimeError), create_span("search.query"):
            raise RuntimeError("boom")

        [span] = span_exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR

    def test_engine_search_emits_span(self, span_exporter, engine):
        engine.search_terms(["java"])

        names = [span.name for span in span_exporter.get_finished_spans()]
        assert "search.query" in names


@pytest.mark.unit
class TestMetrics:
    def test_init_metrics_returns_provider(self):
        provider = init_metrics("test-service", {"service.version": "1.0.0"})
        assert isinstance(provider, MeterProvider)
        assert init_metrics("other") is provider

    def test_track_latency_observes_histogram(self):
        labels = {"query_type": "wildcard"}
        before = metrics_module._SEARCH_LATENCY_PROM.labels(**labels)._sum.get()
        with track_latency(SEARCH_LATENCY, **labels):
            pass
        assert metrics_module._SEARCH_LATENCY_PROM.labels(**labels)._sum.get() >= before

    def test_counters_and_gauges_update_prometheus(self):
        counter = metrics_module._SEARCH_COUNT_PROM.labels(query_type="any_terms", status="success")
        before = counter._value.get()
        SEARCH_COUNT.labels(query_type="any_terms", status="success").inc()
        assert counter._value.get() == before + 1

        INDEX_DOC_COUNT.labels().set(42)
        assert metrics_module._INDEX_DOC_COUNT_PROM._value.get() == 42

    def test_metric_bridge_rejects_unknown_kind(self):
        bridge = metrics_module.MetricBridge(
            metrics_module._ERROR_COUNT_PROM,
            otel_name="bogus",
            otel_description="bogus",
            otel_kind="summary",
        )
        with pytest.raises(ValueError, match="Unknown metric kind"):
            bridge.labels(component="x", error_type="y").inc()

    def test_get_metrics_exposes_search_metrics(self, engine):
        engine.search_terms(["java"])

        output = get_metrics()
        assert b"minisearch_search_latency_seconds" in output
        assert b"minisearch_searches_total" in output
        assert get_metrics_content_type().startswith("text/plain")


@pytest.mark.unit
class TestConfigureLogging:
    def test_json_output(self, restore_root_logger):
        configure_logging("DEBUG", json_output=True)

        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)

    def test_plain_output_and_logger_levels(self, restore_root_logger):
        configure_logging("warning", json_output=False, logger_levels={"minisearch.search": "debug"})

        assert restore_root_logger.level == logging.WARNING
        assert not isinstance(restore_root_logger.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("minisearch.search").level == logging.DEBUG
        logging.getLogger("minisearch.search").setLevel(logging.NOTSET)

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("chatty")
        assert restore_root_logger.level == logging.INFO
