"""
Unit Tests for Observability Module

Tests the optional OpenTelemetry integration with focus on:
1. Graceful degradation (NoOpTracer when disabled)
2. Configuration loading from environment
3. Attribute helpers

STAFF ENGINEER PATTERNS:
------------------------
1. Tests work WITHOUT OpenTelemetry installed
2. Environment variable handling tested with patch.dict
3. Zero overhead when disabled
"""

from unittest.mock import patch

from audit_rag.observability import init_tracing
from audit_rag.observability.attributes import (
    RAG_CONTEXT_LENGTH,
    RAG_PROCEDURE_COUNT,
    RAG_RESULT_STANDARDS,
    collection_attributes,
    search_result_attributes,
)
from audit_rag.observability.config import TracingConfig, get_config, reset_config
from audit_rag.observability.tracer import NoOpSpan, NoOpTracer, get_tracer, reset_tracer


class TestTracingConfig:
    """Test configuration loading."""

    def setup_method(self):
        reset_config()

    def teardown_method(self):
        reset_config()

    def test_config_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = TracingConfig.from_env()

        assert config.enabled is False
        assert config.service_name == "audit-rag"
        assert config.endpoint is None
        assert config.capture_query is False

    def test_config_enabled_from_env(self):
        env = {
            "RAG_TRACING_ENABLED": "true",
            "RAG_TRACING_ENDPOINT": "http://localhost:4318/v1/traces",
            "RAG_TRACING_CAPTURE_QUERY": "1",
        }
        with patch.dict("os.environ", env, clear=True):
            config = TracingConfig.from_env()

        assert config.enabled is True
        assert config.endpoint == "http://localhost:4318/v1/traces"
        assert config.capture_query is True

    def test_get_config_singleton(self):
        with patch.dict("os.environ", {}, clear=True):
            assert get_config() is get_config()


class TestNoOpTracer:
    """Graceful degradation when tracing is off."""

    def setup_method(self):
        reset_config()
        reset_tracer()

    def teardown_method(self):
        reset_config()
        reset_tracer()

    def test_disabled_returns_noop(self):
        with patch.dict("os.environ", {"RAG_TRACING_ENABLED": "false"}, clear=True):
            assert isinstance(get_tracer(), NoOpTracer)

    def test_noop_span_accepts_everything(self):
        tracer = NoOpTracer()

        with tracer.start_span("rag.search_all", attributes={"rag.keyword_count": 2}) as span:
            assert isinstance(span, NoOpSpan)
            span.set_attribute("rag.context.length", 10)
            span.set_status("ok")
            span.record_exception(ValueError("x"))

    def test_tracer_cached(self):
        with patch.dict("os.environ", {}, clear=True):
            assert get_tracer() is get_tracer()

    def test_init_tracing_disabled(self):
        assert init_tracing(TracingConfig(enabled=False)) is False


class TestAttributes:
    def test_collection_attributes(self):
        attrs = collection_attributes(procedures=3, standards=4, exam_years=2)

        assert attrs[RAG_PROCEDURE_COUNT] == 3

    def test_search_result_attributes(self):
        attrs = search_result_attributes(procedures=1, standards=2, exam_questions=0, context_length=120)

        assert attrs[RAG_RESULT_STANDARDS] == 2
        assert attrs[RAG_CONTEXT_LENGTH] == 120
