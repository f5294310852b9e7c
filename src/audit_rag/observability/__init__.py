"""
Observability Module - optional OpenTelemetry tracing.

USAGE:
------
# At application startup:
from audit_rag.observability import init_tracing

init_tracing()  # No-op unless RAG_TRACING_ENABLED=true

# In code that needs tracing:
from audit_rag.observability import get_tracer

tracer = get_tracer()
with tracer.start_span("rag.search_all", attributes={"rag.keyword_count": 3}) as span:
    ...
    span.set_attribute("rag.context.length", 1200)
"""

from __future__ import annotations

import logging

from audit_rag.observability.config import (
    TracingConfig,
    get_config,
    reset_config,
)
from audit_rag.observability.tracer import (
    NoOpSpan,
    NoOpTracer,
    SpanProtocol,
    TracerProtocol,
    get_tracer,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_tracing_initialized = False


def init_tracing(config: TracingConfig | None = None) -> bool:
    """
    Install an OpenTelemetry tracer provider.

    Spans go to the OTLP/HTTP endpoint when one is configured, otherwise to
    the console exporter.

    Returns:
        True if tracing was initialized, False if disabled or OTel is missing
    """
    global _tracing_initialized
    if _tracing_initialized:
        return True

    config = config or get_config()

    if not config.enabled:
        logger.debug("Tracing disabled")
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError as e:
        logger.warning("OpenTelemetry not installed, tracing disabled: %s", e)
        return False

    if config.endpoint:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        exporter = OTLPSpanExporter(endpoint=config.endpoint)
        logger.info("Exporting spans to %s", config.endpoint)
    else:
        exporter = ConsoleSpanExporter()

    provider = TracerProvider(resource=Resource.create({"service.name": config.service_name}))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    # Drop any NoOpTracer cached before the provider existed
    reset_tracer()
    _tracing_initialized = True
    return True


def shutdown_tracing() -> None:
    """Flush and shut down the tracer provider."""
    global _tracing_initialized

    if not _tracing_initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()

    reset_tracer()
    reset_config()
    _tracing_initialized = False


__all__ = [
    # Initialization
    "init_tracing",
    "shutdown_tracing",
    # Config
    "TracingConfig",
    "get_config",
    "reset_config",
    # Tracer
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
]
