"""
OpenTelemetry Configuration

Loads tracing settings from environment variables.
Tracing stays off unless explicitly enabled.
"""

import os
from dataclasses import dataclass


@dataclass
class TracingConfig:
    """Configuration for span export.

    Environment Variables:
        RAG_TRACING_ENABLED: Enable tracing (default: false)
        RAG_TRACING_SERVICE_NAME: Service name on exported spans (default: audit-rag)
        RAG_TRACING_ENDPOINT: OTLP/HTTP endpoint (console exporter if empty)
        RAG_TRACING_CAPTURE_QUERY: Record raw query text on spans (default: false)
    """

    enabled: bool = False
    service_name: str = "audit-rag"
    endpoint: str | None = None
    capture_query: bool = False

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Load config from environment variables."""
        return cls(
            enabled=os.environ.get("RAG_TRACING_ENABLED", "false").lower() in ("true", "1", "yes"),
            service_name=os.environ.get("RAG_TRACING_SERVICE_NAME", "audit-rag"),
            endpoint=os.environ.get("RAG_TRACING_ENDPOINT") or None,
            capture_query=os.environ.get("RAG_TRACING_CAPTURE_QUERY", "false").lower() in ("true", "1", "yes"),
        )


# Global config singleton
_config: TracingConfig | None = None


def get_config() -> TracingConfig:
    """Get the global tracing config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = TracingConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
