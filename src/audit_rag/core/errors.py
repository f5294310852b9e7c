"""
Exception hierarchy for the RAG core.

Library code raises these; callers (CLI, chat UI) decide how to render them.
Every load failure carries an ErrorCategory so the caller can tell a network
outage from a corrupt file without parsing messages.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Coarse failure category surfaced to callers."""

    NETWORK = "network"
    PARSE = "parse"
    UNKNOWN = "unknown"


class RagError(Exception):
    """Base class for all errors raised by audit_rag."""


class CollectionLoadError(RagError):
    """A document collection could not be fetched or decoded."""

    def __init__(
        self,
        collection: str,
        category: ErrorCategory,
        message: str,
    ):
        self.collection = collection
        self.category = category
        super().__init__(f"[{category.value}] {collection}: {message}")


class RagInitializationError(RagError):
    """
    Fatal initialization failure.

    Raised by RagService.initialize() / search_all() when any required
    collection fails to load. No partially loaded state is exposed.
    """

    def __init__(self, category: ErrorCategory, message: str):
        self.category = category
        super().__init__(f"RAG initialization failed ({category.value}): {message}")


class VectorFileError(RagError):
    """A vector file is missing, malformed, or has an unknown quantization marker."""
