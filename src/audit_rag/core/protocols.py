"""
Core protocols defining contracts for the RAG core.

Infrastructure pieces (collection sources, vector codecs) implement these
protocols so the orchestrator can be wired with real HTTP sources in
production and in-memory doubles in tests.

PATTERN:
- Protocol defines the contract
- Multiple implementations
- Factory functions for instantiation
- Test doubles for fast unit tests
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from audit_rag.retrieval.document import ExamSubQuestion, Procedure, Standard


# ---------------------------------------------------------------------------
# COLLECTION SOURCE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class CollectionSource(Protocol):
    """
    Contract for fetching raw JSON collections.

    Implementations:
    - HttpCollectionSource (production, static JSON over HTTP)
    - LocalCollectionSource (files on disk)
    - InMemoryCollectionSource (testing)
    """

    async def fetch_collection(self, name: str) -> list[dict[str, Any]]:
        """Fetch a top-level collection ("procedures" or "standards")."""
        ...

    async def fetch_exam_year(self, year: int) -> list[dict[str, Any]] | None:
        """Fetch one year-partitioned exam file. None when the year has no file."""
        ...


# ---------------------------------------------------------------------------
# VECTOR CODEC PROTOCOL
# ---------------------------------------------------------------------------

FIXED_RANGE = "fixed_range"
ADAPTIVE_MINMAX = "adaptive_minmax"


@dataclass(frozen=True)
class QuantizedVector:
    """
    Int8 codes plus whatever the codec needs to reconstruct them.

    FixedRange leaves vmin/vmax as None; AdaptiveMinMax always sets both.
    """

    codes: np.ndarray
    scheme: str
    vmin: float | None = None
    vmax: float | None = None

    def to_list(self) -> list[int]:
        return [int(c) for c in self.codes]


@runtime_checkable
class VectorCodec(Protocol):
    """
    Contract for lossy int8 vector compression.

    Implementations:
    - FixedRangeCodec (Scheme A, symmetric [-1, 1] -> [-127, 127])
    - AdaptiveMinMaxCodec (Scheme B, per-vector min/max -> [-128, 127])
    """

    name: str

    def encode(self, vector: Any) -> QuantizedVector:
        """Quantize a whole vector."""
        ...

    def decode(self, quantized: QuantizedVector) -> np.ndarray:
        """Reconstruct a float vector."""
        ...


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------


@dataclass
class SearchAllResult:
    """Everything search_all produces for one query."""

    context: str
    procedures: list[Procedure] = field(default_factory=list)
    standards: list[Standard] = field(default_factory=list)
    exam_questions: list[ExamSubQuestion] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return bool(self.procedures or self.standards or self.exam_questions)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "context": self.context,
            "procedures": [doc.to_dict() for doc in self.procedures],
            "standards": [doc.to_dict() for doc in self.standards],
            "exam_questions": [doc.to_dict() for doc in self.exam_questions],
            "keywords": list(self.keywords),
        }
