"""
Schemas for the embedding vector file.

These Pydantic models define the on-disk contract shared by the offline
quantization job and the loader:

    {
      "metadata": {..., "quantization": "int8", "quantization_scheme": "adaptive_minmax"},
      "vectors": [{"id": "...", "vector": [...], "vector_min": -0.8, "vector_max": 0.9, ...}]
    }

Unknown keys are allowed everywhere and survive a load/save cycle untouched,
so per-document metadata passes through the quantizer unchanged.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from audit_rag.core.protocols import ADAPTIVE_MINMAX, FIXED_RANGE

INT8_MARKER = "int8"
LEGACY_FIXED_RANGE = "[-127, 127]"
KNOWN_SCHEMES = (FIXED_RANGE, ADAPTIVE_MINMAX)


class VectorRecord(BaseModel):
    """One document entry. Only `vector` is required."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    vector: list[float]
    vector_min: float | None = None
    vector_max: float | None = None


class VectorFileMetadata(BaseModel):
    """File-level metadata block."""

    model_config = ConfigDict(extra="allow")

    quantization: str | dict[str, Any] | None = None
    quantization_scheme: str | None = None
    quantization_accuracy: str | None = None
    quantization_date: str | None = None

    def resolve_scheme(self) -> str | None:
        """
        Which codec decodes this file, or None for plain float vectors.

        Files written before quantization_scheme existed are recognised by
        their marker shape:
        - "int8" string + per-vector min/max -> adaptive_minmax
        - {"method": "int8", "range": "[-127, 127]"} -> fixed_range
        """
        marker = self.quantization
        if marker is None:
            return None

        if isinstance(marker, dict):
            if marker.get("method") != INT8_MARKER:
                raise ValueError(f"Unsupported quantization method: {marker.get('method')!r}")
            if self.quantization_scheme:
                return self._known_scheme(self.quantization_scheme)
            if marker.get("range", LEGACY_FIXED_RANGE) == LEGACY_FIXED_RANGE:
                return FIXED_RANGE
            raise ValueError(f"Unsupported quantization range: {marker.get('range')!r}")

        if marker != INT8_MARKER:
            raise ValueError(f"Unsupported quantization marker: {marker!r}")
        return self._known_scheme(self.quantization_scheme or ADAPTIVE_MINMAX)

    @staticmethod
    def _known_scheme(scheme: str) -> str:
        if scheme not in KNOWN_SCHEMES:
            raise ValueError(f"Unsupported quantization scheme: {scheme!r}")
        return scheme


class VectorFile(BaseModel):
    """Top-level vector file."""

    metadata: VectorFileMetadata = Field(default_factory=VectorFileMetadata)
    vectors: list[VectorRecord]
