"""
Vector codecs - int8 quantization of embedding vectors.

Two schemes share one VectorCodec interface:

Scheme A (FixedRangeCodec, "fixed_range"):
    Assumes components in [-1, 1]. code = round(v * 127) clamped to
    [-127, 127]; decode = code / 127. No calibration, nothing stored
    besides the codes.

Scheme B (AdaptiveMinMaxCodec, "adaptive_minmax"):
    Per-vector calibration. scale = (max - min) / 255,
    code = round((v - min) / scale) - 128 in [-128, 127];
    decode = (code + 128) * scale + min. min and max travel with the codes.
    A constant vector (scale == 0) encodes to all zeros and decodes to min.

Scheme B is the default for new data. Scheme A stays for reading older files.

Rounding is half-up (floor(x + 0.5)) in both schemes, matching files produced
by the existing front-end build tooling.
"""

from __future__ import annotations

import numpy as np

from audit_rag.core.protocols import ADAPTIVE_MINMAX, FIXED_RANGE, QuantizedVector

DEFAULT_SCHEME = ADAPTIVE_MINMAX

FIXED_RANGE_LIMIT = 127
ADAPTIVE_LEVELS = 255
ADAPTIVE_OFFSET = 128


def _as_vector(vector) -> np.ndarray:
    """Coerce input to a 1-D float64 array and reject empty/non-finite data."""
    arr = np.asarray(vector, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"expected a 1-D vector, got shape {arr.shape}")
    if arr.size == 0:
        raise ValueError("cannot quantize an empty vector")
    if not np.all(np.isfinite(arr)):
        raise ValueError("vector contains NaN or infinite components")
    return arr


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


# ---------------------------------------------------------------------------
# SCHEME A
# ---------------------------------------------------------------------------


class FixedRangeCodec:
    """Symmetric fixed-range codec ([-1, 1] -> [-127, 127])."""

    name = FIXED_RANGE

    def encode(self, vector) -> QuantizedVector:
        arr = _as_vector(vector)
        codes = _round_half_up(arr * FIXED_RANGE_LIMIT)
        codes = np.clip(codes, -FIXED_RANGE_LIMIT, FIXED_RANGE_LIMIT)
        return QuantizedVector(codes=codes.astype(np.int8), scheme=self.name)

    def decode(self, quantized: QuantizedVector) -> np.ndarray:
        codes = np.asarray(quantized.codes, dtype=np.float64)
        return codes / FIXED_RANGE_LIMIT


# ---------------------------------------------------------------------------
# SCHEME B
# ---------------------------------------------------------------------------


class AdaptiveMinMaxCodec:
    """Per-vector min/max codec ([min, max] -> [-128, 127])."""

    name = ADAPTIVE_MINMAX

    def encode(self, vector) -> QuantizedVector:
        arr = _as_vector(vector)
        vmin = float(arr.min())
        vmax = float(arr.max())
        scale = (vmax - vmin) / ADAPTIVE_LEVELS

        if scale == 0:
            # Degenerate all-equal vector
            codes = np.zeros(arr.shape, dtype=np.int8)
        else:
            levels = _round_half_up((arr - vmin) / scale) - ADAPTIVE_OFFSET
            codes = np.clip(levels, -ADAPTIVE_OFFSET, ADAPTIVE_LEVELS - ADAPTIVE_OFFSET)
            codes = codes.astype(np.int8)

        return QuantizedVector(codes=codes, scheme=self.name, vmin=vmin, vmax=vmax)

    def decode(self, quantized: QuantizedVector) -> np.ndarray:
        if quantized.vmin is None or quantized.vmax is None:
            raise ValueError("adaptive_minmax decoding requires vmin and vmax")

        # int8 + 128 would overflow, widen first
        codes = np.asarray(quantized.codes, dtype=np.float64)
        scale = (quantized.vmax - quantized.vmin) / ADAPTIVE_LEVELS
        if scale == 0:
            return np.full(codes.shape, quantized.vmin, dtype=np.float64)
        return (codes + ADAPTIVE_OFFSET) * scale + quantized.vmin


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def cosine_similarity(a, b) -> float:
    """
    Cosine similarity between two vectors.

    Returns 0.0 for mismatched lengths or zero-norm inputs instead of NaN.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        return 0.0
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


def measure_accuracy(vector, codec: "VectorCodecLike | None" = None) -> float:
    """Round-trip a vector through a codec and return cosine similarity to the original."""
    codec = codec or get_vector_codec()
    restored = codec.decode(codec.encode(vector))
    return cosine_similarity(vector, restored)


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------

VectorCodecLike = FixedRangeCodec | AdaptiveMinMaxCodec

_CODECS: dict[str, type[VectorCodecLike]] = {
    FIXED_RANGE: FixedRangeCodec,
    ADAPTIVE_MINMAX: AdaptiveMinMaxCodec,
}


def get_vector_codec(scheme: str = DEFAULT_SCHEME) -> VectorCodecLike:
    """
    Factory function to get a codec by scheme name.

    Args:
        scheme: "adaptive_minmax" (default) or "fixed_range"

    Raises:
        ValueError: unknown scheme name
    """
    try:
        return _CODECS[scheme]()
    except KeyError:
        raise ValueError(
            f"Unknown quantization scheme {scheme!r}; expected one of {sorted(_CODECS)}"
        ) from None
