"""
Quantization module - int8 compression of embedding vectors.

This module provides:
- FixedRangeCodec / AdaptiveMinMaxCodec: the two codecs
- get_vector_codec(): Factory function
- quantize_vector_file / load_vector_file / verify_vector_file: file-level jobs
"""

from audit_rag.quantization.codecs import (
    DEFAULT_SCHEME,
    AdaptiveMinMaxCodec,
    FixedRangeCodec,
    cosine_similarity,
    get_vector_codec,
    measure_accuracy,
)
from audit_rag.quantization.vector_file import (
    ACCURACY_THRESHOLD,
    QuantizationReport,
    load_vector_file,
    quantize_vector_file,
    verify_vector_file,
)

__all__ = [
    # Codecs
    "DEFAULT_SCHEME",
    "AdaptiveMinMaxCodec",
    "FixedRangeCodec",
    "get_vector_codec",
    # Helpers
    "cosine_similarity",
    "measure_accuracy",
    # Files
    "ACCURACY_THRESHOLD",
    "QuantizationReport",
    "load_vector_file",
    "quantize_vector_file",
    "verify_vector_file",
]
