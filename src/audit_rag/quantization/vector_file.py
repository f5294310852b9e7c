"""
Quantized vector files - offline batch job and loader.

Single responsibility: move whole vector files between float and int8
form. Per-document fields other than the vector (ids, text metadata) pass
through untouched.

The job measures round-trip accuracy on a sample before encoding the whole
collection and records it in the file metadata. 0.95 mean cosine similarity
is the acceptance bar for either scheme.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import ValidationError

from audit_rag.core import QuantizedVector, VectorFileError
from audit_rag.quantization.codecs import (
    ADAPTIVE_MINMAX,
    DEFAULT_SCHEME,
    cosine_similarity,
    get_vector_codec,
    measure_accuracy,
)
from audit_rag.schemas import VectorFile, VectorFileMetadata

logger = logging.getLogger(__name__)

ACCURACY_THRESHOLD = 0.95
DEFAULT_SAMPLE_SIZE = 10


@dataclass
class QuantizationReport:
    """Outcome of a quantize or verify run."""

    scheme: str
    vector_count: int
    sample_accuracies: list[float] = field(default_factory=list)
    input_bytes: int | None = None
    output_bytes: int | None = None

    @property
    def mean_accuracy(self) -> float:
        if not self.sample_accuracies:
            return 0.0
        return float(np.mean(self.sample_accuracies))

    @property
    def passed(self) -> bool:
        return self.mean_accuracy >= ACCURACY_THRESHOLD

    @property
    def size_reduction(self) -> float | None:
        if not self.input_bytes or self.output_bytes is None:
            return None
        return 1 - self.output_bytes / self.input_bytes


def _read_vector_file(path: Path) -> VectorFile:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise VectorFileError(f"Cannot read vector file {path}: {e}") from e

    try:
        return VectorFile.model_validate_json(raw)
    except ValidationError as e:
        raise VectorFileError(f"Invalid vector file {path}: {e}") from e


def _sample_accuracies(vectors: list[list[float]], scheme: str, sample_size: int) -> list[float]:
    codec = get_vector_codec(scheme)
    return [measure_accuracy(vector, codec) for vector in vectors[:sample_size]]


def quantize_vector_file(
    input_path: str | Path,
    output_path: str | Path,
    scheme: str = DEFAULT_SCHEME,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> QuantizationReport:
    """
    Quantize every vector in a float vector file and write the int8 version.

    Args:
        input_path: Float vector file ({"metadata": ..., "vectors": [...]})
        output_path: Destination (parent dirs are created)
        scheme: "adaptive_minmax" (default) or "fixed_range"
        sample_size: Vectors used for the accuracy check

    Returns:
        QuantizationReport with sample accuracies and file sizes
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    codec = get_vector_codec(scheme)

    data = _read_vector_file(input_path)
    if data.metadata.quantization is not None:
        raise VectorFileError(f"{input_path} is already quantized")

    vectors = [record.vector for record in data.vectors]
    logger.info("Loaded %d vectors from %s", len(vectors), input_path)

    accuracies = _sample_accuracies(vectors, scheme, sample_size)
    report = QuantizationReport(
        scheme=scheme,
        vector_count=len(vectors),
        sample_accuracies=accuracies,
        input_bytes=input_path.stat().st_size,
    )
    logger.info("Sample accuracy (%s): %.4f", scheme, report.mean_accuracy)
    if not report.passed:
        logger.warning(
            "Mean accuracy %.4f below %.2f threshold", report.mean_accuracy, ACCURACY_THRESHOLD
        )

    records: list[dict[str, Any]] = []
    for idx, record in enumerate(data.vectors):
        quantized = codec.encode(record.vector)
        doc = record.model_dump(exclude={"vector", "vector_min", "vector_max"}, exclude_unset=True)
        doc["vector"] = quantized.to_list()
        if quantized.vmin is not None:
            doc["vector_min"] = quantized.vmin
            doc["vector_max"] = quantized.vmax
        records.append(doc)
        if (idx + 1) % 500 == 0:
            logger.debug("Quantized %d/%d", idx + 1, len(vectors))

    metadata = data.metadata.model_dump(exclude_unset=True)
    metadata.update(
        {
            "quantization": "int8",
            "quantization_scheme": scheme,
            "quantization_accuracy": f"{report.mean_accuracy * 100:.2f}%",
            "quantization_date": datetime.now(timezone.utc).isoformat(),
        }
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps({"metadata": metadata, "vectors": records}, ensure_ascii=False),
        encoding="utf-8",
    )
    report.output_bytes = output_path.stat().st_size
    return report


def load_vector_file(path: str | Path) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """
    Load a vector file, dequantizing int8 vectors back to floats.

    Returns:
        (metadata, vectors) where each vector entry's "vector" is a float
        numpy array and the reconstruction fields are dropped.
    """
    path = Path(path)
    data = _read_vector_file(path)

    try:
        scheme = data.metadata.resolve_scheme()
    except ValueError as e:
        raise VectorFileError(f"{path}: {e}") from e

    metadata = data.metadata.model_dump(exclude_unset=True)
    if scheme is None:
        return metadata, [
            {**record.model_dump(exclude_unset=True), "vector": np.asarray(record.vector)}
            for record in data.vectors
        ]

    codec = get_vector_codec(scheme)
    docs = []
    for record in data.vectors:
        if scheme == ADAPTIVE_MINMAX and (record.vector_min is None or record.vector_max is None):
            raise VectorFileError(f"{path}: record {record.id!r} is missing vector_min/vector_max")
        quantized = QuantizedVector(
            codes=np.asarray(record.vector, dtype=np.int8),
            scheme=scheme,
            vmin=record.vector_min,
            vmax=record.vector_max,
        )
        doc = record.model_dump(exclude={"vector", "vector_min", "vector_max"}, exclude_unset=True)
        doc["vector"] = codec.decode(quantized)
        docs.append(doc)

    logger.info("Decoded %d %s vectors from %s", len(docs), scheme, path)
    return metadata, docs


def verify_vector_file(
    original_path: str | Path,
    quantized_path: str | Path,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> QuantizationReport:
    """Compare a quantized file against its float original, vector by vector."""
    _, originals = load_vector_file(original_path)
    metadata, restored = load_vector_file(quantized_path)

    if len(originals) != len(restored):
        raise VectorFileError(
            f"Vector count mismatch: {len(originals)} original vs {len(restored)} quantized"
        )

    accuracies = [
        cosine_similarity(orig["vector"], rest["vector"])
        for orig, rest in zip(originals[:sample_size], restored[:sample_size])
    ]
    return QuantizationReport(
        scheme=VectorFileMetadata.model_validate(metadata).resolve_scheme() or "none",
        vector_count=len(restored),
        sample_accuracies=accuracies,
    )
