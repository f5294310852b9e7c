"""Pydantic schemas for on-disk formats."""

from audit_rag.schemas.vector_file import (
    VectorFile,
    VectorFileMetadata,
    VectorRecord,
)

__all__ = [
    "VectorFile",
    "VectorFileMetadata",
    "VectorRecord",
]
