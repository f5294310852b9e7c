"""
Sample collections for the retrieval system.

Used when no RAG_BASE_URL or RAG_DATA_DIR is configured, and by tests that
want realistic Korean records without fixtures on disk.
"""

from audit_rag.retrieval.seeds.sample_collections import (
    get_sample_exams,
    get_sample_procedures,
    get_sample_source,
    get_sample_standards,
)

__all__ = [
    "get_sample_exams",
    "get_sample_procedures",
    "get_sample_source",
    "get_sample_standards",
]
