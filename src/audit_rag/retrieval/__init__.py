"""
Retrieval module - lexical search over the audit study collections.

This module provides:
- Procedure, Standard, ExamSubQuestion: document models
- extract_keywords / calculate_relevance_score: the shared scorer
- search_procedures / search_standards / search_exam_questions: searchers
- format_as_context(): prompt context assembler
- Http/Local/InMemory collection sources and get_collection_source()

ARCHITECTURE:
-------------
1. Protocol defines the contract (CollectionSource in core.protocols)
2. Multiple implementations (HTTP, local files, in-memory)
3. Factory function for instantiation
4. Pure search functions over immutable documents
"""

# Document models
from audit_rag.retrieval.document import (
    Document,
    ExamFile,
    ExamSubQuestion,
    Procedure,
    Standard,
)

# Scoring
from audit_rag.retrieval.scoring import (
    SYNONYMS,
    calculate_relevance_score,
    count_occurrences,
    expand_keywords,
    extract_keywords,
    merge_keywords,
)

# Searchers
from audit_rag.retrieval.searchers import (
    flatten_exams,
    rank_documents,
    search_exam_questions,
    search_procedures,
    search_standards,
)

# Context
from audit_rag.retrieval.context import format_as_context

# Sources and factory
from audit_rag.retrieval.sources import (
    HttpCollectionSource,
    InMemoryCollectionSource,
    LocalCollectionSource,
    get_collection_source,
)

__all__ = [
    # Documents
    "Document",
    "ExamFile",
    "ExamSubQuestion",
    "Procedure",
    "Standard",
    # Scoring
    "SYNONYMS",
    "calculate_relevance_score",
    "count_occurrences",
    "expand_keywords",
    "extract_keywords",
    "merge_keywords",
    # Searchers
    "flatten_exams",
    "rank_documents",
    "search_exam_questions",
    "search_procedures",
    "search_standards",
    # Context
    "format_as_context",
    # Sources
    "HttpCollectionSource",
    "InMemoryCollectionSource",
    "LocalCollectionSource",
    "get_collection_source",
]
