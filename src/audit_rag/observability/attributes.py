"""
Span attribute keys for the rag.* namespace.
"""

# ---------------------------------------------------------------------------
# INITIALIZATION
# ---------------------------------------------------------------------------

RAG_SOURCE = "rag.source"  # "http", "local", "memory"
RAG_PROCEDURE_COUNT = "rag.collection.procedures"
RAG_STANDARD_COUNT = "rag.collection.standards"
RAG_EXAM_YEAR_COUNT = "rag.collection.exam_years"
RAG_ERROR_CATEGORY = "rag.error.category"  # "network", "parse", "unknown"


# ---------------------------------------------------------------------------
# SEARCH
# ---------------------------------------------------------------------------

RAG_QUERY = "rag.query"  # only when RAG_TRACING_CAPTURE_QUERY=true
RAG_KEYWORDS = "rag.keywords"
RAG_KEYWORD_COUNT = "rag.keyword_count"
RAG_RESULT_PROCEDURES = "rag.result.procedures"
RAG_RESULT_STANDARDS = "rag.result.standards"
RAG_RESULT_EXAM_QUESTIONS = "rag.result.exam_questions"
RAG_CONTEXT_LENGTH = "rag.context.length"


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def collection_attributes(
    procedures: int,
    standards: int,
    exam_years: int,
) -> dict:
    """Create attributes dict for a completed load."""
    return {
        RAG_PROCEDURE_COUNT: procedures,
        RAG_STANDARD_COUNT: standards,
        RAG_EXAM_YEAR_COUNT: exam_years,
    }


def search_result_attributes(
    procedures: int,
    standards: int,
    exam_questions: int,
    context_length: int,
) -> dict:
    """Create attributes dict for a search_all span."""
    return {
        RAG_RESULT_PROCEDURES: procedures,
        RAG_RESULT_STANDARDS: standards,
        RAG_RESULT_EXAM_QUESTIONS: exam_questions,
        RAG_CONTEXT_LENGTH: context_length,
    }
