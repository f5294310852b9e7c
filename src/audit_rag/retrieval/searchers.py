"""
Collection searchers.

All three searchers share one shape: build each document's surrogate text,
score it against the keyword set, drop zero scores, sort descending and keep
the top `limit`. They only differ in which collection they read and which
fields go into the surrogate text (see retrieval.document).

These functions are pure. The "not initialized yet" guard lives in
RagService, which owns the collections.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from audit_rag.retrieval.document import ExamFile, ExamSubQuestion, Procedure, Standard
from audit_rag.retrieval.scoring import (
    DEFAULT_MAX_KEYWORDS,
    calculate_relevance_score,
    extract_keywords,
)

logger = logging.getLogger(__name__)

DEFAULT_PROCEDURE_LIMIT = 3
DEFAULT_STANDARD_LIMIT = 3
DEFAULT_EXAM_LIMIT = 2

D = TypeVar("D", Procedure, Standard, ExamSubQuestion)


def rank_documents(
    documents: Iterable[D],
    keywords: Sequence[str],
    limit: int,
) -> list[tuple[float, D]]:
    """
    Score, filter and rank documents.

    Returns:
        (score, document) pairs, descending by score, no zero scores,
        at most `limit` long. Equal scores keep collection order.
    """
    if limit <= 0 or not keywords:
        return []

    scored = []
    for doc in documents:
        score = calculate_relevance_score(doc.surrogate_text(), keywords)
        if score > 0:
            scored.append((score, doc))

    # list.sort is stable, so ties keep collection order
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return scored[:limit]


def search_procedures(
    procedures: Sequence[Procedure],
    keywords: Sequence[str],
    limit: int = DEFAULT_PROCEDURE_LIMIT,
) -> list[Procedure]:
    """Top KAM cases by kam/topic/situation/reason/procedures text."""
    return [doc for _, doc in rank_documents(procedures, keywords, limit)]


def search_standards(
    standards: Sequence[Standard],
    keywords: Sequence[str] | None = None,
    query_text: str = "",
    limit: int = DEFAULT_STANDARD_LIMIT,
    max_keywords: int = DEFAULT_MAX_KEYWORDS,
) -> list[Standard]:
    """
    Top audit-standard items by title/question/answer text.

    When no keywords are given they are extracted from `query_text`, so the
    searcher also works standalone off a raw question.
    """
    if not keywords:
        keywords = extract_keywords(query_text, max_keywords)
    return [doc for _, doc in rank_documents(standards, keywords, limit)]


def flatten_exams(exam_files: Iterable[ExamFile]) -> list[ExamSubQuestion]:
    """
    Flatten exam -> case -> sub-question into one list.

    Rebuilt on every call and never mutates the source records. A
    sub-question that cannot be built is skipped with a warning.
    """
    flattened: list[ExamSubQuestion] = []
    for exam_file in exam_files:
        for exam in _as_list(list(exam_file.exams)):
            for case in _as_list(exam.get("cases")):
                for sub in _as_list(case.get("subQuestions")):
                    try:
                        question = ExamSubQuestion.from_dict(
                            sub, exam=exam, case=case, year=exam_file.year
                        )
                    except (TypeError, ValueError) as exc:
                        logger.warning(
                            "Skipping malformed %d exam sub-question %r: %s",
                            exam_file.year,
                            sub.get("id"),
                            exc,
                        )
                        continue
                    flattened.append(question)
    return flattened


def search_exam_questions(
    exam_files: Iterable[ExamFile],
    keywords: Sequence[str],
    limit: int = DEFAULT_EXAM_LIMIT,
) -> list[ExamSubQuestion]:
    """Top past-exam sub-questions by question/answer/scenario/explanation/keywords."""
    questions = flatten_exams(exam_files)
    logger.debug("Searching %d flattened exam sub-questions", len(questions))
    return [doc for _, doc in rank_documents(questions, keywords, limit)]


def _as_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
