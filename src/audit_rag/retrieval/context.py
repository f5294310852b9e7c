"""
Context assembler - turns ranked results into one prompt-ready text block.

Sections always appear in this order and are skipped when empty:

    ## 관련 회계감사기준서    (standards)
    ## 관련 KAM 실증절차 사례  (procedures)
    ## 유사 기출문제          (exam questions)
"""

from __future__ import annotations

from collections.abc import Sequence

from audit_rag.retrieval.document import ExamSubQuestion, Procedure, Standard

STANDARDS_HEADING = "## 관련 회계감사기준서"
PROCEDURES_HEADING = "## 관련 KAM 실증절차 사례"
EXAM_QUESTIONS_HEADING = "## 유사 기출문제"

SECTION_SEPARATOR = "\n\n"


def _format_standard(idx: int, doc: Standard) -> str:
    return "\n".join(
        [
            f"{idx}. {doc.title}",
            f"   물음: {doc.question}",
            f"   정답: {doc.answer}",
        ]
    )


def _format_procedure(idx: int, doc: Procedure) -> str:
    lines = [
        f"{idx}. [{doc.kam}] {doc.topic}",
        f"   상황: {doc.situation}",
        "   감사인의 절차:",
    ]
    lines.extend(f"   - {step}" for step in doc.procedures)
    return "\n".join(lines)


def _format_exam_question(idx: int, doc: ExamSubQuestion) -> str:
    source = " ".join(part for part in (str(doc.year or ""), doc.exam_id) if part)
    return "\n".join(
        [
            f"{idx}. [{source}] {doc.topic}",
            f"   문제: {doc.question}",
            f"   모범답안: {doc.answer}",
            f"   해설: {doc.explanation}",
        ]
    )


def _section(heading: str, entries: list[str]) -> str:
    return "\n".join([heading, *entries])


def format_as_context(
    procedures: Sequence[Procedure] = (),
    standards: Sequence[Standard] = (),
    exam_questions: Sequence[ExamSubQuestion] = (),
) -> str:
    """
    Build the context block injected into the tutor prompt.

    Returns:
        Formatted text, or "" when every input is empty.
    """
    sections = []

    if standards:
        sections.append(
            _section(
                STANDARDS_HEADING,
                [_format_standard(i, doc) for i, doc in enumerate(standards, 1)],
            )
        )

    if procedures:
        sections.append(
            _section(
                PROCEDURES_HEADING,
                [_format_procedure(i, doc) for i, doc in enumerate(procedures, 1)],
            )
        )

    if exam_questions:
        sections.append(
            _section(
                EXAM_QUESTIONS_HEADING,
                [_format_exam_question(i, doc) for i, doc in enumerate(exam_questions, 1)],
            )
        )

    return SECTION_SEPARATOR.join(sections)
