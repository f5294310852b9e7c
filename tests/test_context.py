"""
Unit Tests for the Context Assembler

STAFF ENGINEER PATTERNS:
------------------------
1. Section order and omission checked on the rendered text
2. Missing fields render as empty, never raise
"""

from audit_rag.retrieval.context import (
    EXAM_QUESTIONS_HEADING,
    PROCEDURES_HEADING,
    STANDARDS_HEADING,
    format_as_context,
)
from audit_rag.retrieval.document import ExamSubQuestion, Procedure, Standard


def _standard():
    return Standard.from_dict({"물음": "기준서 질문 A", "정답": "답변 포함 KSA 200"})


def _procedure():
    return Procedure.from_dict(
        {"핵심감사사항": "영업권 손상평가", "주제": "손상", "감사인의절차": "① 할인율 재계산\n② 민감도분석"}
    )


def _exam_question():
    return ExamSubQuestion.from_dict(
        {"id": "Q1-1", "question": "선정 이유를 쓰시오", "answer": "유의적 판단", "explanation": "KSA 701"},
        exam={"examId": "2024_KAM"},
        case={"topic": "핵심감사사항"},
        year=2024,
    )


class TestFormatAsContext:
    """format_as_context layout."""

    def test_empty_inputs_give_empty_string(self):
        assert format_as_context() == ""

    def test_standards_section_contains_answer_text(self):
        context = format_as_context(standards=[_standard()])

        assert context.startswith(STANDARDS_HEADING)
        assert "관련 회계감사기준서" in context
        assert "KSA 200" in context
        assert "기준서 질문 A" in context

    def test_fixed_section_order(self):
        context = format_as_context(
            procedures=[_procedure()],
            standards=[_standard()],
            exam_questions=[_exam_question()],
        )

        standards_at = context.index(STANDARDS_HEADING)
        procedures_at = context.index(PROCEDURES_HEADING)
        exams_at = context.index(EXAM_QUESTIONS_HEADING)
        assert standards_at < procedures_at < exams_at

    def test_empty_sections_omitted(self):
        context = format_as_context(procedures=[_procedure()])

        assert STANDARDS_HEADING not in context
        assert EXAM_QUESTIONS_HEADING not in context
        assert context.startswith(PROCEDURES_HEADING)

    def test_entries_are_numbered(self):
        context = format_as_context(standards=[_standard(), _standard()])

        assert "\n1. " in context
        assert "\n2. " in context

    def test_procedure_steps_listed(self):
        context = format_as_context(procedures=[_procedure()])

        assert "[영업권 손상평가] 손상" in context
        assert "   - 할인율 재계산" in context
        assert "   - 민감도분석" in context

    def test_exam_question_shows_source(self):
        context = format_as_context(exam_questions=[_exam_question()])

        assert "[2024 2024_KAM] 핵심감사사항" in context
        assert "모범답안: 유의적 판단" in context

    def test_missing_fields_render_empty(self):
        context = format_as_context(
            procedures=[Procedure()],
            standards=[Standard()],
            exam_questions=[ExamSubQuestion()],
        )

        assert "물음: " in context
        assert "[] " in context
        assert "문제: " in context
