"""
Document models for the retrieval system.

Single responsibility: turn raw JSON records from the three collections
into immutable documents and build the surrogate text each one is scored on.

The source JSON is not validated. Records come from hand-maintained study
data with Korean keys, so every field is optional and anything missing
becomes an empty string (or empty list).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

# Circled digit markers (① .. ⑳) prefixing each step in KAM procedure text
_CIRCLED_DIGITS = re.compile(r"[①-⑳]")


def _text(record: dict[str, Any], *keys: str) -> str:
    """First non-null value among keys, as a string."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return str(value)
    return ""


def _join(*parts: str) -> str:
    return " ".join(parts)


def _split_procedures(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        lines = raw.split("\n")
    elif isinstance(raw, (list, tuple)):
        lines = [str(item) for item in raw]
    elif isinstance(raw, (int, float)):
        lines = [str(raw)]
    else:
        return ()
    steps = (_CIRCLED_DIGITS.sub("", line).strip() for line in lines)
    return tuple(step for step in steps if step)


# ---------------------------------------------------------------------------
# PROCEDURE (KAM case)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Procedure:
    """
    A key audit matter case with the auditor's substantive procedures.

    Loaded from KAM.json (사례번호, 핵심감사사항, 감사인의절차, ...).
    """

    num: str = ""
    kam: str = ""
    topic: str = ""
    industry: str = ""
    size: str = ""
    management_assertion: str = ""
    situation: str = ""
    reason: str = ""
    procedures: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Procedure:
        return cls(
            num=_text(record, "num", "사례번호"),
            kam=_text(record, "kam", "핵심감사사항"),
            topic=_text(record, "topic", "주제"),
            industry=_text(record, "industry", "업종"),
            size=_text(record, "size", "규모"),
            management_assertion=_text(record, "management_assertion", "관련경영진주장"),
            situation=_text(record, "situation", "상황"),
            reason=_text(record, "reason", "선정이유"),
            procedures=_split_procedures(
                record.get("procedures", record.get("감사인의절차"))
            ),
        )

    def surrogate_text(self) -> str:
        return _join(self.kam, self.topic, self.situation, self.reason, " ".join(self.procedures))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "num": self.num,
            "kam": self.kam,
            "topic": self.topic,
            "industry": self.industry,
            "size": self.size,
            "management_assertion": self.management_assertion,
            "situation": self.situation,
            "reason": self.reason,
            "procedures": list(self.procedures),
        }


# ---------------------------------------------------------------------------
# STANDARD (audit standard study item)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Standard:
    """An audit-standard question/answer pair from questions.json."""

    id: str = ""
    title: str = ""
    question: str = ""
    answer: str = ""
    chapter: str = ""

    @classmethod
    def from_dict(cls, record: dict[str, Any]) -> Standard:
        return cls(
            id=_text(record, "id", "고유ID"),
            title=_text(record, "title", "problemTitle"),
            question=_text(record, "question", "물음"),
            answer=_text(record, "answer", "정답"),
            chapter=_text(record, "chapter", "단원"),
        )

    def surrogate_text(self) -> str:
        return _join(self.title, self.question, self.answer)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "question": self.question,
            "answer": self.answer,
            "chapter": self.chapter,
        }


# ---------------------------------------------------------------------------
# EXAM SUB-QUESTION (flattened)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExamSubQuestion:
    """
    One past-exam sub-question, denormalized.

    The exam files nest exam -> cases[] -> subQuestions[]. Flattening copies
    the owning case's topic/chapter and the exam's id onto each item so the
    context formatter never has to walk back up the tree.
    """

    id: str = ""
    type: str = ""
    score: float | None = None
    scenario: str = ""
    question: str = ""
    answer: str = ""
    keywords: tuple[str, ...] = ()
    explanation: str = ""
    exam_id: str = ""
    case_id: str = ""
    topic: str = ""
    chapter: str = ""
    year: int | None = None

    @classmethod
    def from_dict(
        cls,
        record: dict[str, Any],
        *,
        exam: dict[str, Any] | None = None,
        case: dict[str, Any] | None = None,
        year: int | None = None,
    ) -> ExamSubQuestion:
        exam = exam or {}
        case = case or {}
        score = record.get("score")
        keywords = record.get("keywords") or ()
        if isinstance(keywords, str):
            keywords = keywords.split(",")
        elif not isinstance(keywords, (list, tuple)):
            keywords = ()
        record_year = record.get("year")
        return cls(
            id=_text(record, "id"),
            type=_text(record, "type"),
            score=float(score) if isinstance(score, (int, float)) else None,
            scenario=_text(record, "scenario"),
            question=_text(record, "question"),
            answer=_text(record, "answer", "model_answer"),
            keywords=tuple(str(k).strip() for k in keywords if str(k).strip()),
            explanation=_text(record, "explanation"),
            exam_id=_text(record, "exam_id", "examId") or _text(exam, "examId", "id"),
            case_id=_text(record, "case_id", "caseId") or _text(case, "caseId", "id"),
            topic=_text(record, "topic") or _text(case, "topic"),
            chapter=_text(record, "chapter") or _text(case, "chapter"),
            year=year if year is not None else (record_year if isinstance(record_year, int) else None),
        )

    def surrogate_text(self) -> str:
        return _join(
            self.question, self.answer, self.scenario, self.explanation, " ".join(self.keywords)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type,
            "score": self.score,
            "scenario": self.scenario,
            "question": self.question,
            "answer": self.answer,
            "keywords": list(self.keywords),
            "explanation": self.explanation,
            "exam_id": self.exam_id,
            "case_id": self.case_id,
            "topic": self.topic,
            "chapter": self.chapter,
            "year": self.year,
        }


Document = Procedure | Standard | ExamSubQuestion


@dataclass(frozen=True)
class ExamFile:
    """One year's exam file, kept unflattened until search time."""

    year: int
    exams: tuple[dict[str, Any], ...] = field(default_factory=tuple)
