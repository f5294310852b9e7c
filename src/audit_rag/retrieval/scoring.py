"""
Lexical relevance scoring shared by every collection searcher.

Scoring is plain case-insensitive substring matching:

    per matched keyword:   10 * len(keyword) + 5 * (occurrences - 1)
    coverage bonus:        50 * matched / total
    final score:           min(score, 100)

Substring matching is deliberate. "risk" matches inside "risky" and the
weights were tuned against that behavior, so do not switch to word
boundaries.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Mapping

MIN_KEYWORD_LENGTH = 2
DEFAULT_MAX_KEYWORDS = 5
MAX_SCORE = 100.0

KEYWORD_LENGTH_WEIGHT = 10
REPEAT_WEIGHT = 5
COVERAGE_BONUS = 50

# Word characters plus Hangul syllables
_NON_KEYWORD_CHARS = re.compile(r"[^\w가-힣]")

# Accounting term groups used for optional query expansion
SYNONYMS: dict[str, tuple[str, ...]] = {
    "매출": ("수익", "수익인식", "기간귀속", "인도기준", "진행기준", "수익기준", "매출액"),
    "재고": ("재고자산", "저가법", "순실현가능가치", "평가충당금", "재고평가", "재고실사"),
    "손상": ("손상차손", "회수가능액", "사용가치", "현금창출단위", "CGU", "손상평가", "손상징후"),
    "금융상품": ("상각후원가", "FVPL", "FVOCI", "공정가치", "금융자산", "금융부채", "파생상품"),
    "충당부채": ("우발부채", "복구충당부채", "제품보증", "충당금", "우발손실"),
    "영업권": ("무형자산", "식별가능", "내용연수", "상각", "손상검사"),
    "유형자산": ("감가상각", "잔존가치", "내용연수", "자본적지출", "수익적지출", "취득원가"),
    "리스": ("사용권자산", "리스부채", "운용리스", "금융리스", "리스료"),
    "퇴직급여": ("확정급여제도", "확정기여제도", "보험수리적가정", "제도자산", "퇴직연금"),
    "법인세": ("이연법인세", "일시적차이", "이월결손금", "세무조정", "유효세율"),
    "연결": ("연결재무제표", "종속기업", "지배력", "내부거래", "비지배지분", "관계기업", "공동기업"),
    "현금흐름": ("영업활동", "투자활동", "재무활동", "현금등가물", "현금흐름표"),
    "특수관계자": ("특수관계자거래", "특수관계자공시", "지배종속관계", "일감몰아주기"),
    "공시": ("주석", "재무제표공시", "중요한회계정책", "우발상황", "약정사항"),
    "내부통제": ("통제환경", "위험평가", "통제활동", "IT통제", "모니터링"),
    "감사": ("감사절차", "감사증거", "표본추출", "실증절차", "분석적절차", "입증절차"),
    "위험": ("고유위험", "통제위험", "적발위험", "중요왜곡표시위험", "부정위험"),
    "추정": ("회계추정", "불확실성", "민감도분석", "가정", "판단", "측정불확실성"),
    "전문가": ("외부전문가", "내부전문가", "적격성", "객관성", "역량"),
    "진행률": ("진행기준", "총계약원가", "계약수익", "공사진행률", "원가회수기준"),
}


def extract_keywords(text: str | None, max_keywords: int = DEFAULT_MAX_KEYWORDS) -> list[str]:
    """
    Extract the most frequent tokens from free text.

    Punctuation and symbols become whitespace, tokens shorter than two
    characters are dropped, and the rest are lower-cased and ranked by
    frequency. Order among equally frequent tokens is not guaranteed.

    Args:
        text: Free text (query, question, situation)
        max_keywords: Maximum number of keywords returned

    Returns:
        Keywords, most frequent first. Empty for empty/None text.
    """
    if not text or max_keywords <= 0:
        return []

    cleaned = _NON_KEYWORD_CHARS.sub(" ", text.lower())
    tokens = [token for token in cleaned.split() if len(token) >= MIN_KEYWORD_LENGTH]
    return [token for token, _ in Counter(tokens).most_common(max_keywords)]


def count_occurrences(text: str, keyword: str) -> int:
    """Non-overlapping substring count. Both arguments should already be lower-cased."""
    if not keyword:
        return 0
    return text.count(keyword)


def calculate_relevance_score(text: str | None, keywords: Iterable[str] | None) -> float:
    """
    Score a document's surrogate text against a keyword set.

    Returns:
        Score in [0, 100]. 0 when text or keywords are empty.
    """
    if not text or not keywords:
        return 0.0

    lowered_keywords = [k.lower() for k in keywords if k]
    if not lowered_keywords:
        return 0.0

    haystack = text.lower()
    score = 0.0
    matched = 0

    for keyword in lowered_keywords:
        occurrences = count_occurrences(haystack, keyword)
        if occurrences == 0:
            continue
        matched += 1
        score += KEYWORD_LENGTH_WEIGHT * len(keyword)
        score += REPEAT_WEIGHT * (occurrences - 1)

    score += COVERAGE_BONUS * (matched / len(lowered_keywords))
    return min(score, MAX_SCORE)


def merge_keywords(*keyword_lists: Iterable[str] | None) -> list[str]:
    """Ordered union of keyword lists, lower-cased and deduplicated."""
    merged: dict[str, None] = {}
    for keywords in keyword_lists:
        for keyword in keywords or ():
            normalized = str(keyword).strip().lower()
            if len(normalized) >= MIN_KEYWORD_LENGTH:
                merged.setdefault(normalized, None)
    return list(merged)


def expand_keywords(
    keywords: Iterable[str],
    synonyms: Mapping[str, Iterable[str]] | None = None,
) -> list[str]:
    """
    Query expansion over accounting synonym groups.

    A keyword equal to a group head or any of its members pulls in the head
    and every member. Original keywords keep their position at the front.
    """
    synonyms = SYNONYMS if synonyms is None else synonyms
    expanded = merge_keywords(keywords)
    seen = set(expanded)

    for keyword in list(expanded):
        for head, members in synonyms.items():
            group = [head, *members]
            if keyword in (term.lower() for term in group):
                for term in group:
                    normalized = term.lower()
                    if normalized not in seen:
                        seen.add(normalized)
                        expanded.append(normalized)

    return expanded
