"""
Unit Tests for the Lexical Relevance Scorer

STAFF ENGINEER PATTERNS:
------------------------
1. Weights checked with hand-computed scores
2. Properties (bounds, monotonicity) checked on realistic Korean text
3. Substring laxity pinned so nobody "fixes" it into word matching
"""

import pytest

from audit_rag.retrieval.scoring import (
    SYNONYMS,
    calculate_relevance_score,
    count_occurrences,
    expand_keywords,
    extract_keywords,
    merge_keywords,
)


# ---------------------------------------------------------------------------
# KEYWORD EXTRACTION
# ---------------------------------------------------------------------------


class TestExtractKeywords:
    """extract_keywords tokenizes, filters and ranks by frequency."""

    @pytest.mark.parametrize("max_keywords", [0, 1, 5, 100])
    def test_empty_text_returns_empty(self, max_keywords):
        assert extract_keywords("", max_keywords) == []

    def test_none_returns_empty(self):
        assert extract_keywords(None) == []

    def test_punctuation_becomes_whitespace(self):
        keywords = extract_keywords("KSA 200, 관련(질문)입니다!", 10)

        assert set(keywords) == {"ksa", "200", "관련", "질문", "입니다"}

    def test_single_character_tokens_dropped(self):
        keywords = extract_keywords("a 및 b 감사 c", 10)

        assert keywords == ["감사"]

    def test_most_frequent_first(self):
        keywords = extract_keywords("손상 손상 손상 영업권 영업권 할인율", 2)

        assert keywords == ["손상", "영업권"]

    def test_lower_cased(self):
        assert extract_keywords("CGU Cgu cgu", 5) == ["cgu"]

    def test_respects_max_keywords(self):
        text = "수익인식 기간귀속 재고자산 손상평가 공정가치 내부통제 감사절차"

        assert len(extract_keywords(text, 3)) == 3


# ---------------------------------------------------------------------------
# RELEVANCE SCORE
# ---------------------------------------------------------------------------


class TestCalculateRelevanceScore:
    """calculate_relevance_score weights and bounds."""

    def test_empty_text_scores_zero(self):
        assert calculate_relevance_score("", ["감사"]) == 0

    def test_empty_keywords_scores_zero(self):
        assert calculate_relevance_score("감사 절차", []) == 0

    def test_single_match_weights(self):
        """One 2-char keyword matched once: 10*2 + 50*(1/1) = 70."""
        assert calculate_relevance_score("감사 절차", ["감사"]) == 70

    def test_repeated_occurrences_add_five_each(self):
        """ab x3: 10*2 + 5*2 + 50 = 80."""
        assert calculate_relevance_score("ab ab ab", ["ab"]) == 80

    def test_partial_coverage_bonus(self):
        """One of two keywords: 10*2 + 50*(1/2) = 45."""
        assert calculate_relevance_score("감사 절차", ["감사", "리스"]) == 45

    def test_case_insensitive(self):
        assert calculate_relevance_score("KSA 200", ["ksa"]) == calculate_relevance_score(
            "ksa 200", ["KSA"]
        )

    def test_substring_matching_is_preserved(self):
        """'risk' matches inside 'risky'."""
        assert calculate_relevance_score("a risky estimate", ["risk"]) > 0

    def test_score_clamped_to_100(self):
        text = "중요왜곡표시위험 " * 20

        assert calculate_relevance_score(text, ["중요왜곡표시위험"]) == 100

    def test_no_match_scores_zero(self):
        assert calculate_relevance_score("재고자산 평가", ["리스"]) == 0

    def test_deterministic(self):
        text = "영업권 손상평가 회수가능액 할인율"
        keywords = ["손상", "할인율", "리스"]

        assert calculate_relevance_score(text, keywords) == calculate_relevance_score(text, keywords)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "감사",
            "감사 " * 200,
            "KSA 200에 따라 재무제표 전체에 중요왜곡표시가 없는지 합리적 확신을 얻는다",
        ],
    )
    def test_score_within_bounds(self, text):
        keywords = ["감사", "ksa", "200", "중요왜곡표시", "확신"]

        assert 0 <= calculate_relevance_score(text, keywords) <= 100

    def test_all_keywords_beats_strict_subset(self):
        keywords = ["ab", "cd", "ef"]
        full = calculate_relevance_score("ab cd ef", keywords)
        subset = calculate_relevance_score("ab cd xx", keywords)

        assert full > subset

    def test_more_occurrences_never_score_lower(self):
        once = calculate_relevance_score("감사 절차", ["감사"])
        twice = calculate_relevance_score("감사 감사 절차", ["감사"])

        assert twice >= once


# ---------------------------------------------------------------------------
# KEYWORD HELPERS
# ---------------------------------------------------------------------------


class TestKeywordHelpers:
    def test_count_occurrences_non_overlapping(self):
        assert count_occurrences("aaaa", "aa") == 2

    def test_count_occurrences_empty_keyword(self):
        assert count_occurrences("감사", "") == 0

    def test_merge_keeps_order_and_dedupes(self):
        merged = merge_keywords(["ksa", "200"], ["KSA", "감사", "x"])

        assert merged == ["ksa", "200", "감사"]

    def test_merge_tolerates_none(self):
        assert merge_keywords(None, ["감사"]) == ["감사"]

    def test_expand_from_group_head(self):
        expanded = expand_keywords(["리스"])

        assert expanded[0] == "리스"
        assert "사용권자산" in expanded
        assert len(expanded) == 1 + len(SYNONYMS["리스"])

    def test_expand_from_group_member(self):
        expanded = expand_keywords(["cgu"])

        assert "손상" in expanded
        assert "회수가능액" in expanded

    def test_expand_unknown_keyword_unchanged(self):
        assert expand_keywords(["ksa"]) == ["ksa"]

    def test_expand_custom_map(self):
        assert expand_keywords(["a1"], {"a1": ["b2"]}) == ["a1", "b2"]
