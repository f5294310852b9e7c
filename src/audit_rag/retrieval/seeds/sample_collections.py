"""
Sample audit study data.

Records use the raw JSON key names of the real collections (KAM.json,
questions.json, {year}_hierarchical.json) so the same parsing path is
exercised. The full collections are served as static files in production.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from audit_rag.retrieval.sources import InMemoryCollectionSource


def get_sample_procedures() -> list[dict[str, Any]]:
    """KAM cases with the auditor's substantive procedures."""
    return [
        {
            "사례번호": 1,
            "핵심감사사항": "수익인식의 기간귀속",
            "주제": "수익인식",
            "업종": "제조업",
            "규모": "대기업",
            "관련경영진주장": "기간귀속",
            "상황": "회사는 연말에 대리점으로 출고되는 매출 비중이 높고, 경영진은 매출 목표 달성에 대한 압박을 받고 있다.",
            "선정이유": "기말 전후 매출의 기간귀속 오류는 부정위험이 높아 유의적 위험으로 식별하였다.",
            "감사인의절차": "① 기말 전후 매출 거래의 출고증 및 인수증 대사\n② 기말 이후 매출 취소 및 반품 내역 검토\n③ 대리점 매출채권 조회",
        },
        {
            "사례번호": 2,
            "핵심감사사항": "영업권 손상평가",
            "주제": "손상",
            "업종": "서비스업",
            "규모": "중견기업",
            "관련경영진주장": "평가",
            "상황": "회사는 과거 사업결합으로 인식한 영업권이 있으며 해당 현금창출단위의 영업이익이 2년 연속 감소하였다.",
            "선정이유": "회수가능액 산정에 사용된 할인율과 미래현금흐름 추정에 경영진의 유의적 판단이 개입된다.",
            "감사인의절차": "① 사용가치 계산에 사용된 미래현금흐름 추정치와 승인된 사업계획 비교\n② 내부 가치평가 전문가를 활용한 할인율 재계산\n③ 주요 가정에 대한 민감도분석 검토",
        },
        {
            "사례번호": 3,
            "핵심감사사항": "재고자산 평가",
            "주제": "재고",
            "업종": "유통업",
            "규모": "중소기업",
            "관련경영진주장": "평가",
            "상황": "유행에 민감한 의류 재고자산의 장기체화 비중이 증가하였다.",
            "선정이유": "순실현가능가치 추정의 불확실성이 높다.",
            "감사인의절차": "① 재고실사 입회\n② 기말 이후 판매가격을 이용한 순실현가능가치 검증\n③ 연령분석표의 정확성 테스트",
        },
    ]


def get_sample_standards() -> list[dict[str, Any]]:
    """Audit standard question/answer study items."""
    return [
        {
            "고유ID": "STD-200-1",
            "단원": "2",
            "problemTitle": "감사의 전반적 목적",
            "물음": "감사기준서에 따른 감사인의 전반적인 목적을 서술하시오.",
            "정답": "KSA 200에 따라 재무제표 전체에 중요왜곡표시가 없는지에 대한 합리적 확신을 얻고 의견을 표명하는 것이다.",
        },
        {
            "고유ID": "STD-315-1",
            "단원": "5",
            "problemTitle": "위험평가절차",
            "물음": "중요왜곡표시위험을 식별하기 위한 위험평가절차의 종류를 쓰시오.",
            "정답": "KSA 315에 따라 질문, 분석적절차, 관찰 및 검사를 수행한다.",
        },
        {
            "고유ID": "STD-540-1",
            "단원": "9",
            "problemTitle": "회계추정치 감사",
            "물음": "회계추정치에 대하여 감사인이 수행할 수 있는 절차를 쓰시오.",
            "정답": "KSA 540에 따라 보고기간 후 사건 검토, 경영진의 추정방법 테스트, 독립적 추정치 개발을 수행한다.",
        },
        {
            "고유ID": "STD-701-1",
            "단원": "12",
            "problemTitle": "핵심감사사항의 결정",
            "물음": "핵심감사사항 결정 시 고려사항을 쓰시오.",
            "정답": "KSA 701에 따라 유의적 위험, 경영진의 유의적 판단이 개입된 영역, 당기 중 유의적 사건의 영향을 고려한다.",
        },
    ]


def get_sample_exams() -> dict[int, list[dict[str, Any]]]:
    """Year-partitioned exam files in the hierarchical layout."""
    return {
        2024: [
            {
                "examId": "2024_KAM",
                "cases": [
                    {
                        "caseId": "2024_Q1",
                        "topic": "핵심감사사항",
                        "chapter": "12",
                        "subQuestions": [
                            {
                                "id": "Q1-1",
                                "type": "Case",
                                "score": 5,
                                "scenario": "A회사는 영업권을 보유하고 있으며 손상징후가 존재한다.",
                                "question": "영업권 손상평가를 핵심감사사항으로 선정한 이유를 서술하시오.",
                                "answer": "회수가능액 추정에 할인율 등 경영진의 유의적 판단이 개입되기 때문이다.",
                                "keywords": ["영업권", "손상", "회수가능액"],
                                "explanation": "KSA 701의 핵심감사사항 결정 요건을 적용한다.",
                            }
                        ],
                    }
                ],
            }
        ],
        2023: [
            {
                "examId": "2023_AUDIT",
                "cases": [
                    {
                        "caseId": "2023_Q3",
                        "topic": "수익인식",
                        "chapter": "7",
                        "subQuestions": [
                            {
                                "id": "Q3-1",
                                "type": "Rule",
                                "score": 3,
                                "scenario": "B회사는 기말에 대규모 매출을 인식하였다.",
                                "question": "수익인식 기간귀속 위험에 대응하는 실증절차를 쓰시오.",
                                "answer": "기말 전후 출고 및 인수 증빙을 대사하는 절단기준 테스트를 수행한다.",
                                "keywords": ["수익인식", "기간귀속", "절단기준"],
                                "explanation": "수익인식에는 부정위험이 있다고 추정한다.",
                            }
                        ],
                    }
                ],
            }
        ],
    }


def get_sample_source() -> InMemoryCollectionSource:
    """An in-memory source over all sample collections."""
    from audit_rag.retrieval.sources import InMemoryCollectionSource

    return InMemoryCollectionSource(
        procedures=get_sample_procedures(),
        standards=get_sample_standards(),
        exams=get_sample_exams(),
    )
