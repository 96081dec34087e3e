"""쿼리 분류 - 약품 관련 질문인지 키워드로 판단한다.

대소문자를 무시한 부분 문자열 매칭이다. 키워드가 하나도 없는 약품 질문
(예: 약 이름만 입력한 경우)은 일반 대화로 분류된다. 알려진 한계이며,
임의로 매칭 규칙을 넓히지 않는다.
"""

from collections.abc import Iterable

DRUG_KEYWORDS: tuple[str, ...] = (
    "drug", "medicine", "medication", "pill", "tablet", "capsule", "injection",
    "prescription", "treatment", "therapy", "pharmacy", "pharmacist", "dosage",
    "side effect", "contraindication", "interaction", "overdose", "allergy",
    "antibiotic", "painkiller", "antidepressant", "vitamin", "supplement",
)


class QueryClassifier:
    def __init__(self, keywords: Iterable[str] | None = None):
        source = DRUG_KEYWORDS if keywords is None else keywords
        # 빈 문자열은 모든 쿼리에 매칭되므로 제외
        self._keywords = tuple(kw.lower() for kw in source if kw and kw.strip())

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    def classify(self, query: str) -> bool:
        """약품 관련 쿼리면 True. 어떤 입력에도 예외를 던지지 않는다."""
        if not isinstance(query, str):
            return False
        lowered = query.lower()
        return any(kw in lowered for kw in self._keywords)
