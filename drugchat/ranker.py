"""문서 랭킹 - 쿼리 벡터와 모든 문서를 비교하는 전수 검색."""

from collections.abc import Iterable, Sequence

from drugchat.document_store import ScoredDocument, StoredDocument
from drugchat.similarity import cosine_similarity


def rank(
    query_vector: Sequence[float],
    documents: Iterable[StoredDocument],
    limit: int,
) -> list[ScoredDocument]:
    """유사도 내림차순으로 최대 limit개의 문서를 반환한다.

    모든 문서의 점수를 계산한 뒤 정렬한다. 점수가 같은 문서는 입력 순서를
    유지한다 (sorted는 안정 정렬). 차원이 다른 문서가 하나라도 있으면
    DimensionMismatch가 그대로 올라간다.

    Args:
        query_vector: 쿼리 임베딩.
        documents: 비교 대상 문서 전체.
        limit: 반환할 최대 문서 수 (양의 정수).
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")

    scored = [
        ScoredDocument(document=doc, similarity=cosine_similarity(query_vector, doc.embedding))
        for doc in documents
    ]
    scored.sort(key=lambda item: item.similarity, reverse=True)
    return scored[:limit]
