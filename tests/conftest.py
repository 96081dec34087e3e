"""테스트 공용 헬퍼 - 가짜 문서와 벡터."""

import pytest

from drugchat.document_store import ScoredDocument, StoredDocument

DIM = 8


def unit_vector(index: int, dim: int = DIM) -> list[float]:
    vec = [0.0] * dim
    vec[index] = 1.0
    return vec


def make_document(
    doc_id: int,
    title: str,
    embedding: list[float] | None = None,
    content: str = "",
    **metadata: str,
) -> StoredDocument:
    return StoredDocument(
        id=doc_id,
        title=title,
        content=content or f"Drug Name: {title}",
        embedding=embedding if embedding is not None else unit_vector(doc_id % DIM),
        metadata=metadata,
    )


def make_scored(doc: StoredDocument, similarity: float = 0.9) -> ScoredDocument:
    return ScoredDocument(document=doc, similarity=similarity)


@pytest.fixture()
def ibuprofen() -> StoredDocument:
    return make_document(
        1,
        "Ibuprofen",
        embedding=unit_vector(0),
        content="Drug Name: Ibuprofen\nGeneric Name: ibuprofen\nManufacturer: N/A",
        genericName="ibuprofen",
        activeIngredients="ibuprofen",
        dosageForm="tablet",
        company="Not specified",
    )
