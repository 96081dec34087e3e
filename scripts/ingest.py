"""FDA 약품 라벨 적재 - CSV 파싱 → 문서 본문 생성 → 임베딩 → DB 저장."""

import argparse
import csv
from pathlib import Path

from drugchat.config import settings
from drugchat.document_store import DocumentStore
from drugchat.embedding import Embedder

# CSV 컬럼 → 메타데이터 키
COLUMN_MAP: dict[str, str] = {
    "Generic/Proper Name(s)": "genericName",
    "Active Ingredient(s)": "activeIngredients",
    "Established Pharmacologic Class(es)": "pharmacologicClass",
    "Company": "company",
    "Labeling Type": "labelType",
    "Dosage Form(s)": "dosageForm",
    "Route(s) of Administration": "routeOfAdministration",
    "FDALabel Link": "fdaLabelLink",
    "DailyMed SPL Link": "dailyMedLink",
}

CONTENT_LINES: list[tuple[str, str]] = [
    ("Generic Name", "Generic/Proper Name(s)"),
    ("Active Ingredients", "Active Ingredient(s)"),
    ("Pharmacologic Class", "Established Pharmacologic Class(es)"),
    ("Manufacturer", "Company"),
    ("FDA Label Link", "FDALabel Link"),
    ("DailyMed Link", "DailyMed SPL Link"),
]

SOURCE = "FDA Drug Label Database"
BATCH_SIZE = 32


def _get(record: dict, column: str) -> str:
    return (record.get(column) or "").strip()


def record_to_document(record: dict) -> dict | None:
    """CSV 한 행을 저장할 문서 dict로 변환한다. 이름이 없으면 None."""
    title = _get(record, "Trade Name") or _get(record, "Generic/Proper Name(s)")
    if not title:
        return None

    lines = [f"Drug Name: {title}"]
    for label, column in CONTENT_LINES:
        lines.append(f"{label}: {_get(record, column) or 'N/A'}")

    metadata = {"source": SOURCE}
    for column, key in COLUMN_MAP.items():
        value = _get(record, column)
        if value:
            metadata[key] = value

    return {"title": title, "content": "\n".join(lines), "metadata": metadata}


def read_records(path: Path) -> list[dict]:
    with path.open(encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


def ingest_file(path: Path, store: DocumentStore, embedder: Embedder) -> dict:
    """CSV 파일 하나를 적재하고 처리 통계를 반환한다."""
    records = read_records(path)
    print(f"📂 {path.name}: {len(records)}개 레코드 발견")

    documents = []
    skipped = 0
    for record in records:
        doc = record_to_document(record)
        if doc is None:
            skipped += 1
            continue
        documents.append(doc)

    stored = 0
    for start in range(0, len(documents), BATCH_SIZE):
        batch = documents[start:start + BATCH_SIZE]
        vectors = embedder.embed_batch([doc["content"] for doc in batch])
        for doc, vector in zip(batch, vectors):
            doc["embedding"] = vector
        stored += len(store.insert_batch(batch))
        print(f"  ✅ {stored}/{len(documents)} 적재")

    return {"total": len(records), "stored": stored, "skipped": skipped}


def main():
    parser = argparse.ArgumentParser(description="FDA 약품 라벨 CSV를 문서 DB에 적재합니다.")
    parser.add_argument("csv_path", help="FDALabel에서 내보낸 CSV 파일 경로")
    parser.add_argument("--reset", action="store_true", help="적재 전에 기존 문서를 모두 삭제")
    args = parser.parse_args()

    store = DocumentStore()
    if args.reset:
        print(f"🗑 기존 문서 {store.delete_all()}개 삭제")

    stats = ingest_file(
        Path(args.csv_path),
        store,
        Embedder(expected_dim=settings.embed_dim),
    )
    print(
        f"\n총 {stats['total']}개 중 {stats['stored']}개 적재, "
        f"{stats['skipped']}개 건너뜀 (이름 없음)"
    )


if __name__ == "__main__":
    main()
