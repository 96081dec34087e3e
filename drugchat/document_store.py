"""PostgreSQL 문서 저장소 - 약품 라벨 문서와 임베딩 보관.

서빙 중에는 fetch_all()로 전체를 읽기만 한다. 유사도 계산은 DB가 아니라
ranker 모듈에서 전수 비교로 한다. 쓰기 메서드는 적재 스크립트 전용.
"""

from dataclasses import dataclass, field

import psycopg
from pgvector.psycopg import register_vector
from psycopg.types.json import Jsonb

from drugchat.config import settings


@dataclass(frozen=True)
class StoredDocument:
    id: int
    title: str
    content: str
    embedding: list[float]
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredDocument:
    document: StoredDocument
    similarity: float

    @property
    def title(self) -> str:
        return self.document.title

    @property
    def content(self) -> str:
        return self.document.content

    @property
    def metadata(self) -> dict[str, str]:
        return self.document.metadata


def _to_document(row) -> StoredDocument:
    # pgvector는 numpy 배열을 돌려주므로 float 리스트로 바꾼다
    return StoredDocument(
        id=row[0],
        title=row[1],
        content=row[2],
        embedding=[float(v) for v in row[3]],
        metadata={str(k): str(v) for k, v in (row[4] or {}).items()},
    )


class DocumentStore:
    def __init__(
        self,
        conninfo: str | None = None,
        connect_timeout: int | None = None,
        statement_timeout_ms: int | None = None,
    ):
        self._conninfo = conninfo or settings.database_url
        self._connect_timeout = connect_timeout or settings.db_connect_timeout
        self._statement_timeout_ms = statement_timeout_ms or settings.db_statement_timeout_ms

    def _connect(self) -> psycopg.Connection:
        # DB가 응답하지 않아도 요청이 무한정 묶이지 않도록 연결과 쿼리 모두 시간 제한
        conn = psycopg.connect(
            self._conninfo,
            connect_timeout=self._connect_timeout,
            options=f"-c statement_timeout={self._statement_timeout_ms}",
        )
        register_vector(conn)
        return conn

    def fetch_all(self) -> list[StoredDocument]:
        """저장된 모든 문서를 id 순서로 반환한다."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, title, content, embedding, metadata FROM documents ORDER BY id"
            ).fetchall()
        return [_to_document(row) for row in rows]

    def insert(
        self,
        title: str,
        content: str,
        embedding: list[float],
        metadata: dict[str, str] | None = None,
    ) -> int:
        """단일 문서를 저장하고 id를 반환한다."""
        with self._connect() as conn:
            row = conn.execute(
                """
                INSERT INTO documents (title, content, embedding, metadata)
                VALUES (%s, %s, %s::vector, %s)
                RETURNING id
                """,
                (title, content, str(embedding), Jsonb(metadata or {})),
            ).fetchone()
            conn.commit()
            return row[0]

    def insert_batch(self, items: list[dict]) -> list[int]:
        """여러 문서를 한 트랜잭션으로 저장한다.

        Args:
            items: [{"title", "content", "embedding", "metadata"}] 리스트
        """
        ids = []
        with self._connect() as conn:
            for item in items:
                row = conn.execute(
                    """
                    INSERT INTO documents (title, content, embedding, metadata)
                    VALUES (%s, %s, %s::vector, %s)
                    RETURNING id
                    """,
                    (
                        item["title"],
                        item["content"],
                        str(item["embedding"]),
                        Jsonb(item.get("metadata") or {}),
                    ),
                ).fetchone()
                ids.append(row[0])
            conn.commit()
        return ids

    def update_metadata(self, document_id: int, metadata: dict[str, str]) -> bool:
        """메타데이터를 교체한다. 문서가 없으면 False."""
        with self._connect() as conn:
            row = conn.execute(
                """
                UPDATE documents SET metadata = %s, updated_at = now()
                WHERE id = %s
                RETURNING id
                """,
                (Jsonb(metadata), document_id),
            ).fetchone()
            conn.commit()
            return row is not None

    def delete_all(self) -> int:
        """모든 문서를 삭제한다."""
        with self._connect() as conn:
            rows = conn.execute("DELETE FROM documents RETURNING id").fetchall()
            conn.commit()
            return len(rows)

    def count(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM documents").fetchone()
            return row[0]
