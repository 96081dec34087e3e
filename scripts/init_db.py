"""DB 스키마 초기화 - pgvector 확장 활성화 및 문서 테이블 생성."""

import psycopg

from drugchat.config import settings

# 검색은 애플리케이션에서 전수 비교로 하므로 벡터 인덱스는 만들지 않는다.
SCHEMA_SQL = f"""
CREATE EXTENSION IF NOT EXISTS vector;

CREATE TABLE IF NOT EXISTS documents (
    id          SERIAL PRIMARY KEY,
    title       TEXT NOT NULL,
    content     TEXT NOT NULL,
    embedding   vector({settings.embed_dim}) NOT NULL,
    metadata    JSONB NOT NULL DEFAULT '{{}}'::jsonb,
    created_at  TIMESTAMPTZ DEFAULT now(),
    updated_at  TIMESTAMPTZ DEFAULT now()
);
"""


def init_db() -> None:
    with psycopg.connect(settings.database_url) as conn:
        conn.execute(SCHEMA_SQL)
        conn.commit()
    print("DB schema initialized successfully.")


if __name__ == "__main__":
    init_db()
