"""문서 저장소 테스트 - psycopg 연결을 모킹해 쿼리와 행 변환을 검증."""

from unittest.mock import MagicMock, patch

import pytest

from drugchat.config import settings
from drugchat.document_store import DocumentStore, StoredDocument


@pytest.fixture()
def mock_conn():
    """psycopg.connect와 register_vector를 모킹한다."""
    conn = MagicMock()
    conn.__enter__.return_value = conn
    with patch("drugchat.document_store.psycopg.connect", return_value=conn), \
         patch("drugchat.document_store.register_vector"):
        yield conn


class TestConnect:
    def test_passes_connect_and_statement_timeouts(self, mock_conn):
        mock_conn.execute.return_value.fetchall.return_value = []

        with patch("drugchat.document_store.psycopg.connect", return_value=mock_conn) as connect:
            DocumentStore(conninfo="dbname=test", connect_timeout=3, statement_timeout_ms=2500).fetch_all()

        connect.assert_called_once_with(
            "dbname=test",
            connect_timeout=3,
            options="-c statement_timeout=2500",
        )

    def test_timeouts_default_to_settings(self, mock_conn):
        with patch("drugchat.document_store.psycopg.connect", return_value=mock_conn) as connect:
            DocumentStore(conninfo="dbname=test").count()

        kwargs = connect.call_args.kwargs
        assert kwargs["connect_timeout"] == settings.db_connect_timeout
        assert kwargs["options"] == f"-c statement_timeout={settings.db_statement_timeout_ms}"


class TestFetchAll:
    def test_converts_rows(self, mock_conn):
        mock_conn.execute.return_value.fetchall.return_value = [
            (1, "Ibuprofen", "Drug Name: Ibuprofen", (0.5, 1), {"genericName": "ibuprofen"}),
            (2, "Aspirin", "Drug Name: Aspirin", [0.0, 1.0], None),
        ]

        docs = DocumentStore(conninfo="dbname=test").fetch_all()

        assert docs[0] == StoredDocument(
            id=1,
            title="Ibuprofen",
            content="Drug Name: Ibuprofen",
            embedding=[0.5, 1.0],
            metadata={"genericName": "ibuprofen"},
        )
        assert docs[1].metadata == {}
        assert all(isinstance(v, float) for v in docs[0].embedding)

    def test_reads_in_id_order(self, mock_conn):
        mock_conn.execute.return_value.fetchall.return_value = []

        DocumentStore(conninfo="dbname=test").fetch_all()

        sql = mock_conn.execute.call_args.args[0]
        assert "FROM documents" in sql
        assert "ORDER BY id" in sql


class TestWrite:
    def test_insert_returns_id(self, mock_conn):
        mock_conn.execute.return_value.fetchone.return_value = (7,)

        doc_id = DocumentStore(conninfo="dbname=test").insert(
            "Ibuprofen", "content", [0.1, 0.2], {"source": "FDA"},
        )

        assert doc_id == 7
        mock_conn.commit.assert_called_once()

    def test_insert_batch(self, mock_conn):
        mock_conn.execute.return_value.fetchone.side_effect = [(1,), (2,)]

        ids = DocumentStore(conninfo="dbname=test").insert_batch([
            {"title": "A", "content": "a", "embedding": [0.1]},
            {"title": "B", "content": "b", "embedding": [0.2], "metadata": {"k": "v"}},
        ])

        assert ids == [1, 2]
        assert mock_conn.execute.call_count == 2
        mock_conn.commit.assert_called_once()

    def test_update_metadata_missing_document(self, mock_conn):
        mock_conn.execute.return_value.fetchone.return_value = None

        assert DocumentStore(conninfo="dbname=test").update_metadata(99, {"a": "b"}) is False

    def test_update_metadata(self, mock_conn):
        mock_conn.execute.return_value.fetchone.return_value = (3,)

        assert DocumentStore(conninfo="dbname=test").update_metadata(3, {"a": "b"}) is True

    def test_delete_all_counts_rows(self, mock_conn):
        mock_conn.execute.return_value.fetchall.return_value = [(1,), (2,), (3,)]

        assert DocumentStore(conninfo="dbname=test").delete_all() == 3
