"""FastAPI 서버 테스트 - 요청 형식 처리와 에러 상태 코드 변환 검증."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from drugchat.errors import (
    AuthenticationError,
    DimensionMismatch,
    ProviderTimeout,
    ProviderUnavailable,
    RateLimited,
    ValidationError,
)
from drugchat.server import STATUS_CODES, USER_MESSAGES, app, get_chat_service


@pytest.fixture()
def mock_service():
    service = MagicMock()
    service.answer.return_value = "answer"
    service.answer_messages.return_value = "answer"
    app.dependency_overrides[get_chat_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture()
def client(mock_service):
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "model" in data
        assert "embed_model" in data


class TestChatRequest:
    def test_messages_body(self, client, mock_service):
        messages = [{"role": "user", "content": "aspirin dosage"}]

        resp = client.post("/chat", json={"messages": messages})

        assert resp.status_code == 200
        assert resp.json() == {"content": "answer"}
        mock_service.answer_messages.assert_called_once_with(messages)

    def test_query_body(self, client, mock_service):
        resp = client.post("/chat", json={"query": "aspirin dosage"})

        assert resp.status_code == 200
        mock_service.answer.assert_called_once_with("aspirin dosage")

    def test_missing_query_passed_as_none(self, client, mock_service):
        mock_service.answer.side_effect = ValidationError("query must be a string")

        resp = client.post("/chat", json={})

        assert resp.status_code == 400
        mock_service.answer.assert_called_once_with(None)

    def test_non_object_body_is_invalid_input(self, client):
        resp = client.post("/chat", json=["not", "an", "object"])

        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_input"

    def test_non_json_body_is_invalid_input(self, client):
        resp = client.post(
            "/chat", content=b"not json", headers={"Content-Type": "application/json"},
        )

        assert resp.status_code == 400


class TestErrorMapping:
    @pytest.mark.parametrize("error, status, category", [
        (ValidationError("empty"), 400, "invalid_input"),
        (AuthenticationError("401"), 401, "unauthorized"),
        (RateLimited("429"), 429, "rate_limited"),
        (ProviderUnavailable("503"), 503, "unavailable"),
        (ProviderTimeout("deadline"), 503, "unavailable"),
        (DimensionMismatch(768, 384), 500, "failure"),
        (RuntimeError("db down"), 500, "failure"),
    ])
    def test_error_to_status(self, client, mock_service, error, status, category):
        mock_service.answer.side_effect = error

        resp = client.post("/chat", json={"query": "aspirin dosage"})

        assert resp.status_code == status
        assert resp.json()["error"] == category

    def test_internal_detail_not_exposed(self, client, mock_service):
        mock_service.answer.side_effect = RuntimeError("password=secret")

        resp = client.post("/chat", json={"query": "aspirin dosage"})

        assert "secret" not in resp.text

    def test_every_category_has_status_and_message(self):
        assert STATUS_CODES.keys() == USER_MESSAGES.keys()
