"""Ollama HTTP 클라이언트 - 임베딩/생성 호출의 공통 전송 계층."""

import logging

import httpx

from drugchat.config import settings
from drugchat.errors import (
    InvalidProviderResponse,
    PermanentProviderError,
    ProviderTimeout,
    from_status,
)

logger = logging.getLogger(__name__)


class OllamaClient:
    """Ollama REST API 클라이언트.

    httpx 예외를 그대로 흘리지 않고 errors 모듈의 타입으로 분류해서 던진다.
    재시도 여부는 호출하는 쪽이 에러 타입을 보고 결정한다.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._client = client or httpx.Client(base_url=self._base_url, timeout=timeout)

    def post(self, path: str, payload: dict, timeout: float | None = None) -> dict:
        """JSON 요청을 보내고 JSON 응답 dict를 반환한다.

        Args:
            path: API 경로 (예: "/api/embed").
            payload: 요청 본문.
            timeout: 이번 호출에만 적용할 타임아웃(초). None이면 클라이언트 기본값.
        """
        kwargs = {"json": payload}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            resp = self._client.post(path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ProviderTimeout(f"{path} timed out") from exc
        except httpx.TransportError as exc:
            raise PermanentProviderError(f"{path} transport error: {exc}") from exc

        if resp.status_code >= 400:
            logger.warning("Ollama %s 실패: status=%s", path, resp.status_code)
            raise from_status(resp.status_code, resp.text[:200])

        try:
            data = resp.json()
        except ValueError as exc:
            raise InvalidProviderResponse(f"{path} returned non-JSON body") from exc

        if not isinstance(data, dict):
            raise InvalidProviderResponse(f"{path} returned {type(data).__name__}, expected object")
        return data

    def close(self) -> None:
        self._client.close()
