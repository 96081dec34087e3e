"""임베딩 생성 - Ollama nomic-embed-text 모델 사용."""

import math
from collections.abc import Sequence

from drugchat.config import settings
from drugchat.errors import InvalidProviderResponse
from drugchat.ollama_client import OllamaClient


def validate_vector(value, expected_dim: int | None = None) -> list[float]:
    """프로바이더가 돌려준 값이 유한한 숫자의 비어있지 않은 시퀀스인지 검사한다.

    검사를 통과하지 못하면 0 벡터로 대체하지 않고 InvalidProviderResponse를 던진다.
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidProviderResponse(
            f"embedding is not a sequence: {type(value).__name__}"
        )
    if not value:
        raise InvalidProviderResponse("embedding is empty")

    vector = []
    for item in value:
        # bool은 int의 하위 타입이라 따로 걸러낸다
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise InvalidProviderResponse(
                f"embedding contains non-numeric value: {item!r}"
            )
        if not math.isfinite(item):
            raise InvalidProviderResponse("embedding contains non-finite value")
        vector.append(float(item))

    if expected_dim is not None and len(vector) != expected_dim:
        raise InvalidProviderResponse(
            f"embedding has {len(vector)} dimensions, expected {expected_dim}"
        )
    return vector


class Embedder:
    def __init__(
        self,
        client: OllamaClient | None = None,
        model: str | None = None,
        expected_dim: int | None = None,
        timeout: float | None = None,
    ):
        self._client = client or OllamaClient()
        self._model = model or settings.embed_model
        self._expected_dim = expected_dim
        self._timeout = timeout or settings.embed_timeout

    def embed_batch(self, texts: list[str], timeout: float | None = None) -> list[list[float]]:
        """여러 텍스트를 한 번에 벡터로 변환한다.

        Returns:
            입력 순서와 같은 순서의 임베딩 벡터 리스트.
        """
        effective = self._timeout if timeout is None else min(timeout, self._timeout)
        data = self._client.post(
            "/api/embed",
            {"model": self._model, "input": texts},
            timeout=effective,
        )

        embeddings = data.get("embeddings")
        if not isinstance(embeddings, list):
            raise InvalidProviderResponse("response has no 'embeddings' list")
        if len(embeddings) != len(texts):
            raise InvalidProviderResponse(
                f"expected {len(texts)} embeddings, got {len(embeddings)}"
            )
        return [validate_vector(vec, self._expected_dim) for vec in embeddings]

    def embed(self, text: str, timeout: float | None = None) -> list[float]:
        """단일 텍스트의 임베딩 벡터를 반환한다."""
        return self.embed_batch([text], timeout=timeout)[0]
