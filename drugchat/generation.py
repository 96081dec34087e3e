"""응답 생성 - Ollama 생성 호출과 지수 백오프 재시도."""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from drugchat.config import settings
from drugchat.errors import InvalidProviderResponse, ProviderTimeout, TransientProviderError
from drugchat.ollama_client import OllamaClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Generator:
    def __init__(
        self,
        client: OllamaClient | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        timeout: float | None = None,
    ):
        self._client = client or OllamaClient()
        self._model = model or settings.llm_model
        self._temperature = settings.temperature if temperature is None else temperature
        self._max_output_tokens = max_output_tokens or settings.max_output_tokens
        self._timeout = timeout or settings.generate_timeout

    @property
    def model(self) -> str:
        return self._model

    def generate(self, system_prompt: str, user_prompt: str, timeout: float | None = None) -> str:
        """Ollama /api/generate를 한 번 호출한다. 재시도는 하지 않는다.

        Args:
            timeout: 이번 호출의 최대 대기 시간. 설정값보다 짧을 때만 적용된다.
        """
        effective = self._timeout if timeout is None else min(timeout, self._timeout)
        data = self._client.post(
            "/api/generate",
            {
                "model": self._model,
                "system": system_prompt,
                "prompt": user_prompt,
                "stream": False,
                "options": {
                    "temperature": self._temperature,
                    "top_k": 40,
                    "top_p": 0.95,
                    "num_predict": self._max_output_tokens,
                },
            },
            timeout=effective,
        )
        text = data.get("response")
        if not isinstance(text, str):
            raise InvalidProviderResponse("response has no 'response' text")
        return text


def retry_with_backoff(
    operation: Callable[[float | None], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    deadline: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """일시적 실패(TransientProviderError)만 지수 백오프로 재시도한다.

    시도 사이 대기 시간은 initial_delay, initial_delay*2, ... 로 늘어난다.
    그 밖의 예외는 즉시 올라간다.

    Args:
        operation: 남은 시간(초, 기한이 없으면 None)을 받아 실행되는 호출.
        max_attempts: 최대 시도 횟수.
        initial_delay: 첫 재시도 전 대기 시간(초). 0보다 커야 대기 시간이 매번 늘어난다.
        deadline: clock 기준 절대 기한. 다음 대기가 기한을 넘으면 ProviderTimeout.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    if initial_delay <= 0:
        raise ValueError("initial_delay must be positive")

    last_error: TransientProviderError | None = None
    for attempt in range(max_attempts):
        remaining = None if deadline is None else deadline - clock()
        if remaining is not None and remaining <= 0:
            raise ProviderTimeout("request deadline exceeded") from last_error

        try:
            return operation(remaining)
        except TransientProviderError as exc:
            last_error = exc
            if attempt == max_attempts - 1:
                break

            delay = initial_delay * (2 ** attempt)
            if deadline is not None and clock() + delay >= deadline:
                raise ProviderTimeout("request deadline exceeded before retry") from exc

            logger.warning(
                "생성 실패 (시도 %d/%d): %s, %.1f초 후 재시도",
                attempt + 1, max_attempts, exc, delay,
            )
            sleep(delay)

    raise last_error
