"""채팅 파이프라인 - 분류 → 검색 → 컨텍스트 조립 → 생성 → 후처리."""

import logging
import time
from collections.abc import Callable

from drugchat.classifier import QueryClassifier
from drugchat.config import settings
from drugchat.document_store import DocumentStore
from drugchat.embedding import Embedder
from drugchat.errors import ProviderTimeout, ValidationError
from drugchat.generation import Generator, retry_with_backoff
from drugchat.postprocess import normalize_response
from drugchat.prompt import PromptContext, PromptMode, assemble, build_prompt, select_mode
from drugchat.ranker import rank

logger = logging.getLogger(__name__)


class ChatService:
    """질문 하나를 받아 답변 문자열을 돌려주는 코어 진입점.

    프로바이더와 저장소는 모두 생성자로 주입한다. 요청별 상태를 갖지 않으므로
    하나의 인스턴스를 여러 요청이 공유해도 된다.
    """

    def __init__(
        self,
        classifier: QueryClassifier,
        embedder: Embedder,
        store: DocumentStore,
        generator: Generator,
        *,
        top_k: int = 3,
        max_query_chars: int = 2000,
        max_attempts: int = 3,
        initial_delay: float = 1.0,
        request_timeout: float | None = 60.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if initial_delay <= 0:
            raise ValueError("initial_delay must be positive")
        self._classifier = classifier
        self._embedder = embedder
        self._store = store
        self._generator = generator
        self._top_k = top_k
        self._max_query_chars = max_query_chars
        self._max_attempts = max_attempts
        self._initial_delay = initial_delay
        self._request_timeout = request_timeout
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(cls) -> "ChatService":
        return cls(
            classifier=QueryClassifier(settings.drug_keywords),
            embedder=Embedder(expected_dim=settings.embed_dim),
            store=DocumentStore(),
            generator=Generator(),
            top_k=settings.retriever_top_k,
            max_query_chars=settings.max_query_chars,
            max_attempts=settings.generation_max_attempts,
            initial_delay=settings.generation_initial_delay,
            request_timeout=settings.request_timeout,
        )

    def answer(self, query: str) -> str:
        """질문에 대한 정리된 답변 텍스트를 반환한다.

        Raises:
            ValidationError: 질문이 비었거나 너무 김.
            ProviderError: 임베딩/생성 호출 실패 (일시적 실패는 생성 단계에서 재시도 후).
        """
        query = self._validate(query)
        deadline = None
        if self._request_timeout is not None:
            deadline = self._clock() + self._request_timeout

        mode = select_mode(self._classifier.classify(query))
        context = None
        if mode is PromptMode.RETRIEVAL:
            context = self._retrieve(query, deadline)

        system_prompt, user_prompt = build_prompt(query, mode, context)

        raw = retry_with_backoff(
            lambda remaining: self._generator.generate(system_prompt, user_prompt, timeout=remaining),
            max_attempts=self._max_attempts,
            initial_delay=self._initial_delay,
            deadline=deadline,
            sleep=self._sleep,
            clock=self._clock,
        )
        logger.info("응답 생성 완료: mode=%s, chars=%d", mode.value, len(raw), extra={"mode": mode.value})
        return normalize_response(raw)

    def answer_messages(self, messages: list[dict]) -> str:
        """대화 기록에서 마지막 사용자 메시지를 찾아 answer()로 넘긴다."""
        if not isinstance(messages, list) or not messages:
            raise ValidationError("messages must be a non-empty list")

        for message in reversed(messages):
            if isinstance(message, dict) and message.get("role") == "user":
                return self.answer(message.get("content"))
        raise ValidationError("no user message found")

    def _validate(self, query) -> str:
        if not isinstance(query, str):
            raise ValidationError("query must be a string")
        query = query.strip()
        if not query:
            raise ValidationError("query is empty")
        if len(query) > self._max_query_chars:
            raise ValidationError(f"query exceeds {self._max_query_chars} characters")
        return query

    def _retrieve(self, query: str, deadline: float | None) -> PromptContext:
        remaining = None if deadline is None else deadline - self._clock()
        if remaining is not None and remaining <= 0:
            raise ProviderTimeout("request deadline exceeded before embedding")
        query_vector = self._embedder.embed(query, timeout=remaining)

        if deadline is not None and deadline - self._clock() <= 0:
            raise ProviderTimeout("request deadline exceeded before document fetch")
        documents = self._store.fetch_all()
        ranked = rank(query_vector, documents, self._top_k)
        context = assemble(ranked)

        logger.info(
            "문서 검색: corpus=%d, ranked=%d, blocks=%d",
            len(documents), len(ranked), len(context.blocks),
        )
        return context
