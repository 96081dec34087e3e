"""FastAPI 서버 - 채팅 요청을 받아 코어 파이프라인을 호출한다."""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from drugchat.chat import ChatService
from drugchat.config import settings
from drugchat.errors import ChatError, DimensionMismatch, ErrorCategory
from drugchat.logging_config import setup_logging

logger = logging.getLogger(__name__)

STATUS_CODES: dict[ErrorCategory, int] = {
    ErrorCategory.INVALID_INPUT: 400,
    ErrorCategory.UNAUTHORIZED: 401,
    ErrorCategory.RATE_LIMITED: 429,
    ErrorCategory.UNAVAILABLE: 503,
    ErrorCategory.FAILURE: 500,
}

USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.INVALID_INPUT: "The request must contain a non-empty user message.",
    ErrorCategory.UNAUTHORIZED: "Invalid API key. Please check your configuration.",
    ErrorCategory.RATE_LIMITED: "Rate limit exceeded. Please try again later.",
    ErrorCategory.UNAVAILABLE: (
        "The service is temporarily unavailable. Please try again in a few moments."
    ),
    ErrorCategory.FAILURE: "Failed to get chat completion.",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json")
    logger.info("Drug Chat 시작 (model=%s, embed_model=%s)", settings.llm_model, settings.embed_model)
    yield
    logger.info("Drug Chat 종료")


app = FastAPI(
    title="Drug Info Chat",
    description="FDA 약품 라벨 기반 RAG 채팅 API",
    version="0.1.0",
    lifespan=lifespan,
)


@lru_cache(maxsize=1)
def get_chat_service() -> ChatService:
    return ChatService.from_settings()


def error_response(category: ErrorCategory) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES[category],
        content={"error": category.value, "message": USER_MESSAGES[category]},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(ErrorCategory.INVALID_INPUT)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "model": settings.llm_model,
        "embed_model": settings.embed_model,
    }


@app.post("/chat")
def chat(
    payload: dict = Body(...),
    service: ChatService = Depends(get_chat_service),
):
    """채팅 요청을 처리한다.

    본문은 {"messages": [{"role", "content"}, ...]} 또는 {"query": "..."}.
    동기 함수라 스레드풀에서 실행되며, 코어의 블로킹 호출이 이벤트 루프를 막지 않는다.
    """
    try:
        if "messages" in payload:
            content = service.answer_messages(payload["messages"])
        else:
            content = service.answer(payload.get("query"))
    except ChatError as exc:
        if isinstance(exc, DimensionMismatch):
            logger.exception("임베딩 차원 불일치")
        else:
            logger.warning(
                "채팅 실패: %s", exc,
                extra={"error_kind": type(exc).__name__, "status": STATUS_CODES[exc.category]},
            )
        return error_response(exc.category)
    except Exception:
        logger.exception("채팅 처리 중 예상하지 못한 오류")
        return error_response(ErrorCategory.FAILURE)

    return {"content": content}
