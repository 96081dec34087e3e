"""에러 분류 - 코어가 던지는 예외와 호출자에게 노출되는 상태 카테고리.

코어는 사용자용 에러 문구를 만들지 않는다. 각 예외는 category만 가지고,
HTTP 상태 코드와 안내 문구로의 변환은 서버(호출 경계)에서 한다.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    UNAVAILABLE = "unavailable"
    RATE_LIMITED = "rate_limited"
    FAILURE = "failure"


class ChatError(Exception):
    """모든 코어 예외의 기반 클래스."""

    category: ErrorCategory = ErrorCategory.FAILURE

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "error": self.category.value,
            "kind": type(self).__name__,
            "message": self.message,
        }


class ValidationError(ChatError):
    """쿼리가 비어 있거나 형식이 잘못됨."""

    category = ErrorCategory.INVALID_INPUT


class DimensionMismatch(ChatError):
    """길이가 다른 벡터를 비교하려 함.

    컴포넌트가 올바르게 구현되었다면 발생하지 않아야 하는 내부 불변식 위반이다.
    호출자에게는 일반 실패로만 보인다.
    """

    def __init__(self, left: int, right: int):
        super().__init__(f"vector dimensions differ: {left} != {right}")
        self.left = left
        self.right = right


# ── 프로바이더 에러 ──────────────────────────────────────────


class ProviderError(ChatError):
    """임베딩/생성 프로바이더 호출 실패."""


class TransientProviderError(ProviderError):
    """잠시 후 재시도하면 성공할 수 있는 실패. 생성 단계에서만 재시도한다."""

    category = ErrorCategory.UNAVAILABLE


class ProviderUnavailable(TransientProviderError):
    """프로바이더가 일시적으로 사용 불가 (503, 과부하)."""


class ProviderTimeout(TransientProviderError):
    """응답 대기 시간 또는 요청 전체 기한 초과."""


class PermanentProviderError(ProviderError):
    """재시도해도 결과가 같은 실패."""


class AuthenticationError(PermanentProviderError):
    category = ErrorCategory.UNAUTHORIZED


class RateLimited(PermanentProviderError):
    category = ErrorCategory.RATE_LIMITED


class InvalidRequest(PermanentProviderError):
    """프로바이더가 요청 자체를 거부함 (4xx)."""


class InvalidProviderResponse(PermanentProviderError):
    """응답은 왔지만 기대한 페이로드가 없거나 형식이 틀림."""


def from_status(status_code: int, detail: str = "") -> ProviderError:
    """HTTP 상태 코드를 프로바이더 에러 타입으로 변환한다.

    "temporarily unavailable" 문구가 담긴 5xx 응답도 일시적 실패로 본다.
    """
    message = f"provider returned {status_code}: {detail}".rstrip(": ")
    if status_code == 503 or (
        status_code >= 500 and "temporarily unavailable" in detail.lower()
    ):
        return ProviderUnavailable(message)
    if status_code == 429:
        return RateLimited(message)
    if status_code in (401, 403):
        return AuthenticationError(message)
    if 400 <= status_code < 500:
        return InvalidRequest(message)
    return PermanentProviderError(message)
