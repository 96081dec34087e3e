"""생성 결과 정리 - 순서가 정해진 순수 텍스트 변환의 연속.

UI 렌더링과 무관하게 텍스트만 다룬다. 각 변환은 단독으로 테스트할 수 있다.
"""

import re
from collections.abc import Callable

from drugchat.prompt import is_placeholder

BULLET = "•"

# 본문이 비었거나 자리표시 값만 있으면 통째로 지우는 섹션
PLACEHOLDER_SECTIONS: frozenset[str] = frozenset({"MANUFACTURER"})

_ZERO_WIDTH_RE = re.compile(r"[\u200b-\u200d\u2060\ufeff]")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_INLINE_SPACE_RE = re.compile(r"[ \t\u00a0]+")
_MARKER_RE = re.compile(r"^(?:[\u2022\u00b7\u25aa]\s*|[-*]\s+|\d+[.)]\s+)(?=\S)")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s")
_HEADER_RE = re.compile(
    r"^(?:\d+[.)]\s*)?(?P<name>[A-Z][A-Z0-9 /&()-]*[A-Z)]):\s*(?P<rest>.*)$"
)
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def strip_control_chars(text: str) -> str:
    """제로폭 문자와 줄바꿈/탭을 제외한 제어 문자를 지운다."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _ZERO_WIDTH_RE.sub("", text)
    return _CONTROL_RE.sub("", text)


def collapse_whitespace(text: str) -> str:
    """줄 안의 연속 공백을 하나로 줄이고 줄 양끝 공백을 지운다. 줄바꿈은 유지."""
    return "\n".join(_INLINE_SPACE_RE.sub(" ", line).strip() for line in text.split("\n"))


def normalize_bullets(text: str) -> str:
    """-, *, 번호 목록을 모두 '• ' 형식으로 맞춘다.

    '1. DRUG INFORMATION:' 같은 번호 붙은 섹션 헤더는 그대로 둔다.
    """
    lines = []
    for line in text.split("\n"):
        if _NUMBERED_RE.match(line) and _HEADER_RE.match(line):
            lines.append(line)
            continue
        match = _MARKER_RE.match(line)
        if match:
            line = f"{BULLET} {line[match.end():]}"
        lines.append(line)
    return "\n".join(lines)


def collapse_blank_lines(text: str) -> str:
    """세 줄 이상 연속된 줄바꿈을 빈 줄 하나로 줄인다."""
    return _BLANK_RUN_RE.sub("\n\n", text).strip()


def _bullet_value(line: str) -> str:
    return line.lstrip(BULLET).strip()


def strip_placeholder_sections(text: str) -> str:
    """PLACEHOLDER_SECTIONS 중 실제 값이 없는 섹션을 헤더째 지운다.

    섹션 본문은 헤더 다음 줄부터 빈 줄이나 다음 헤더 직전까지다. 헤더 바로 뒤의
    빈 줄은 건너뛰고 이어지는 글머리표를 본문으로 본다. 남기는 섹션은 헤더와
    본문 사이 빈 줄을 없앤다.
    """
    lines = text.split("\n")
    kept: list[str] = []
    i = 0
    while i < len(lines):
        header = _HEADER_RE.match(lines[i])
        if not header or header.group("name").strip() not in PLACEHOLDER_SECTIONS:
            kept.append(lines[i])
            i += 1
            continue

        j = i + 1
        if header.group("rest").strip():
            # 'MANUFACTURER: N/A'처럼 값이 헤더 줄에 붙어 있으면 그 줄이 섹션 전체
            values = [header.group("rest")]
        else:
            # 헤더와 글머리표 사이에 빈 줄이 있어도 그 글머리표는 이 섹션 소속
            k = j
            while k < len(lines) and not lines[k].strip():
                k += 1
            if k < len(lines) and lines[k].startswith(BULLET):
                j = k
            values = []
            while j < len(lines) and lines[j].strip() and not _HEADER_RE.match(lines[j]):
                values.append(_bullet_value(lines[j]))
                j += 1

        if not all(is_placeholder(v) for v in values):
            kept.append(lines[i])
            kept.extend(line for line in lines[i + 1:j] if line.strip())
        i = j

    return collapse_blank_lines("\n".join(kept))


TRANSFORMS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("strip_control_chars", strip_control_chars),
    ("collapse_whitespace", collapse_whitespace),
    ("normalize_bullets", normalize_bullets),
    ("collapse_blank_lines", collapse_blank_lines),
    ("strip_placeholder_sections", strip_placeholder_sections),
)


def normalize_response(text: str) -> str:
    """TRANSFORMS를 순서대로 적용한다."""
    for _, transform in TRANSFORMS:
        text = transform(text)
    return text
