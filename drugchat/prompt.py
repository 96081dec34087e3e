"""프롬프트 정책 - 검색 결과를 컨텍스트 블록으로 조립하고 템플릿을 선택한다."""

import re
from dataclasses import dataclass
from enum import Enum

from drugchat.document_store import ScoredDocument

# 메타데이터 키 → 프롬프트 라벨. 이 순서대로 출력된다.
FIELD_LABELS: dict[str, str] = {
    "genericName": "Generic/Proper Name",
    "activeIngredients": "Active Ingredients",
    "pharmacologicClass": "Pharmacologic Class",
    "company": "Manufacturer",
    "labelType": "Label Type",
    "dosageForm": "Dosage Form",
    "routeOfAdministration": "Route of Administration",
}

# 값이 없는 것으로 취급하는 자리표시 문자열 (소문자, 공백 제거 후 비교)
PLACEHOLDER_VALUES: frozenset[str] = frozenset({
    "", "-", "n/a", "na", "none", "null", "unknown", "not specified", "not available",
})

_CONTENT_FIELD_RE = re.compile(r"^\s*[^:\n]+:\s*(?P<value>.*)$")
_WHITESPACE_RE = re.compile(r"\s+")


def is_placeholder(value: str | None) -> bool:
    if value is None:
        return True
    return _WHITESPACE_RE.sub(" ", str(value)).strip().lower() in PLACEHOLDER_VALUES


def _normalize(value: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", value or "").strip().lower()


def _normalize_ingredients(value: str | None) -> str:
    """성분 목록은 순서와 무관하게 비교한다."""
    parts = [_normalize(p) for p in re.split(r"[,;]", value or "")]
    return ", ".join(sorted(p for p in parts if p))


def _clean_content(content: str) -> str:
    """'라벨: N/A' 형태의 줄을 본문에서 제거한다."""
    kept = []
    for line in content.splitlines():
        match = _CONTENT_FIELD_RE.match(line)
        if match and is_placeholder(match.group("value")):
            continue
        kept.append(line.rstrip())
    return "\n".join(kept).strip()


@dataclass(frozen=True)
class DrugBlock:
    number: int
    name: str
    fields: tuple[tuple[str, str], ...]
    content: str
    similarity: float


@dataclass(frozen=True)
class PromptContext:
    blocks: tuple[DrugBlock, ...] = ()

    @property
    def no_matches(self) -> bool:
        return not self.blocks


class PromptMode(str, Enum):
    RETRIEVAL = "retrieval"
    GENERAL = "general"


def extract_fields(metadata: dict[str, str]) -> tuple[tuple[str, str], ...]:
    """FIELD_LABELS에 있고 실제 값이 있는 필드만 (라벨, 값)으로 뽑는다."""
    fields = []
    for key, label in FIELD_LABELS.items():
        value = metadata.get(key)
        if is_placeholder(value):
            continue
        fields.append((label, value.strip()))
    return tuple(fields)


def assemble(ranked: list[ScoredDocument]) -> PromptContext:
    """랭킹된 문서를 중복 제거 후 번호를 매긴 컨텍스트 블록으로 변환한다.

    같은 약품으로 보는 기준:
    - 정규화한 제목이 같음
    - 유효 성분과 제형 조합이 같음 (성분 값이 있을 때만)
    먼저 나온 (유사도가 높은) 문서가 남는다.
    """
    seen_titles: set[str] = set()
    seen_combos: set[tuple[str, str]] = set()
    blocks: list[DrugBlock] = []

    for item in ranked:
        title_key = _normalize(item.title)
        metadata = item.metadata
        combo_key = None
        if not is_placeholder(metadata.get("activeIngredients")):
            form = metadata.get("dosageForm")
            combo_key = (
                _normalize_ingredients(metadata["activeIngredients"]),
                "" if is_placeholder(form) else _normalize(form),
            )

        if title_key in seen_titles or (combo_key and combo_key in seen_combos):
            continue
        seen_titles.add(title_key)
        if combo_key:
            seen_combos.add(combo_key)

        blocks.append(DrugBlock(
            number=len(blocks) + 1,
            name=item.title.strip(),
            fields=extract_fields(metadata),
            content=_clean_content(item.content),
            similarity=item.similarity,
        ))

    return PromptContext(blocks=tuple(blocks))


NO_MATCH_NOTICE = """\
NO MATCHING DRUGS:
No drugs matching this query were found in the FDA drug label database. \
Follow the GENERAL INFORMATION format and state clearly that the answer is \
not based on FDA-approved labels.\
"""


def format_block(block: DrugBlock) -> str:
    lines = [f"{block.number}. DRUG INFORMATION:", f"• Name: {block.name}"]
    lines.extend(f"• {label}: {value}" for label, value in block.fields)
    if block.content:
        lines.append("Label Text:")
        lines.append(block.content)
    return "\n".join(lines)


def render_context(context: PromptContext) -> str:
    """컨텍스트를 프롬프트용 텍스트로 만든다. 결과가 없으면 안내 문구를 넣는다."""
    if context.no_matches:
        return NO_MATCH_NOTICE
    return "\n\n".join(format_block(block) for block in context.blocks)


RETRIEVAL_SYSTEM_PROMPT = """\
You are a medical information assistant specializing in FDA-approved \
medications. Answer the user's query using only the FDA drug label \
information provided in the context.

Rules:
- Only recommend or describe drugs that appear in the context.
- Only include OTC and prescription drugs. Exclude unapproved or investigational drugs.
- Never show the same drug twice (same active ingredient and dosage form).
- Do not confuse drug names with condition names.
- Include only fields that have actual data. Never write "Not specified" or "N/A".
- Omit any section that has no valid information, including MANUFACTURER.
- Use bullet points (•) for all items, one per line, with section headers in CAPS.
- Always remind the user to consult a healthcare provider.
"""

RETRIEVAL_PROMPT_TEMPLATE = """\
## Context from FDA drug labels

{context}

## User query

{query}

## Response format

For each unique drug, numbered sequentially (1, 2, 3, ...):

1. DRUG INFORMATION:
• Name: [Drug name]
• [Only the fields present in the context]

2. USAGE AND INDICATIONS:
• [Key points about usage and indications]

3. IMPORTANT WARNINGS:
• [Important warnings and precautions]

4. MANUFACTURER:
• [Manufacturer name, only if present in the context]

If no drugs in the context match the query:

GENERAL INFORMATION:
• [General information about the condition or drug class]
• [Common treatment approaches and important considerations]

Note: This information is not from FDA-approved labels. Please consult \
healthcare providers for specific treatment options.
"""

GENERAL_SYSTEM_PROMPT = """\
You are a helpful AI assistant. Provide a concise and friendly response.
"""

GENERAL_PROMPT_TEMPLATE = """\
User Query: {query}

Keep your response brief and to the point. If the query is unclear, ask for clarification.
"""


def select_mode(is_drug_related: bool) -> PromptMode:
    """분류 결과만으로 프롬프트 모드를 정한다. 요청 내에서 바뀌지 않는다."""
    return PromptMode.RETRIEVAL if is_drug_related else PromptMode.GENERAL


def build_prompt(
    query: str,
    mode: PromptMode,
    context: PromptContext | None = None,
) -> tuple[str, str]:
    """모드에 맞는 시스템 프롬프트와 사용자 프롬프트를 생성한다.

    Returns:
        (system_prompt, user_prompt) 튜플.
    """
    if mode is PromptMode.GENERAL:
        return GENERAL_SYSTEM_PROMPT, GENERAL_PROMPT_TEMPLATE.format(query=query)

    user = RETRIEVAL_PROMPT_TEMPLATE.format(
        context=render_context(context or PromptContext()),
        query=query,
    )
    return RETRIEVAL_SYSTEM_PROMPT, user
