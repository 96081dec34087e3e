"""프롬프트 조립 테스트 - 필드 추출, 중복 제거, 템플릿 선택."""

import pytest

from conftest import make_document, make_scored
from drugchat.prompt import (
    FIELD_LABELS,
    PLACEHOLDER_VALUES,
    PromptContext,
    PromptMode,
    assemble,
    build_prompt,
    extract_fields,
    render_context,
    select_mode,
)


def _ranked():
    return [
        make_scored(make_document(
            1, "Advil",
            genericName="ibuprofen",
            activeIngredients="Ibuprofen",
            dosageForm="Tablet",
            company="Pfizer",
            labelType="HUMAN OTC DRUG LABEL",
        ), 0.95),
        make_scored(make_document(
            2, "Motrin",
            activeIngredients="ibuprofen",
            dosageForm="tablet",
        ), 0.93),
        make_scored(make_document(
            3, "Tylenol",
            activeIngredients="acetaminophen",
            pharmacologicClass="N/A",
            company="not specified",
        ), 0.80),
        make_scored(make_document(4, "  advil ", activeIngredients="ibuprofen", dosageForm="gel"), 0.70),
    ]


class TestExtractFields:
    def test_only_present_fields_in_label_order(self):
        fields = extract_fields({
            "routeOfAdministration": "oral",
            "genericName": "ibuprofen",
            "source": "FDA Drug Label Database",
        })
        assert fields == (
            ("Generic/Proper Name", "ibuprofen"),
            ("Route of Administration", "oral"),
        )

    @pytest.mark.parametrize("value", ["N/A", "Not specified", " unknown ", "", "NONE", "-"])
    def test_placeholders_excluded(self, value):
        assert extract_fields({"company": value}) == ()

    def test_unmapped_keys_ignored(self):
        assert extract_fields({"fdaLabelLink": "https://example.com"}) == ()


class TestAssemble:
    def test_blocks_numbered_sequentially(self):
        context = assemble(_ranked())
        assert [b.number for b in context.blocks] == [1, 2]
        assert [b.name for b in context.blocks] == ["Advil", "Tylenol"]

    def test_same_ingredient_and_form_deduplicated(self):
        names = [b.name for b in assemble(_ranked()).blocks]
        assert "Motrin" not in names

    def test_same_title_deduplicated(self):
        # "  advil " 은 제형이 달라도 제목이 같으므로 제외
        names = [b.name for b in assemble(_ranked()).blocks]
        assert names.count("Advil") == 1
        assert "advil" not in [n.lower() for n in names[1:]]

    def test_ingredient_order_ignored(self):
        ranked = [
            make_scored(make_document(1, "Combo A", activeIngredients="ibuprofen, famotidine")),
            make_scored(make_document(2, "Combo B", activeIngredients="Famotidine; Ibuprofen")),
        ]
        assert len(assemble(ranked).blocks) == 1

    def test_missing_ingredient_not_treated_as_duplicate(self):
        ranked = [
            make_scored(make_document(1, "Drug A", activeIngredients="N/A")),
            make_scored(make_document(2, "Drug B", activeIngredients="n/a")),
        ]
        assert len(assemble(ranked).blocks) == 2

    def test_no_placeholder_in_any_field(self):
        for block in assemble(_ranked()).blocks:
            for label, value in block.fields:
                assert label in FIELD_LABELS.values()
                assert value.strip().lower() not in PLACEHOLDER_VALUES

    def test_placeholder_content_lines_removed(self, ibuprofen):
        context = assemble([make_scored(ibuprofen)])
        content = context.blocks[0].content
        assert "Manufacturer" not in content
        assert "Generic Name: ibuprofen" in content

    def test_empty_is_no_matches(self):
        context = assemble([])
        assert context.no_matches
        assert context.blocks == ()

    def test_non_empty_has_matches(self):
        assert not assemble(_ranked()).no_matches


class TestRenderContext:
    def test_drug_information_block(self):
        text = render_context(assemble(_ranked()))
        assert "1. DRUG INFORMATION:" in text
        assert "• Name: Advil" in text
        assert "• Manufacturer: Pfizer" in text
        assert "2. DRUG INFORMATION:" in text
        assert "3. DRUG INFORMATION:" not in text

    def test_placeholder_values_not_rendered(self):
        text = render_context(assemble(_ranked()))
        assert "N/A" not in text
        assert "not specified" not in text.lower()

    def test_no_matches_renders_disclaimer(self):
        text = render_context(PromptContext())
        assert "No drugs matching this query were found" in text
        assert "DRUG INFORMATION" not in text


class TestPromptPolicy:
    def test_select_mode(self):
        assert select_mode(True) is PromptMode.RETRIEVAL
        assert select_mode(False) is PromptMode.GENERAL

    def test_retrieval_prompt_has_context_and_query(self):
        system, user = build_prompt("ibuprofen dosage", PromptMode.RETRIEVAL, assemble(_ranked()))
        assert "FDA-approved" in system
        assert "1. DRUG INFORMATION:" in user
        assert "ibuprofen dosage" in user
        assert "GENERAL INFORMATION" in user

    def test_retrieval_prompt_without_matches(self):
        _, user = build_prompt("drug for gout", PromptMode.RETRIEVAL, PromptContext())
        assert "No drugs matching this query were found" in user

    def test_general_prompt_ignores_context(self):
        system, user = build_prompt("hello, how are you", PromptMode.GENERAL, assemble(_ranked()))
        assert "helpful AI assistant" in system
        assert "hello, how are you" in user
        assert "DRUG INFORMATION" not in user

    def test_query_with_braces_is_not_formatted(self):
        _, user = build_prompt("what is {dosage}?", PromptMode.GENERAL)
        assert "{dosage}" in user
