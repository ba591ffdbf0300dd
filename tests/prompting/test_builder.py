"""Tests for the generation and regeneration request builders."""

from __future__ import annotations

import pytest

from autodocify.errors import InvalidSection, InvalidTone, SchemaViolation
from autodocify.models import CanonicalInput
from autodocify.prompting.builder import (
    TEMPLATES,
    GenerationRequestBuilder,
    RegenerationRequestBuilder,
    validate_generation_response,
    validate_regeneration_response,
)

CODE_INPUT = CanonicalInput(source="https://github.com/octocat/hello-world", mode="code", origin="url")
UI_INPUT = CanonicalInput(source="A kanban board with drag and drop cards.", mode="ui", origin="uiDescription")


def _user_prompt(request) -> str:
    return request.messages[-1].content


def test_code_request_uses_code_template() -> None:
    request = GenerationRequestBuilder().build(CODE_INPUT)

    prompt = _user_prompt(request)
    assert request.to_payload() == {"source": CODE_INPUT.source, "mode": "code"}
    assert request.messages[0].role == "system"
    assert "Repository URL: https://github.com/octocat/hello-world" in prompt
    assert "API Documentation" in prompt
    assert "public function" in prompt
    assert "Key Screens" not in prompt


def test_ui_request_uses_ui_template() -> None:
    request = GenerationRequestBuilder().build(UI_INPUT)

    prompt = _user_prompt(request)
    assert request.mode == "ui"
    assert UI_INPUT.source in prompt
    assert "Key Screens & Components" in prompt
    assert "numbered steps" in prompt
    assert "public function" not in prompt


@pytest.mark.parametrize("canonical", [CODE_INPUT, UI_INPUT])
def test_both_templates_share_the_response_keys(canonical: CanonicalInput) -> None:
    request = GenerationRequestBuilder().build(canonical)

    assert request.response_keys == ("readme", "apiDocs", "userManual", "faq")
    prompt = _user_prompt(request)
    for key in request.response_keys:
        assert f'"{key}"' in prompt


def test_generation_builder_is_deterministic() -> None:
    builder = GenerationRequestBuilder()

    assert builder.build(CODE_INPUT) == builder.build(CODE_INPUT)
    assert GenerationRequestBuilder().build(UI_INPUT) == builder.build(UI_INPUT)


def test_text_source_is_fenced() -> None:
    canonical = CanonicalInput(source="print('hello world')" * 4, mode="code", origin="text")

    prompt = _user_prompt(GenerationRequestBuilder().build(canonical))

    assert "```\nprint('hello world')" in prompt


def test_templates_cover_every_mode() -> None:
    assert set(TEMPLATES) == {"code", "ui"}
    for template in TEMPLATES.values():
        assert set(template.section_titles) == {"readme", "apiDocs", "userManual", "faq"}


def test_regeneration_request_carries_section_and_tone() -> None:
    request = RegenerationRequestBuilder().build(CODE_INPUT, "faq", "concise")

    prompt = _user_prompt(request)
    assert request.to_payload() == {
        "source": CODE_INPUT.source,
        "targetSection": "faq",
        "tone": "concise",
    }
    assert '"FAQ"' in prompt
    assert "concise tone" in prompt
    assert '"regeneratedContent"' in prompt
    assert request.response_keys == ("regeneratedContent",)


def test_regeneration_uses_mode_specific_titles() -> None:
    request = RegenerationRequestBuilder().build(UI_INPUT, "userManual", "informal")

    assert '"User Flows"' in _user_prompt(request)


def test_regeneration_includes_custom_prompt() -> None:
    request = RegenerationRequestBuilder().build(
        CODE_INPUT, "readme", "business-friendly", "  Mention the pricing tiers.  "
    )

    assert request.custom_prompt == "Mention the pricing tiers."
    assert request.to_payload()["customPrompt"] == "Mention the pricing tiers."
    assert "Mention the pricing tiers." in _user_prompt(request)


def test_regeneration_builder_is_deterministic() -> None:
    builder = RegenerationRequestBuilder()

    assert builder.build(UI_INPUT, "faq", "formal") == builder.build(UI_INPUT, "faq", "formal")


def test_regeneration_rejects_unknown_section() -> None:
    with pytest.raises(InvalidSection):
        RegenerationRequestBuilder().build(CODE_INPUT, "changelog", "concise")


def test_regeneration_rejects_unknown_tone() -> None:
    with pytest.raises(InvalidTone):
        RegenerationRequestBuilder().build(CODE_INPUT, "faq", "sarcastic")


def test_validate_generation_response_accepts_complete_payload() -> None:
    payload = {"readme": "a", "apiDocs": "b", "userManual": "c", "faq": "d", "extra": "ignored"}

    assert validate_generation_response(payload) == {
        "readme": "a",
        "apiDocs": "b",
        "userManual": "c",
        "faq": "d",
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"readme": "a", "apiDocs": "b", "userManual": "c"},
        {"readme": "a", "apiDocs": 3, "userManual": "c", "faq": "d"},
        {"readme": "a", "apiDocs": "b", "userManual": "  ", "faq": "d"},
        ["readme"],
    ],
)
def test_validate_generation_response_rejects_malformed_payload(payload) -> None:
    with pytest.raises(SchemaViolation):
        validate_generation_response(payload)


def test_validate_regeneration_response() -> None:
    assert validate_regeneration_response({"regeneratedContent": "# New"}) == "# New"
    with pytest.raises(SchemaViolation):
        validate_regeneration_response({"content": "# New"})
