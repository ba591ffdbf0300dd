"""Builds mode-aware generation and regeneration prompts for the LLM."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..errors import InvalidSection, InvalidTone, SchemaViolation
from ..models import CanonicalInput
from .constants import (
    MODE_CODE,
    MODE_UI,
    REGENERATED_CONTENT_KEY,
    SECTIONS,
    SECTION_TITLES,
    TONES,
)


@dataclass(frozen=True)
class PromptMessage:
    """Represents a single chat message for LLM prompting."""

    role: str
    content: str


@dataclass(frozen=True)
class GenerationTemplate:
    """One instructional template family, selected by mode.

    Every variant answers with the same four keys; only the meaning of each
    key differs between variants.
    """

    mode: str
    template_name: str
    subject: str
    section_titles: Mapping[str, str]

    def title_for(self, section: str) -> str:
        return self.section_titles[section]


TEMPLATES: Dict[str, GenerationTemplate] = {
    MODE_CODE: GenerationTemplate(
        mode=MODE_CODE,
        template_name="code.j2",
        subject="codebase",
        section_titles=SECTION_TITLES[MODE_CODE],
    ),
    MODE_UI: GenerationTemplate(
        mode=MODE_UI,
        template_name="ui.j2",
        subject="user interface description",
        section_titles=SECTION_TITLES[MODE_UI],
    ),
}


def template_for(mode: str) -> GenerationTemplate:
    try:
        return TEMPLATES[mode]
    except KeyError:
        raise ValueError(f"Unknown generation mode '{mode}'") from None


@dataclass
class GenerationRequest:
    """Structured request for a full four-section generation."""

    source: str
    mode: str
    messages: List[PromptMessage]
    response_keys: Tuple[str, ...] = SECTIONS

    def to_payload(self) -> Dict[str, str]:
        return {"source": self.source, "mode": self.mode}


@dataclass
class RegenerationRequest:
    """Structured request to replace one section with a retoned variant."""

    canonical: CanonicalInput
    target_section: str
    tone: str
    messages: List[PromptMessage]
    custom_prompt: Optional[str] = None
    response_keys: Tuple[str, ...] = field(default=(REGENERATED_CONTENT_KEY,))

    @property
    def source(self) -> str:
        return self.canonical.source

    @property
    def mode(self) -> str:
        return self.canonical.mode

    def to_payload(self) -> Dict[str, str]:
        payload = {
            "source": self.canonical.source,
            "targetSection": self.target_section,
            "tone": self.tone,
        }
        if self.custom_prompt:
            payload["customPrompt"] = self.custom_prompt
        return payload


class _TemplateRenderer:
    """Shared Jinja2 environment handling for both builders."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def _render(self, template_name: str, **context: Any) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context).strip()

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )


class GenerationRequestBuilder(_TemplateRenderer):
    """Selects the template for a CanonicalInput and renders the prompt."""

    SYSTEM_PROMPT = (
        "You are an expert technical documentation writer. Produce complete, well-structured "
        "Markdown using headings, lists, fenced code blocks and tables where they help. "
        "Answer with a single JSON object and nothing else."
    )

    def build(self, canonical: CanonicalInput) -> GenerationRequest:
        template = template_for(canonical.mode)
        user_prompt = self._render(
            template.template_name,
            source=canonical.source,
            origin=canonical.origin,
            titles=template.section_titles,
            response_keys=SECTIONS,
        )
        messages = [
            PromptMessage(role="system", content=self.SYSTEM_PROMPT),
            PromptMessage(role="user", content=user_prompt),
        ]
        return GenerationRequest(source=canonical.source, mode=canonical.mode, messages=messages)


class RegenerationRequestBuilder(_TemplateRenderer):
    """Builds a request that rewrites exactly one section in a chosen tone."""

    SYSTEM_PROMPT = (
        "You are an expert technical documentation writer. Rewrite the requested documentation "
        "section from the original source material. Answer with a single JSON object and nothing else."
    )

    def build(
        self,
        canonical: CanonicalInput,
        target_section: str,
        tone: str,
        custom_prompt: str | None = None,
    ) -> RegenerationRequest:
        if target_section not in SECTIONS:
            raise InvalidSection(target_section)
        if tone not in TONES:
            raise InvalidTone(tone)

        template = template_for(canonical.mode)
        cleaned_prompt = (custom_prompt or "").strip() or None
        user_prompt = self._render(
            "regenerate.j2",
            source=canonical.source,
            subject=template.subject,
            section_key=target_section,
            section_title=template.title_for(target_section),
            tone=tone,
            custom_prompt=cleaned_prompt,
            response_key=REGENERATED_CONTENT_KEY,
        )
        messages = [
            PromptMessage(role="system", content=self.SYSTEM_PROMPT),
            PromptMessage(role="user", content=user_prompt),
        ]
        return RegenerationRequest(
            canonical=canonical,
            target_section=target_section,
            tone=tone,
            messages=messages,
            custom_prompt=cleaned_prompt,
        )


def validate_generation_response(payload: object) -> Dict[str, str]:
    """Return the four sections or raise SchemaViolation; never a partial result."""
    if not isinstance(payload, Mapping):
        raise SchemaViolation(f"Expected a JSON object, received {type(payload).__name__}")
    missing = [key for key in SECTIONS if key not in payload]
    if missing:
        raise SchemaViolation(f"Response is missing sections: {', '.join(missing)}", keys=missing)
    invalid = [
        key
        for key in SECTIONS
        if not isinstance(payload[key], str) or not payload[key].strip()
    ]
    if invalid:
        raise SchemaViolation(
            f"Sections must be non-empty strings: {', '.join(invalid)}", keys=invalid
        )
    return {key: payload[key] for key in SECTIONS}


def validate_regeneration_response(payload: object) -> str:
    if not isinstance(payload, Mapping):
        raise SchemaViolation(f"Expected a JSON object, received {type(payload).__name__}")
    content = payload.get(REGENERATED_CONTENT_KEY)
    if not isinstance(content, str) or not content.strip():
        raise SchemaViolation(
            f"Response must contain a non-empty '{REGENERATED_CONTENT_KEY}' string",
            keys=[REGENERATED_CONTENT_KEY],
        )
    return content


__all__ = [
    "GenerationRequest",
    "GenerationRequestBuilder",
    "GenerationTemplate",
    "PromptMessage",
    "RegenerationRequest",
    "RegenerationRequestBuilder",
    "TEMPLATES",
    "template_for",
    "validate_generation_response",
    "validate_regeneration_response",
]
