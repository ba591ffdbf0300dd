"""Generation capability boundary and its LLM-backed implementation."""

from __future__ import annotations

import json
import re
from typing import Dict, Protocol

from ..errors import GenerationFailure, SchemaViolation
from ..logging import get_logger
from ..prompting.builder import (
    GenerationRequest,
    RegenerationRequest,
    validate_generation_response,
    validate_regeneration_response,
)
from .runner import LLMRunner

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)


class GenerationCapability(Protocol):
    """Opaque text-generation service the pipeline delegates to."""

    def generate(self, request: GenerationRequest) -> Dict[str, str]:
        """Return the four sections or raise GenerationFailure / SchemaViolation."""
        ...

    def regenerate(self, request: RegenerationRequest) -> str:
        """Return the replacement markdown for the target section."""
        ...


class LLMGenerationCapability:
    """Runs generation requests through an LLMRunner and enforces the response shape.

    A failed call is surfaced as-is; no retry happens here.
    """

    def __init__(self, runner: LLMRunner) -> None:
        self.runner = runner
        self.logger = get_logger("llm.capability")

    def generate(self, request: GenerationRequest) -> Dict[str, str]:
        self.logger.info("Requesting %s-mode documentation from %s", request.mode, self.runner.model)
        payload = self._call(request.messages, purpose="generation")
        try:
            return validate_generation_response(payload)
        except SchemaViolation as exc:
            self.logger.warning("Schema violation in generation response: %s", exc)
            raise

    def regenerate(self, request: RegenerationRequest) -> str:
        self.logger.info(
            "Requesting regeneration of %s with tone %s", request.target_section, request.tone
        )
        payload = self._call(request.messages, purpose="regeneration")
        try:
            return validate_regeneration_response(payload)
        except SchemaViolation as exc:
            self.logger.warning("Schema violation in regeneration response: %s", exc)
            raise

    def _call(self, messages, *, purpose: str) -> object:
        try:
            raw = self.runner.run(messages, json_response=True)
        except RuntimeError as exc:
            self.logger.error("LLM %s call failed: %s", purpose, exc)
            raise GenerationFailure(str(exc)) from exc
        try:
            return parse_json_reply(raw)
        except SchemaViolation as exc:
            self.logger.warning("Unparseable %s response: %s", purpose, exc)
            raise


def parse_json_reply(raw: str) -> object:
    """Decode a JSON object from the model reply, tolerating a fenced block."""
    text = raw.strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    match = _FENCED_JSON.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError as exc:
            raise SchemaViolation(f"Model returned malformed JSON: {exc.msg}") from exc
    raise SchemaViolation("Model reply did not contain a JSON object")


__all__ = ["GenerationCapability", "LLMGenerationCapability", "parse_json_reply"]
