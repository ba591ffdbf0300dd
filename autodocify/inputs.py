"""Normalization of user submissions into a single canonical input string."""

from __future__ import annotations

import base64
import re
from typing import List, Sequence
from urllib.parse import urlparse

from .config import DEFAULT_ALLOWED_HOSTS, DEFAULT_MIN_TEXT_LENGTH, InputConfig
from .errors import ValidationError
from .logging import get_logger
from .models import CanonicalInput, SourceInput, SubmissionForm, UploadedArchive
from .prompting.constants import MODE_CODE, MODE_UI

ARCHIVE_CONTENT_TYPES = frozenset(
    {
        "application/zip",
        "application/x-zip",
        "application/x-zip-compressed",
    }
)

# Wire names of the submission fields, used in ValidationError.field.
FIELD_URL = "githubUrl"
FIELD_FILE = "zipFile"
FIELD_TEXT = "codebaseInput"
FIELD_UI = "uiDescription"

_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")


class InputNormalizer:
    """Turns one of the four input channels into a CanonicalInput.

    UI-only mode makes the UI description the only valid source. The url,
    file and text channels are ignored in that mode even when populated.
    """

    def __init__(
        self,
        *,
        min_text_length: int = DEFAULT_MIN_TEXT_LENGTH,
        allowed_hosts: Sequence[str] = DEFAULT_ALLOWED_HOSTS,
    ) -> None:
        self.min_text_length = min_text_length
        self.allowed_hosts = {host.lower() for host in allowed_hosts}
        self.logger = get_logger("inputs")

    @classmethod
    def from_config(cls, config: InputConfig) -> "InputNormalizer":
        return cls(min_text_length=config.min_text_length, allowed_hosts=config.allowed_hosts)

    def normalize(self, source: SourceInput, *, ui_only_mode: bool = False) -> CanonicalInput:
        """Validate a single tagged input and return its canonical form."""
        if ui_only_mode:
            if source.kind != "uiDescription":
                raise ValidationError(FIELD_UI, "UI-only mode requires a UI description.")
            return self._normalize_ui(source.value)

        if source.kind == "url":
            return self._normalize_url(source.value)
        if source.kind == "file":
            return self._normalize_file(source.archive)
        if source.kind == "text":
            return self._normalize_text(source.value)
        if source.kind == "uiDescription":
            raise ValidationError(FIELD_UI, "A UI description is only accepted in UI-only mode.")
        raise ValidationError("source", f"Unsupported input kind '{source.kind}'.")

    def normalize_form(self, form: SubmissionForm) -> CanonicalInput:
        """Pick the active channel from a full form and normalize it."""
        if form.ui_only_mode:
            ignored = self._populated_code_fields(form)
            if ignored:
                self.logger.debug("UI-only mode ignores populated fields: %s", ", ".join(ignored))
            return self._normalize_ui(form.ui_description)

        populated = self._populated_code_fields(form)
        if not populated:
            raise ValidationError(
                FIELD_TEXT,
                "Provide a GitHub repository URL, a .zip archive or pasted source code.",
            )
        if len(populated) > 1:
            raise ValidationError(
                "source",
                f"Provide exactly one source, received: {', '.join(populated)}.",
            )

        field_name = populated[0]
        if field_name == FIELD_URL:
            return self._normalize_url(form.github_url)
        if field_name == FIELD_FILE:
            return self._normalize_file(form.zip_file)
        return self._normalize_text(form.codebase_text)

    # ------------------------------------------------------------------
    # Channels

    def _normalize_url(self, value: str | None) -> CanonicalInput:
        url = (value or "").strip()
        if not url:
            raise ValidationError(FIELD_URL, "A repository URL is required.")
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"}:
            raise ValidationError(FIELD_URL, "Repository URL must start with http:// or https://.")
        host = (parsed.hostname or "").lower()
        if host not in self.allowed_hosts:
            allowed = ", ".join(sorted(self.allowed_hosts))
            raise ValidationError(FIELD_URL, f"Repository host must be one of: {allowed}.")
        segments = [segment for segment in parsed.path.split("/") if segment]
        if len(segments) < 2 or not all(_SEGMENT.match(segment) for segment in segments[:2]):
            raise ValidationError(FIELD_URL, "Repository URL must point to <owner>/<repository>.")
        return CanonicalInput(source=url, mode=MODE_CODE, origin="url")

    def _normalize_file(self, archive: UploadedArchive | None) -> CanonicalInput:
        if archive is None or not archive.data:
            raise ValidationError(FIELD_FILE, "An archive upload is required.")
        content_type = archive.content_type.split(";", 1)[0].strip().lower()
        if content_type not in ARCHIVE_CONTENT_TYPES:
            raise ValidationError(
                FIELD_FILE,
                f"Expected a .zip archive, received content type '{archive.content_type}'.",
            )
        encoded = base64.b64encode(archive.data).decode("ascii")
        self.logger.debug("Encoded archive %s (%d bytes)", archive.filename, len(archive.data))
        return CanonicalInput(
            source=f"data:{content_type};base64,{encoded}",
            mode=MODE_CODE,
            origin="file",
        )

    def _normalize_text(self, value: str | None) -> CanonicalInput:
        text = (value or "").strip()
        if len(text) < self.min_text_length:
            raise ValidationError(
                FIELD_TEXT,
                f"Pasted code must be at least {self.min_text_length} characters long.",
            )
        return CanonicalInput(source=text, mode=MODE_CODE, origin="text")

    def _normalize_ui(self, value: str | None) -> CanonicalInput:
        description = (value or "").strip()
        if not description:
            raise ValidationError(FIELD_UI, "A UI description or design link is required in UI-only mode.")
        return CanonicalInput(source=description, mode=MODE_UI, origin="uiDescription")

    @staticmethod
    def _populated_code_fields(form: SubmissionForm) -> List[str]:
        populated: List[str] = []
        if form.github_url and form.github_url.strip():
            populated.append(FIELD_URL)
        if form.zip_file is not None:
            populated.append(FIELD_FILE)
        if form.codebase_text and form.codebase_text.strip():
            populated.append(FIELD_TEXT)
        return populated


__all__ = [
    "ARCHIVE_CONTENT_TYPES",
    "FIELD_FILE",
    "FIELD_TEXT",
    "FIELD_UI",
    "FIELD_URL",
    "InputNormalizer",
]
