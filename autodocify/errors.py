"""Error taxonomy shared by the generation, regeneration and export pipeline."""

from __future__ import annotations

from typing import Sequence


class AutoDocifyError(RuntimeError):
    """Base class for every error raised by autodocify."""


class ValidationError(AutoDocifyError):
    """Raised when a submission field is malformed or missing."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class GenerationFailure(AutoDocifyError):
    """Raised when the generation capability could not produce a result."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class SchemaViolation(GenerationFailure):
    """Raised when the capability answered but broke the fixed response shape."""

    def __init__(self, reason: str, *, keys: Sequence[str] = ()) -> None:
        super().__init__(reason)
        self.keys = list(keys)


class InvalidSection(AutoDocifyError):
    """Raised for a section identifier outside the four fixed sections."""

    def __init__(self, section: str) -> None:
        super().__init__(f"Unknown documentation section '{section}'")
        self.section = section


class InvalidTone(AutoDocifyError):
    """Raised for a tone outside the supported tone set."""

    def __init__(self, tone: str) -> None:
        super().__init__(f"Unsupported tone '{tone}'")
        self.tone = tone


class ConfigurationError(AutoDocifyError):
    """Raised when configuration is unreadable or a required value is missing."""


class RemotePushFailure(AutoDocifyError):
    """Raised when a single section upsert to the remote space fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionError(AutoDocifyError):
    """Raised when a session operation is used out of order."""


__all__ = [
    "AutoDocifyError",
    "ConfigurationError",
    "GenerationFailure",
    "InvalidSection",
    "InvalidTone",
    "RemotePushFailure",
    "SchemaViolation",
    "SessionError",
    "ValidationError",
]
