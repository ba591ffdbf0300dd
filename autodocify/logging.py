"""Logging utilities for autodocify commands and the service."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional

_LOGGER_NAME = "autodocify"
_CONSOLE_FORMAT = "[autodocify] %(levelname)s %(submission)s%(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(submission)s%(message)s"

_submission: ContextVar[Optional[int]] = ContextVar("autodocify_submission", default=None)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the autodocify hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


@contextmanager
def submission_context(token: int) -> Iterator[None]:
    """Tag every record logged inside the block with a submission token."""
    reset = _submission.set(token)
    try:
        yield
    finally:
        _submission.reset(reset)


def current_submission() -> Optional[int]:
    return _submission.get()


class SubmissionFilter(logging.Filter):
    """Adds ``record.submission`` ("#3 " or "") for the formatters below."""

    def filter(self, record: logging.LogRecord) -> bool:
        token = _submission.get()
        record.submission = f"#{token} " if token is not None else ""
        return True


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the autodocify logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(SubmissionFilter())
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(SubmissionFilter())
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "SubmissionFilter",
    "configure_logging",
    "current_submission",
    "get_logger",
    "submission_context",
]
