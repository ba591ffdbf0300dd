"""Session orchestration for generate, regenerate, edit and export flows."""

from __future__ import annotations

import threading
from typing import Optional, Set, Tuple

from .config import AutoDocifyConfig
from .errors import ConfigurationError, SessionError
from .export.archive import ExportArchive, ExportPackager
from .export.remote import PushReport, RemoteSpacePublisher
from .inputs import InputNormalizer
from .llm.capability import GenerationCapability, LLMGenerationCapability
from .llm.runner import LLMRunner
from .logging import get_logger, submission_context
from .models import CanonicalInput, DocumentSet, SubmissionForm
from .prompting.builder import (
    GenerationRequestBuilder,
    RegenerationRequestBuilder,
    template_for,
)
from .prompting.constants import SECTIONS


class DocumentSession:
    """Owns the canonical input and document set of one user session.

    Every full generation gets a submission token. A response that arrives
    after a newer submission has started is discarded instead of overwriting
    the newer documents.
    """

    def __init__(
        self,
        capability: GenerationCapability,
        *,
        normalizer: InputNormalizer | None = None,
        generation_builder: GenerationRequestBuilder | None = None,
        regeneration_builder: RegenerationRequestBuilder | None = None,
        packager: ExportPackager | None = None,
        publisher: RemoteSpacePublisher | None = None,
    ) -> None:
        self.capability = capability
        self.normalizer = normalizer or InputNormalizer()
        self.generation_builder = generation_builder or GenerationRequestBuilder()
        self.regeneration_builder = regeneration_builder or RegenerationRequestBuilder()
        self.packager = packager or ExportPackager()
        self.publisher = publisher
        self.documents = DocumentSet()
        self.canonical_input: Optional[CanonicalInput] = None
        self.logger = get_logger("session")
        self._lock = threading.Lock()
        self._token = 0
        self._regenerating: Set[str] = set()

    @classmethod
    def from_config(
        cls,
        config: AutoDocifyConfig,
        capability: GenerationCapability | None = None,
    ) -> "DocumentSession":
        if capability is None:
            capability = LLMGenerationCapability(LLMRunner.from_config(config.llm))
        return cls(
            capability,
            normalizer=InputNormalizer.from_config(config.input),
            packager=ExportPackager(config.export.archive_name),
            publisher=RemoteSpacePublisher.from_config(config.export),
        )

    @property
    def submission_token(self) -> int:
        return self._token

    def generate(self, form: SubmissionForm) -> Optional[DocumentSet]:
        """Run a full generation; returns None when a newer submission superseded it."""
        canonical = self.normalizer.normalize_form(form)
        request = self.generation_builder.build(canonical)

        with self._lock:
            self._token += 1
            token = self._token
            self.canonical_input = canonical
            self.documents.clear()
        with submission_context(token):
            self.logger.info(
                "Generating %s-mode documentation from %s input", canonical.mode, canonical.origin
            )

            sections = self.capability.generate(request)

            with self._lock:
                if token != self._token:
                    self.logger.warning(
                        "Discarding stale generation %d; submission %d is newer", token, self._token
                    )
                    return None
                self.documents.replace_all(sections)
                result = self.documents.copy()
            self.logger.info("Generated %d sections", len(SECTIONS))
        return result

    def restore(
        self, form: SubmissionForm, documents: DocumentSet | None = None
    ) -> CanonicalInput:
        """Adopt a source and previously generated documents without calling the capability."""
        canonical = self.normalizer.normalize_form(form)
        with self._lock:
            self._token += 1
            self.canonical_input = canonical
            self.documents = documents.copy() if documents is not None else DocumentSet()
        return canonical

    def regenerate(
        self, section: str, tone: str, custom_prompt: str | None = None
    ) -> Optional[str]:
        """Replace one section with a retoned variant built from the original input."""
        with self._lock:
            canonical = self.canonical_input
            token = self._token
        if canonical is None:
            raise SessionError("Generate documentation before regenerating a section.")

        request = self.regeneration_builder.build(canonical, section, tone, custom_prompt)

        with self._lock:
            if section in self._regenerating:
                raise SessionError(f"Section '{section}' is already being regenerated.")
            self._regenerating.add(section)
        try:
            with submission_context(token):
                self.logger.info("Regenerating %s with a %s tone", section, tone)
                content = self.capability.regenerate(request)
                with self._lock:
                    if token != self._token:
                        self.logger.warning(
                            "Discarding regenerated %s; a newer submission replaced the documents",
                            section,
                        )
                        return None
                    self.documents.replace(section, content)
            return content
        finally:
            with self._lock:
                self._regenerating.discard(section)

    def edit(self, section: str, content: str) -> None:
        """Store a user edit for one section without calling the capability."""
        with self._lock:
            if section in self._regenerating:
                raise SessionError(f"Section '{section}' is being regenerated; wait before editing.")
            self.documents.replace(section, content)
        self.logger.debug("Stored user edit for %s (%d chars)", section, len(content))

    def snapshot(self) -> DocumentSet:
        with self._lock:
            return self.documents.copy()

    def export_archive(self) -> ExportArchive:
        documents, canonical = self._exportable_state()
        titles = template_for(canonical.mode).section_titles if canonical else None
        return self.packager.pack(documents, titles=titles)

    def push(self) -> PushReport:
        if self.publisher is None:
            raise ConfigurationError("Remote export is not configured for this session.")
        documents, _ = self._exportable_state()
        report = self.publisher.push(documents)
        if report.success:
            self.logger.info("Remote export finished")
        else:
            self.logger.error(
                "Remote export finished with failures: %s",
                ", ".join(outcome.section for outcome in report.failed()),
            )
        return report

    def _exportable_state(self) -> Tuple[DocumentSet, Optional[CanonicalInput]]:
        with self._lock:
            documents = self.documents.copy()
            canonical = self.canonical_input
        if documents.is_empty():
            raise SessionError("There is no generated documentation to export.")
        return documents, canonical


__all__ = ["DocumentSession"]
