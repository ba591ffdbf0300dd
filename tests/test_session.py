"""Tests for session-level generate, regenerate, edit and export flows."""

from __future__ import annotations

import base64
import io
import zipfile

import pytest

from autodocify.errors import (
    ConfigurationError,
    GenerationFailure,
    InvalidTone,
    SessionError,
    ValidationError,
)
from autodocify.export.remote import RemoteSpacePublisher
from autodocify.logging import current_submission
from autodocify.models import DocumentSet, SubmissionForm
from autodocify.session import DocumentSession
from tests._fixtures.fakes import SAMPLE_SECTIONS, FailingCapability, FakeCapability, RecordingTransport


def test_generate_fills_all_sections(session, capability, code_form) -> None:
    documents = session.generate(code_form)

    assert documents is not None
    assert documents.as_dict() == SAMPLE_SECTIONS
    assert session.documents.as_dict() == SAMPLE_SECTIONS
    assert session.canonical_input.mode == "code"
    assert capability.generation_requests[0].mode == "code"


def test_ui_generation_uses_only_ui_description(session, capability) -> None:
    form = SubmissionForm(
        github_url="https://github.com/octocat/hello-world",
        ui_description="Settings screen with tabs for profile and billing.",
        ui_only_mode=True,
    )

    session.generate(form)

    request = capability.generation_requests[0]
    assert request.to_payload() == {
        "source": "Settings screen with tabs for profile and billing.",
        "mode": "ui",
    }


def test_validation_error_never_reaches_capability(session, capability) -> None:
    with pytest.raises(ValidationError):
        session.generate(SubmissionForm(codebase_text="short"))

    assert capability.generation_requests == []


def test_failed_generation_leaves_documents_cleared(code_form) -> None:
    session = DocumentSession(FailingCapability("quota exceeded"))
    session.documents.replace_all(SAMPLE_SECTIONS)

    with pytest.raises(GenerationFailure) as excinfo:
        session.generate(code_form)

    assert excinfo.value.reason == "quota exceeded"
    assert session.documents.is_empty()


def test_documents_are_cleared_while_generation_is_pending(session, capability, code_form) -> None:
    session.generate(code_form)
    observed = {}
    capability.on_generate = lambda request: observed.update(session.snapshot().as_dict())

    session.generate(code_form)

    assert set(observed.values()) == {None}


def test_stale_generation_response_is_discarded(session, capability, code_form) -> None:
    newer_sections = {key: f"newer {key}" for key in SAMPLE_SECTIONS}

    def submit_newer(request) -> None:
        capability.sections = newer_sections
        session.generate(SubmissionForm(codebase_text="n" * 70))
        capability.sections = dict(SAMPLE_SECTIONS)

    capability.on_generate = submit_newer

    result = session.generate(code_form)

    assert result is None
    assert session.documents.as_dict() == newer_sections
    assert session.canonical_input.source == "n" * 70
    assert session.submission_token == 2


def test_regenerate_changes_only_target_section(session, capability, code_form) -> None:
    session.generate(code_form)
    before = session.snapshot().as_dict()

    content = session.regenerate("faq", "concise")

    after = session.snapshot().as_dict()
    assert content == capability.regenerated
    assert after["faq"] == capability.regenerated
    for key in ("readme", "apiDocs", "userManual"):
        assert after[key] == before[key]


def test_regenerate_uses_original_input_not_edits(session, capability, code_form) -> None:
    session.generate(code_form)
    session.edit("readme", "user edited readme")

    session.regenerate("apiDocs", "detailed", "Add curl examples.")

    request = capability.regeneration_requests[0]
    assert request.source == code_form.codebase_text.strip()
    assert "user edited readme" not in request.messages[-1].content
    assert request.custom_prompt == "Add curl examples."
    assert session.documents.readme == "user edited readme"


def test_regenerate_before_generate_is_rejected(session) -> None:
    with pytest.raises(SessionError):
        session.regenerate("faq", "concise")


def test_regenerate_rejects_unknown_tone(session, capability, code_form) -> None:
    session.generate(code_form)

    with pytest.raises(InvalidTone):
        session.regenerate("faq", "sarcastic")

    assert capability.regeneration_requests == []


def test_regeneration_superseded_by_new_submission_is_discarded(session, capability, code_form) -> None:
    session.generate(code_form)
    capability.on_regenerate = lambda request: session.generate(code_form)

    result = session.regenerate("faq", "formal")

    assert result is None
    assert session.documents.faq == SAMPLE_SECTIONS["faq"]


def test_edit_during_regeneration_of_same_field_is_rejected(session, capability, code_form) -> None:
    session.generate(code_form)
    errors = []

    def try_edit(request) -> None:
        try:
            session.edit("faq", "manual faq")
        except SessionError as exc:
            errors.append(exc)
        session.edit("readme", "manual readme")

    capability.on_regenerate = try_edit

    session.regenerate("faq", "informal")

    assert len(errors) == 1
    assert session.documents.faq == capability.regenerated
    assert session.documents.readme == "manual readme"


def test_edit_replaces_single_section(session, code_form) -> None:
    session.generate(code_form)

    session.edit("userManual", "# Manual\n\nRewritten by hand.")

    expected = dict(SAMPLE_SECTIONS, userManual="# Manual\n\nRewritten by hand.")
    assert session.snapshot().as_dict() == expected


def test_export_archive_uses_current_documents(session, code_form) -> None:
    session.generate(code_form)
    session.edit("faq", "")

    archive = session.export_archive()

    with zipfile.ZipFile(io.BytesIO(base64.b64decode(archive.content))) as bundle:
        assert bundle.namelist() == ["README.md", "API_DOCS.md", "USER_MANUAL.md"]
    assert [entry.title for entry in archive.entries] == ["README", "API Documentation", "User Manual"]


def test_export_without_documents_is_rejected(session) -> None:
    with pytest.raises(SessionError):
        session.export_archive()


def test_push_without_publisher_is_a_configuration_error(session, code_form) -> None:
    session.generate(code_form)

    with pytest.raises(ConfigurationError):
        session.push()


def test_push_reports_per_section_status(code_form) -> None:
    transport = RecordingTransport()
    publisher = RemoteSpacePublisher(api_token="token", space_id="space", transport=transport)
    session = DocumentSession(FakeCapability(), publisher=publisher)
    session.generate(code_form)

    report = session.push()

    assert report.success is True
    assert len(transport.calls) == 4


def test_restore_adopts_source_and_documents(session, capability, code_form) -> None:
    documents = DocumentSet.from_mapping(SAMPLE_SECTIONS)

    canonical = session.restore(code_form, documents)
    session.regenerate("readme", "formal")

    assert canonical.origin == "text"
    assert capability.generation_requests == []
    assert session.documents.readme == capability.regenerated
    assert session.documents.faq == SAMPLE_SECTIONS["faq"]


def test_export_archive_titles_follow_the_restored_mode(session) -> None:
    ui_form = SubmissionForm(ui_description="Checkout page with a cart summary and a pay button.", ui_only_mode=True)
    session.restore(ui_form, DocumentSet(readme="# Checkout", faq="**Q: Refunds?**"))

    archive = session.export_archive()

    assert [entry.title for entry in archive.entries] == ["UI Overview", "UI FAQ"]


def test_capability_calls_run_inside_the_submission_log_context(session, capability, code_form) -> None:
    seen = []
    capability.on_generate = lambda request: seen.append(current_submission())
    session.generate(code_form)
    capability.on_regenerate = lambda request: seen.append(current_submission())
    session.regenerate("faq", "concise")

    token = session.submission_token
    assert seen == [token, token]
    assert current_submission() is None
