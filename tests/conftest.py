from __future__ import annotations

import pytest

from autodocify.models import SubmissionForm
from autodocify.session import DocumentSession
from tests._fixtures.fakes import SAMPLE_CODE, FakeCapability


@pytest.fixture
def capability() -> FakeCapability:
    return FakeCapability()


@pytest.fixture
def session(capability: FakeCapability) -> DocumentSession:
    """A session wired to the fake capability."""
    return DocumentSession(capability)


@pytest.fixture
def code_form() -> SubmissionForm:
    return SubmissionForm(codebase_text=SAMPLE_CODE)
