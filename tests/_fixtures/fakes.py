"""Test doubles for the generation capability and remote transport."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from autodocify.errors import GenerationFailure
from autodocify.prompting.builder import GenerationRequest, RegenerationRequest

SAMPLE_SECTIONS: Dict[str, str] = {
    "readme": "# Demo\n\nA small demo project.",
    "apiDocs": "## API\n\n`GET /items` returns every item.",
    "userManual": "## Using Demo\n\n1. Start the server.\n2. Open the browser.",
    "faq": "**Q: Is it free?**\n\nA: Yes.",
}

SAMPLE_CODE = "def add(a, b):\n    \"\"\"Return the sum of a and b.\"\"\"\n    return a + b\n"


class FakeCapability:
    """Records requests and answers with canned sections."""

    def __init__(
        self,
        sections: Optional[Dict[str, str]] = None,
        *,
        regenerated: str = "## Rewritten\n\nShorter answer.",
        error: Optional[Exception] = None,
    ) -> None:
        self.sections = dict(sections or SAMPLE_SECTIONS)
        self.regenerated = regenerated
        self.error = error
        self.generation_requests: List[GenerationRequest] = []
        self.regeneration_requests: List[RegenerationRequest] = []
        self.on_generate: Optional[Callable[[GenerationRequest], None]] = None
        self.on_regenerate: Optional[Callable[[RegenerationRequest], None]] = None

    def generate(self, request: GenerationRequest) -> Dict[str, str]:
        self.generation_requests.append(request)
        hook, self.on_generate = self.on_generate, None
        if hook is not None:
            hook(request)
        if self.error is not None:
            raise self.error
        return dict(self.sections)

    def regenerate(self, request: RegenerationRequest) -> str:
        self.regeneration_requests.append(request)
        hook, self.on_regenerate = self.on_regenerate, None
        if hook is not None:
            hook(request)
        if self.error is not None:
            raise self.error
        return self.regenerated


class FailingCapability(FakeCapability):
    def __init__(self, reason: str = "quota exceeded") -> None:
        super().__init__(error=GenerationFailure(reason))


class RecordingTransport:
    """Fake HTTP transport returning a status per path suffix."""

    def __init__(self, statuses: Optional[Dict[str, Tuple[int, str]]] = None) -> None:
        self.statuses = statuses or {}
        self.calls: List[Dict[str, object]] = []

    def __call__(self, method, url, *, headers, body, timeout) -> Tuple[int, str]:
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout}
        )
        for suffix, response in self.statuses.items():
            if url.endswith(suffix):
                return response
        return 200, "{}"
