"""Per-section upsert of documentation into a remote documentation space."""

from __future__ import annotations

import http.client
import json
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..config import DEFAULT_EXPORT_BASE_URL, ExportConfig
from ..errors import ConfigurationError, RemotePushFailure
from ..logging import get_logger
from ..models import DocumentSet
from ..prompting.constants import EXPORT_FILENAMES, SECTIONS

STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"
STATUS_SKIPPED = "Skipped (No Content)"

Transport = Callable[..., Tuple[int, str]]


@dataclass
class PushOutcome:
    """Result of upserting one section."""

    section: str
    path: str
    status: str
    error: Optional[str] = None

    @property
    def attempted(self) -> bool:
        return self.status != STATUS_SKIPPED


@dataclass
class PushReport:
    """Per-section outcomes of one push, in push order."""

    outcomes: List[PushOutcome] = field(default_factory=list)

    def add(self, outcome: PushOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def success(self) -> bool:
        """True only when no attempted section failed."""
        return all(outcome.status == STATUS_SUCCESS for outcome in self.outcomes if outcome.attempted)

    def by_section(self) -> Dict[str, PushOutcome]:
        return {outcome.section: outcome for outcome in self.outcomes}

    def failed(self) -> List[PushOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == STATUS_FAILED]


class RemoteSpacePublisher:
    """Pushes each section to ``{base_url}/spaces/{space_id}/content/path/{path}``.

    Sections are pushed one after another in a fixed order. A failing section
    is recorded and the remaining sections are still attempted.
    """

    def __init__(
        self,
        *,
        api_token: str | None,
        space_id: str | None,
        base_url: str = DEFAULT_EXPORT_BASE_URL,
        timeout: float = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self.api_token = api_token
        self.space_id = space_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport or self._default_transport
        self.logger = get_logger("export.remote")

    @classmethod
    def from_config(
        cls, config: ExportConfig, *, transport: Transport | None = None
    ) -> "RemoteSpacePublisher":
        return cls(
            api_token=config.api_token,
            space_id=config.space_id,
            base_url=config.base_url,
            transport=transport,
        )

    def push(self, documents: DocumentSet) -> PushReport:
        """Upsert every non-empty section and report the per-section status."""
        self._ensure_configured()
        report = PushReport()
        for section in SECTIONS:
            path = EXPORT_FILENAMES[section]
            content = documents.get(section) or ""
            if not content.strip():
                self.logger.debug("Skipping %s: no content", section)
                report.add(PushOutcome(section=section, path=path, status=STATUS_SKIPPED))
                continue
            try:
                self.upsert(path, content)
            except RemotePushFailure as exc:
                self.logger.error("Failed to push %s: %s", path, exc)
                report.add(PushOutcome(section=section, path=path, status=STATUS_FAILED, error=str(exc)))
            else:
                self.logger.info("Pushed %s", path)
                report.add(PushOutcome(section=section, path=path, status=STATUS_SUCCESS))
        return report

    def upsert(self, path: str, markdown: str) -> None:
        """Create or replace the page at ``path``; raises RemotePushFailure on non-2xx."""
        url = f"{self.base_url}/spaces/{quote(str(self.space_id), safe='')}/content/path/{quote(path)}"
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        body = json.dumps({"markdown": markdown}).encode("utf-8")
        status, detail = self._transport("PUT", url, headers=headers, body=body, timeout=self.timeout)
        if not 200 <= status < 300:
            message = detail.strip() or "no response body"
            raise RemotePushFailure(f"HTTP {status}: {message}", status_code=status)

    def _ensure_configured(self) -> None:
        missing = []
        if not self.api_token:
            missing.append("api_token")
        if not self.space_id:
            missing.append("space_id")
        if missing:
            raise ConfigurationError(
                f"Remote export requires {' and '.join(missing)}; set them under 'export' "
                "in .autodocify.yml or via the environment."
            )

    @staticmethod
    def _default_transport(
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        body: bytes,
        timeout: float,
    ) -> Tuple[int, str]:
        request = Request(url, data=body, headers=headers, method=method)
        try:
            with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
                return response.status, response.read().decode("utf-8", errors="ignore")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            return exc.code, detail or str(exc.reason)
        except URLError as exc:
            raise RemotePushFailure(f"Request to {url} failed: {exc.reason}") from exc
        # Timeouts and dropped connections surface from getresponse/read unwrapped.
        except (OSError, http.client.HTTPException) as exc:
            raise RemotePushFailure(f"Request to {url} failed: {str(exc) or type(exc).__name__}") from exc


__all__ = [
    "PushOutcome",
    "PushReport",
    "RemoteSpacePublisher",
    "STATUS_FAILED",
    "STATUS_SKIPPED",
    "STATUS_SUCCESS",
]
