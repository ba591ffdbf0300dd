"""Zip packaging of a DocumentSet for download and knowledge-base import."""

from __future__ import annotations

import base64
import io
import zipfile
from dataclasses import dataclass, field
from typing import List, Mapping

from ..config import DEFAULT_ARCHIVE_NAME
from ..logging import get_logger
from ..models import DocumentSet
from ..prompting.constants import EXPORT_FILENAMES, GENERIC_SECTION_TITLES

ZIP_MIME_TYPE = "application/zip"
# Fixed entry timestamp so identical documents give identical archives.
_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class ExportArchiveEntry:
    """One markdown file inside the archive."""

    title: str
    path: str
    content: str


@dataclass
class ExportArchive:
    """Download artifact: zip bytes carried as base64 text."""

    file_name: str
    mime_type: str
    content: str
    entries: List[ExportArchiveEntry] = field(default_factory=list)
    message: str = ""

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.content)


def build_entries(
    documents: DocumentSet, titles: Mapping[str, str] | None = None
) -> List[ExportArchiveEntry]:
    """Return one entry per non-empty section, in canonical order."""
    section_titles = titles or GENERIC_SECTION_TITLES
    return [
        ExportArchiveEntry(
            title=section_titles[section],
            path=EXPORT_FILENAMES[section],
            content=documents.get(section) or "",
        )
        for section in documents.present_sections()
    ]


class ExportPackager:
    """Serializes the current documents into a single zip archive.

    Empty or absent sections are skipped; the archive never carries
    placeholder files.
    """

    def __init__(self, archive_name: str = DEFAULT_ARCHIVE_NAME) -> None:
        self.archive_name = archive_name
        self.logger = get_logger("export.archive")

    def pack(
        self, documents: DocumentSet, *, titles: Mapping[str, str] | None = None
    ) -> ExportArchive:
        entries = build_entries(documents, titles)
        if not entries:
            self.logger.warning("Packing an archive with no documentation sections")

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for entry in entries:
                info = zipfile.ZipInfo(entry.path, date_time=_ZIP_TIMESTAMP)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                archive.writestr(info, entry.content.encode("utf-8"))

        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        self.logger.info("Packed %d sections into %s", len(entries), self.archive_name)
        return ExportArchive(
            file_name=self.archive_name,
            mime_type=ZIP_MIME_TYPE,
            content=encoded,
            entries=entries,
            message=(
                f"Successfully generated {self.archive_name}. "
                "Download it and import it into your documentation space."
            ),
        )


__all__ = ["ExportArchive", "ExportArchiveEntry", "ExportPackager", "ZIP_MIME_TYPE", "build_entries"]
