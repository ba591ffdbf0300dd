"""Archive packaging and remote push of generated documentation."""

from .archive import ExportArchive, ExportArchiveEntry, ExportPackager
from .remote import PushOutcome, PushReport, RemoteSpacePublisher

__all__ = [
    "ExportArchive",
    "ExportArchiveEntry",
    "ExportPackager",
    "PushOutcome",
    "PushReport",
    "RemoteSpacePublisher",
]
