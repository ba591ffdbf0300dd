"""Core data models shared across autodocify components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .errors import InvalidSection, SchemaViolation
from .prompting.constants import SECTIONS

_SECTION_ATTRS: Dict[str, str] = {
    "readme": "readme",
    "apiDocs": "api_docs",
    "userManual": "user_manual",
    "faq": "faq",
}


@dataclass(frozen=True)
class UploadedArchive:
    """Raw archive upload as received from a form or the CLI."""

    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class SourceInput:
    """A single tagged input channel: url, file, text or uiDescription."""

    kind: str
    value: Optional[str] = None
    archive: Optional[UploadedArchive] = None


@dataclass
class SubmissionForm:
    """Every input field a user can fill in before submitting."""

    github_url: Optional[str] = None
    zip_file: Optional[UploadedArchive] = None
    codebase_text: Optional[str] = None
    ui_description: Optional[str] = None
    ui_only_mode: bool = False


@dataclass(frozen=True)
class CanonicalInput:
    """Normalized source string plus the mode that selects the template family."""

    source: str
    mode: str
    origin: str


@dataclass
class DocumentSet:
    """The four generated markdown sections of one session."""

    readme: Optional[str] = None
    api_docs: Optional[str] = None
    user_manual: Optional[str] = None
    faq: Optional[str] = None

    def get(self, section: str) -> Optional[str]:
        return getattr(self, _attr_for(section))

    def replace(self, section: str, content: str) -> None:
        """Overwrite exactly one section."""
        setattr(self, _attr_for(section), content)

    def replace_all(self, sections: Mapping[str, str]) -> None:
        """Overwrite all four sections from a complete mapping."""
        missing = [name for name in SECTIONS if not isinstance(sections.get(name), str)]
        if missing:
            raise SchemaViolation(
                f"Cannot replace documents, missing sections: {', '.join(missing)}",
                keys=missing,
            )
        values = {_SECTION_ATTRS[name]: sections[name] for name in SECTIONS}
        self.__dict__.update(values)

    def clear(self) -> None:
        for attr in _SECTION_ATTRS.values():
            setattr(self, attr, None)

    def is_empty(self) -> bool:
        return not self.present_sections()

    def present_sections(self) -> List[str]:
        """Section identifiers with non-blank content, in canonical order."""
        return [name for name in SECTIONS if (self.get(name) or "").strip()]

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {name: self.get(name) for name in SECTIONS}

    def copy(self) -> "DocumentSet":
        return DocumentSet(**{attr: getattr(self, attr) for attr in _SECTION_ATTRS.values()})

    @classmethod
    def from_mapping(cls, sections: Mapping[str, Optional[str]]) -> "DocumentSet":
        documents = cls()
        for name, content in sections.items():
            if content is not None:
                documents.replace(name, content)
        return documents


def _attr_for(section: str) -> str:
    try:
        return _SECTION_ATTRS[section]
    except KeyError:
        raise InvalidSection(section) from None


__all__ = [
    "CanonicalInput",
    "DocumentSet",
    "SourceInput",
    "SubmissionForm",
    "UploadedArchive",
]
