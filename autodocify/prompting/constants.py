"""Shared constants for sections, tones and export filenames."""

from __future__ import annotations

MODE_CODE = "code"
MODE_UI = "ui"
MODES: tuple[str, ...] = (MODE_CODE, MODE_UI)

SECTIONS: tuple[str, ...] = (
    "readme",
    "apiDocs",
    "userManual",
    "faq",
)

SECTION_TITLES: dict[str, dict[str, str]] = {
    MODE_CODE: {
        "readme": "README",
        "apiDocs": "API Documentation",
        "userManual": "User Manual",
        "faq": "FAQ",
    },
    MODE_UI: {
        "readme": "UI Overview",
        "apiDocs": "Key Screens & Components",
        "userManual": "User Flows",
        "faq": "UI FAQ",
    },
}

# Used where the mode is unknown, e.g. when packaging files found on disk.
GENERIC_SECTION_TITLES: dict[str, str] = {
    "readme": "README / Overview",
    "apiDocs": "API Docs / Key Items",
    "userManual": "User Manual / Flows",
    "faq": "FAQ",
}

EXPORT_FILENAMES: dict[str, str] = {
    "readme": "README.md",
    "apiDocs": "API_DOCS.md",
    "userManual": "USER_MANUAL.md",
    "faq": "FAQ.md",
}

TONES: tuple[str, ...] = (
    "developer-friendly",
    "business-friendly",
    "concise",
    "detailed",
    "formal",
    "informal",
)

REGENERATED_CONTENT_KEY = "regeneratedContent"


__all__ = [
    "EXPORT_FILENAMES",
    "GENERIC_SECTION_TITLES",
    "MODES",
    "MODE_CODE",
    "MODE_UI",
    "REGENERATED_CONTENT_KEY",
    "SECTIONS",
    "SECTION_TITLES",
    "TONES",
]
