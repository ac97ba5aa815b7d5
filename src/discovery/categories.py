"""
Static extension-to-category lookup with filename fallbacks.
"""

from __future__ import annotations

DOCUMENT_EXTS = {".doc", ".docx", ".pdf", ".txt"}
SPREADSHEET_EXTS = {".xls", ".xlsx", ".csv"}
PRESENTATION_EXTS = {".ppt", ".pptx"}
ARCHIVE_EXTS = {".zip", ".rar", ".7z", ".tar", ".gz"}
VIDEO_EXTS = {".mp4", ".mov", ".avi", ".mkv"}
AUDIO_EXTS = {".mp3", ".wav", ".flac"}
SOURCE_CODE_EXTS = {".cs", ".js", ".ts", ".java", ".py"}
SOFTWARE_EXTS = {".exe", ".msi", ".dll"}
AUTOMATION_EXTS = {".bat"}

CATEGORY_BY_EXTENSION: dict[str, str] = {}
for _category, _exts in (
    ("Documents", DOCUMENT_EXTS),
    ("Spreadsheets", SPREADSHEET_EXTS),
    ("Presentations", PRESENTATION_EXTS),
    ("Archives", ARCHIVE_EXTS),
    ("Video", VIDEO_EXTS),
    ("Audio", AUDIO_EXTS),
    ("SourceCode", SOURCE_CODE_EXTS),
    ("Software", SOFTWARE_EXTS),
    ("Automation", AUTOMATION_EXTS),
):
    for _ext in _exts:
        CATEGORY_BY_EXTENSION[_ext] = _category

NAME_MARKERS = (
    (("invoice", "receipt"), "Finance"),
    (("contract", "legal"), "Legal"),
    (("backup", "archive"), "Backups"),
)
DEFAULT_CATEGORY = "General"


def categorize(extension: str, file_name: str) -> str:
    """Return a category label for a file."""
    category = CATEGORY_BY_EXTENSION.get(extension.lower())
    if category:
        return category
    lower = file_name.lower()
    for markers, label in NAME_MARKERS:
        if any(marker in lower for marker in markers):
            return label
    return DEFAULT_CATEGORY
