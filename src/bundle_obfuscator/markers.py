"""Boundary marker tokens delimiting application code inside a bundle."""

from __future__ import annotations

import re
from typing import Final
from urllib.parse import quote, unquote

_TOKEN: Final[str] = "9e41c7a2d5"

BEGIN_MARKER: Final[str] = f"/*<bo:begin:{_TOKEN}>*/"
END_MARKER: Final[str] = f"/*<bo:end:{_TOKEN}>*/"
LABEL_OPEN: Final[str] = f"/*<bo:file:{_TOKEN}:"
LABEL_CLOSE: Final[str] = ">*/"

# Quoted labels never contain '>', so the label body stops at the first one.
_LABEL_PATTERN: Final[re.Pattern[str]] = re.compile(
    re.escape(LABEL_OPEN) + r"[^>]*" + re.escape(LABEL_CLOSE)
)


def file_label(canonical_path: str) -> str:
    """Return the label token embedding one canonical path."""
    return f"{LABEL_OPEN}{quote(canonical_path, safe='/')}{LABEL_CLOSE}"


def parse_file_label(text: str) -> tuple[str | None, str]:
    """Split a leading label token off text, returning (path, remainder)."""
    if not text.startswith(LABEL_OPEN):
        return None, text
    close_index = text.find(LABEL_CLOSE, len(LABEL_OPEN))
    if close_index == -1:
        return None, text
    encoded = text[len(LABEL_OPEN) : close_index]
    return unquote(encoded), text[close_index + len(LABEL_CLOSE) :]


def has_markers(code: str) -> bool:
    """Return True when both boundary markers are present."""
    return BEGIN_MARKER in code and END_MARKER in code


def strip_markers(code: str) -> str:
    """Remove every boundary marker and file label from code."""
    stripped = _LABEL_PATTERN.sub("", code)
    return stripped.replace(BEGIN_MARKER, "").replace(END_MARKER, "")
