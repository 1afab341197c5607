"""Stitch transformed code back into the bundle layout."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from bundle_obfuscator.bundle.models import FileRecord, SplitBundle
from bundle_obfuscator.markers import BEGIN_MARKER, strip_markers


def reassemble(split: SplitBundle, files: Sequence[FileRecord]) -> str:
    """Rebuild bundle text with each segment's code replaced, markers stripped.

    Segment i takes files[i]; segments beyond the file list keep their
    original code.
    """
    parts = [split.head]
    for segment in split.segments:
        if segment.index < len(files):
            code = files[segment.index].final_code
        else:
            code = segment.tagged_code
        parts.append(BEGIN_MARKER)
        parts.append(code)
        parts.append(segment.suffix)
    return strip_markers("".join(parts))


def write_bundle(path: Path, text: str) -> None:
    """Replace the bundle file via a temporary sibling file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    tmp.replace(path)
