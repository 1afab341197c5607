"""Combined source map over original (untransformed) file sources."""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

from bundle_obfuscator.config import DEFAULT_HEADER_LINES, DEFAULT_SOURCE_MAP_LOCATION
from bundle_obfuscator.sourcemap.vlq import encode_line_mappings

logger = logging.getLogger(__name__)

SOURCE_MAP_VERSION = 3


def count_lines(source: str) -> int:
    """Return the number of lines source spans."""
    return source.count("\n") + 1


def to_base64(document: dict[str, object]) -> str:
    """Encode a map document as base64 JSON."""
    payload = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def from_base64(encoded: str) -> dict[str, object]:
    """Decode base64 JSON back into a map document."""
    document = json.loads(base64.b64decode(encoded).decode("utf-8"))
    if not isinstance(document, dict):
        raise ValueError("Source map payload must be a JSON object.")
    return document


class SourceMapComposer:
    """Accumulate files at increasing line offsets and emit one v3 map.

    Line i of the Nth file maps to generated line
    ``header_lines + (lines of files before N) + i``, column 0.
    """

    def __init__(
        self,
        file_name: str = DEFAULT_SOURCE_MAP_LOCATION.name,
        header_lines: int = DEFAULT_HEADER_LINES,
    ) -> None:
        if header_lines < 0:
            raise ValueError("header_lines must be >= 0")
        self._file_name = file_name
        self._header_lines = header_lines
        self._sources: list[str] = []
        self._contents: list[str] = []
        self._spans: list[tuple[int, int]] = []
        self._line_offset = 0

    @property
    def line_offset(self) -> int:
        """Return lines consumed by files added so far."""
        return self._line_offset

    def add_file(self, name: str, source: str) -> None:
        """Append one original source at the current offset."""
        line_count = count_lines(source)
        self._sources.append(name)
        self._contents.append(source)
        self._spans.append((self._header_lines + self._line_offset, line_count))
        self._line_offset += line_count

    def _mappings(self) -> str:
        if not self._spans:
            return ""
        last_start, last_count = self._spans[-1]
        lines: list[list[tuple[int, int, int, int]]] = [
            [] for _ in range(last_start + last_count)
        ]
        for source_index, (start, line_count) in enumerate(self._spans):
            for original_line in range(line_count):
                lines[start + original_line].append((0, source_index, original_line, 0))
        return encode_line_mappings(lines)

    def finalize(self) -> dict[str, object]:
        """Return the combined map, round-tripped through base64 JSON."""
        document: dict[str, object] = {
            "version": SOURCE_MAP_VERSION,
            "file": self._file_name,
            "sources": list(self._sources),
            "sourcesContent": list(self._contents),
            "names": [],
            "mappings": self._mappings(),
        }
        return from_base64(to_base64(document))

    def write(self, path: Path) -> Path:
        """Finalize and write the map as JSON."""
        document = self.finalize()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        logger.info("Generated source map file located at %s", path)
        return path
