"""Typed models for split bundles and per-file transform state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class BundleSegment:
    """Bundle text from one BEGIN marker up to the next one.

    ``label`` is the canonical path carried by the segment's file label, if
    any. ``tagged_code`` is the application code between the label and the
    first END marker. ``suffix`` starts at that END marker and runs to the
    next boundary.
    """

    index: int
    label: str | None
    tagged_code: str
    suffix: str


@dataclass(slots=True, frozen=True)
class SplitBundle:
    """Bootstrap head plus ordered segments of one bundle."""

    head: str
    segments: tuple[BundleSegment, ...]


@dataclass(slots=True)
class FileRecord:
    """Original code of one selected module and its transformed version."""

    name: str
    original_code: str
    transformed_code: str | None = None

    @property
    def final_code(self) -> str:
        """Return transformed code, falling back to the original."""
        if self.transformed_code is None:
            return self.original_code
        return self.transformed_code


class SegmentMismatchError(Exception):
    """Raised when a segment label disagrees with the selection order."""

    def __init__(self, index: int, expected: str, found: str) -> None:
        super().__init__(
            f"Segment {index} is labelled '{found}' "
            f"but selection entry {index} is '{expected}'."
        )
        self.index = index
        self.expected = expected
        self.found = found
