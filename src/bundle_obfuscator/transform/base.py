"""Transform function contract consumed by the batch processor."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class TransformResult:
    """Output of one transform call."""

    obfuscated_code: str


class TransformError(Exception):
    """Raised when the transform rejects one file."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class TransformFn(Protocol):
    """Synchronous source-to-source transform signature."""

    def __call__(self, code: str, options: Mapping[str, object]) -> TransformResult:
        """Return transformed code for one file."""


def identity_transform(code: str, options: Mapping[str, object]) -> TransformResult:
    """Return code unchanged."""
    return TransformResult(obfuscated_code=code)
