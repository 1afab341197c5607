"""Async text file helpers preserving line terminators."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol


class ReadTextFn(Protocol):
    """Async text reader signature used by the batch processor."""

    async def __call__(self, path: Path) -> str:
        """Return the full text of one file."""


class WriteTextFn(Protocol):
    """Async text writer signature used by the batch processor."""

    async def __call__(self, path: Path, text: str) -> None:
        """Write the full text of one file, creating parent directories."""


def read_text(path: Path) -> str:
    """Read UTF-8 text without newline translation."""
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_text(path: Path, text: str) -> None:
    """Write UTF-8 text without newline translation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)


async def read_text_async(path: Path) -> str:
    return await asyncio.to_thread(read_text, path)


async def write_text_async(path: Path, text: str) -> None:
    await asyncio.to_thread(write_text, path, text)
