"""Bounded batch execution of the transform over selected files."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from bundle_obfuscator.bundle.models import FileRecord
from bundle_obfuscator.config import DEFAULT_BATCH_SIZE
from bundle_obfuscator.transform.base import TransformFn
from bundle_obfuscator.transform.files import (
    ReadTextFn,
    WriteTextFn,
    read_text_async,
    write_text_async,
)
from bundle_obfuscator.transform.scratch import ScratchLayout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceSink(Protocol):
    """Receiver of original file sources in file order."""

    def add_file(self, name: str, source: str) -> None:
        """Append one original source."""


@dataclass(slots=True, frozen=True)
class BatchReport:
    """Counters for one batch processor run."""

    batch_count: int
    file_count: int
    transformed_count: int
    failed: tuple[str, ...]


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive slices of at most size entries."""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


class BatchProcessor:
    """Transform files batch by batch, concurrently within one batch.

    Reads and writes within a batch overlap; the transform itself runs on
    the event loop one file at a time. At most ``batch_size`` transformed
    buffers are in flight at once. A
    transform failure leaves that file untransformed and never affects its
    siblings. I/O failures are re-raised once the batch has settled.
    """

    def __init__(
        self,
        transform: TransformFn,
        scratch: ScratchLayout,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        source_sink: SourceSink | None = None,
        reclaim: Callable[[], object] | None = None,
        read_text: ReadTextFn = read_text_async,
        write_text: WriteTextFn = write_text_async,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch size must be >= 1")
        self._transform = transform
        self._scratch = scratch
        self._batch_size = batch_size
        self._source_sink = source_sink
        self._reclaim = reclaim
        self._read_text = read_text
        self._write_text = write_text

    async def run(self, files: Sequence[FileRecord], options: Mapping[str, object]) -> BatchReport:
        """Populate transformed_code on every file the transform accepts."""
        batches = partition(files, self._batch_size)
        failed: list[str] = []
        for batch_index, batch in enumerate(batches):
            outcomes = await asyncio.gather(
                *(self._process_file(record, options) for record in batch),
                return_exceptions=True,
            )
            errors = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
            if errors:
                raise errors[0]

            batch_failed = [record.name for record in batch if record.transformed_code is None]
            failed.extend(batch_failed)
            if self._source_sink is not None:
                for record in batch:
                    self._source_sink.add_file(record.name, record.original_code)
            logger.info(
                "Batch %d/%d done: %d files, %d failed",
                batch_index + 1,
                len(batches),
                len(batch),
                len(batch_failed),
            )
            if self._reclaim is not None:
                self._reclaim()

        return BatchReport(
            batch_count=len(batches),
            file_count=len(files),
            transformed_count=len(files) - len(failed),
            failed=tuple(failed),
        )

    async def _process_file(self, record: FileRecord, options: Mapping[str, object]) -> None:
        code = await self._read_text(self._scratch.src_path(record.name))
        try:
            result = self._transform(code, options)
        except Exception as exc:
            logger.warning("Transform failed for %s, keeping original code: %s", record.name, exc)
            output = code
        else:
            record.transformed_code = result.obfuscated_code
            output = result.obfuscated_code
        await self._write_text(self._scratch.dist_path(record.name), output)
