"""Structured JSONL run event log."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class RunEvent:
    """Summary of one pipeline invocation."""

    timestamp: str
    run_id: str
    status: str
    bundle_path: str | None
    selected_count: int
    transformed_count: int
    failed_files: tuple[str, ...]
    batch_count: int
    source_map_path: str | None
    error: str | None


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonlRunLog:
    """Append-only JSONL run log and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: RunEvent) -> None:
        """Append one event as one JSON object per line."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = asdict(event)
        payload["failed_files"] = list(event.failed_files)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, sort_keys=True))
            handle.write("\n")

    def read(
        self,
        since: str | None = None,
        limit: int = 50,
        status: str | None = None,
    ) -> list[dict[str, object]]:
        """Return the newest matching events, oldest first.

        Lines that are not JSON objects are skipped.
        """
        if limit < 1 or not self._path.exists():
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                record = _parse_event(line)
                if record is None:
                    continue
                if since is not None and str(record.get("timestamp", "")) < since:
                    continue
                if status is not None and record.get("status") != status:
                    continue
                recent.append(record)
        return list(recent)


def _parse_event(line: str) -> dict[str, object] | None:
    stripped = line.strip()
    if not stripped:
        return None
    try:
        record = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return record if isinstance(record, dict) else None
