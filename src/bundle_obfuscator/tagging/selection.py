"""Ordered selection of application modules for one bundle run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ModuleRecord:
    """One application module accepted by the module filter."""

    canonical_path: str
    absolute_path: str


class ModuleSelection:
    """Write-then-read accumulator of selected modules in emission order.

    Records are added while the host emits modules; ``seal`` ends the write
    phase and returns the ordered records.
    """

    def __init__(self) -> None:
        self._records: dict[str, ModuleRecord] = {}
        self._sealed = False

    def add(self, record: ModuleRecord) -> bool:
        """Add a record, returning False when its canonical path is claimed elsewhere.

        Re-adding the same module is a no-op that still returns True.
        """
        if self._sealed:
            raise RuntimeError("Module selection is sealed; emission already finished.")
        existing = self._records.get(record.canonical_path)
        if existing is None:
            self._records[record.canonical_path] = record
            return True
        return existing.absolute_path == record.absolute_path

    def seal(self) -> tuple[ModuleRecord, ...]:
        """End the write phase and return records in insertion order."""
        self._sealed = True
        return tuple(self._records.values())

    @property
    def sealed(self) -> bool:
        """Return True once the write phase has ended."""
        return self._sealed

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, canonical_path: object) -> bool:
        return canonical_path in self._records
