"""Scratch directory layout for original and transformed files."""

from __future__ import annotations

import shutil
from pathlib import Path


class ScratchLayout:
    """Scratch root with a src/ tree of originals and a dist/ tree of results."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    @property
    def root(self) -> Path:
        """Return the scratch root."""
        return self._root

    @property
    def src_dir(self) -> Path:
        """Return the tree holding original tagged code."""
        return self._root / "src"

    @property
    def dist_dir(self) -> Path:
        """Return the tree holding transformed code."""
        return self._root / "dist"

    def reset(self) -> None:
        """Recreate an empty scratch root."""
        if self._root.exists():
            shutil.rmtree(self._root)
        self.src_dir.mkdir(parents=True)
        self.dist_dir.mkdir(parents=True)

    def remove(self) -> None:
        """Delete the scratch root if present."""
        if self._root.exists():
            shutil.rmtree(self._root)

    def src_path(self, name: str) -> Path:
        """Return the original-code path for a canonical name."""
        return _contained(self.src_dir, name)

    def dist_path(self, name: str) -> Path:
        """Return the transformed-code path for a canonical name."""
        return _contained(self.dist_dir, name)


def _contained(base: Path, name: str) -> Path:
    parts = [part for part in name.replace("\\", "/").split("/") if part not in ("", ".")]
    if not parts or any(part == ".." for part in parts):
        raise ValueError(f"Scratch name escapes its tree: {name!r}")
    resolved = (base / Path(*parts)).resolve(strict=False)
    if not resolved.is_relative_to(base):
        raise ValueError(f"Scratch name escapes its tree: {name!r}")
    return resolved
