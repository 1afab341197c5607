"""Module path normalization at the project-root trust boundary."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

SOURCE_EXTENSION_PATTERN: Final[re.Pattern[str]] = re.compile(r"\.(?:js|jsx|ts|tsx|mjs|cjs)$")
CANONICAL_EXTENSION: Final[str] = ".js"
SOURCE_DIR_MARKER: Final[str] = "/src/"
PROJECT_MANIFEST: Final[str] = "package.json"


def _strip_root(absolute_path: str, project_root: str) -> str | None:
    """Return the path relative to project_root, or via the src/ fallback.

    A sibling directory sharing the root's name prefix is not under the root.
    """
    for separator in ("/", "\\"):
        prefix = project_root if project_root.endswith(separator) else project_root + separator
        if absolute_path.startswith(prefix):
            return absolute_path[len(prefix) :]
    src_index = absolute_path.find(SOURCE_DIR_MARKER)
    if src_index == -1:
        return None
    return absolute_path[src_index + 1 :]


def _escapes_root(relative: str) -> bool:
    """Return True when a segment split on either separator is a parent reference."""
    return any(segment == ".." for segment in re.split(r"[\\/]", relative))


def normalize_module_path(absolute_path: object, project_root: object) -> str | None:
    """Return a project-relative canonical path, or None when it is rejected.

    Examples:
        /proj/App/index.ts, /proj -> App/index.js
        /proj/../secret.js, /proj -> None
    """
    if not isinstance(absolute_path, str) or not absolute_path.strip():
        return None
    if not isinstance(project_root, str) or not project_root.strip():
        return None

    relative = _strip_root(absolute_path, project_root)
    if not relative:
        return None
    if _escapes_root(relative):
        return None

    canonical = SOURCE_EXTENSION_PATTERN.sub(CANONICAL_EXTENSION, relative)
    if canonical.startswith("/"):
        canonical = canonical[1:]
    return canonical or None


def has_source_extension(path: str) -> bool:
    """Return True when path ends with a transformable source extension."""
    return SOURCE_EXTENSION_PATTERN.search(path) is not None


def find_project_root(start: Path) -> Path:
    """Walk up from start to the nearest directory holding package.json."""
    resolved = start.resolve()
    for candidate in (resolved, *resolved.parents):
        if (candidate / PROJECT_MANIFEST).is_file():
            return candidate
    return resolved
