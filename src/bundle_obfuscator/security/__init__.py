"""Path safety primitives for module selection."""

from .paths import (
    CANONICAL_EXTENSION,
    find_project_root,
    has_source_extension,
    normalize_module_path,
)

__all__ = [
    "CANONICAL_EXTENSION",
    "find_project_root",
    "has_source_extension",
    "normalize_module_path",
]
