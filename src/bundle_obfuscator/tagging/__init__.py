"""Module tagging and selection during bundle emission."""

from .filter import ModuleFilter
from .selection import ModuleRecord, ModuleSelection
from .tagger import tag_module_code, tag_output_unit

__all__ = [
    "ModuleFilter",
    "ModuleRecord",
    "ModuleSelection",
    "tag_module_code",
    "tag_output_unit",
]
