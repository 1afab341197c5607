"""Module filter hook invoked by the host bundler during emission."""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableMapping
from pathlib import Path

from bundle_obfuscator.config import FilterConfig
from bundle_obfuscator.security import has_source_extension, normalize_module_path
from bundle_obfuscator.tagging.selection import ModuleRecord, ModuleSelection
from bundle_obfuscator.tagging.tagger import tag_output_unit

logger = logging.getLogger(__name__)


class ModuleFilter:
    """Observe emitted modules, tagging and selecting application code.

    The hook never drops a module from the bundle; it always returns True.
    """

    def __init__(
        self,
        selection: ModuleSelection,
        project_root: Path,
        config: FilterConfig | None = None,
    ) -> None:
        self._selection = selection
        self._project_root = str(project_root)
        self._config = config or FilterConfig()

    def __call__(self, module: Mapping[str, object]) -> bool:
        path = module.get("path")
        if not isinstance(path, str) or not self._is_candidate(path):
            return True

        canonical_path = normalize_module_path(path, self._project_root)
        if canonical_path is None:
            logger.debug("Module path rejected outside project root: %s", path)
            return True

        record = ModuleRecord(canonical_path=canonical_path, absolute_path=path)
        if not self._selection.add(record):
            logger.warning(
                "Module %s maps to %s which is already selected; left untransformed.",
                path,
                canonical_path,
            )
            return True

        for unit in _output_units(module):
            tag_output_unit(unit, label=canonical_path)
        return True

    def _is_candidate(self, path: str) -> bool:
        if any(marker in path for marker in self._config.vendor_markers):
            return False
        if self._config.require_existing_file and not Path(path).is_file():
            return False
        return has_source_extension(path)


def _output_units(module: Mapping[str, object]) -> list[MutableMapping[str, object]]:
    output = module.get("output")
    if not isinstance(output, list):
        return []
    units: list[MutableMapping[str, object]] = []
    for entry in output:
        if not isinstance(entry, Mapping):
            continue
        data = entry.get("data")
        if isinstance(data, MutableMapping):
            units.append(data)
    return units
