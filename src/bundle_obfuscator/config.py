"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = "bundle_obfuscator.toml"
DATA_DIR_NAME = ".bundle_obfuscator"
DEV_OVERRIDE_ENV = "BUNDLE_OBFUSCATOR_DEV"

DEFAULT_BATCH_SIZE = 10
MAX_BATCH_SIZE_CAP = 256
DEFAULT_HEADER_LINES = 2
DEFAULT_SOURCE_MAP_LOCATION = Path("index.android.bundle.map")
DEFAULT_VENDOR_MARKERS = ("node_modules",)


@dataclass(slots=True, frozen=True)
class RunConfig:
    """Run switches recognized by the pipeline."""

    run_in_dev: bool = False
    source_map: bool = False
    source_map_location: Path | None = None
    source_map_header_lines: int = DEFAULT_HEADER_LINES
    log_obfuscated_files: bool = False

    def effective_source_map_location(self) -> Path:
        """Return the configured map path or the default one."""
        return self.source_map_location or DEFAULT_SOURCE_MAP_LOCATION


@dataclass(slots=True, frozen=True)
class BatchConfig:
    """Batch sizing and memory reclamation settings."""

    size: int = DEFAULT_BATCH_SIZE
    collect_garbage: bool = True


@dataclass(slots=True, frozen=True)
class FilterConfig:
    """Module filter settings."""

    vendor_markers: tuple[str, ...] = DEFAULT_VENDOR_MARKERS
    require_existing_file: bool = True


@dataclass(slots=True, frozen=True)
class TransformConfig:
    """External transform command and its options."""

    command: tuple[str, ...] = ()
    options: Mapping[str, object] = field(default_factory=dict)
    timeout_seconds: int | None = None


@dataclass(slots=True, frozen=True)
class ObfuscatorConfig:
    """Fully merged pipeline configuration."""

    project_root: Path
    data_dir: Path
    run: RunConfig
    batch: BatchConfig
    filter: FilterConfig
    transform: TransformConfig

    @property
    def scratch_dir(self) -> Path:
        """Return the scratch root holding src/ and dist/ trees."""
        return self.data_dir / "tmp"

    @property
    def run_log_path(self) -> Path:
        """Return the JSONL run event log path."""
        return self.data_dir / "runs.jsonl"

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "run": {
                "run_in_dev": self.run.run_in_dev,
                "source_map": self.run.source_map,
                "source_map_location": str(self.run.effective_source_map_location()),
                "source_map_header_lines": self.run.source_map_header_lines,
                "log_obfuscated_files": self.run.log_obfuscated_files,
            },
            "batch": {
                "size": self.batch.size,
                "collect_garbage": self.batch.collect_garbage,
            },
            "filter": {
                "vendor_markers": list(self.filter.vendor_markers),
                "require_existing_file": self.filter.require_existing_file,
            },
            "transform": {
                "command": list(self.transform.command),
                "options": dict(self.transform.options),
                "timeout_seconds": self.transform.timeout_seconds,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    run_in_dev: bool | None = None
    source_map: bool | None = None
    source_map_location: Path | None = None
    log_obfuscated_files: bool | None = None
    batch_size: int | None = None
    transform_command: tuple[str, ...] | None = None


def default_config(project_root: Path) -> ObfuscatorConfig:
    """Build default config for a given project root."""
    resolved_root = project_root.resolve()
    return ObfuscatorConfig(
        project_root=resolved_root,
        data_dir=resolved_root / DATA_DIR_NAME,
        run=RunConfig(),
        batch=BatchConfig(),
        filter=FilterConfig(),
        transform=TransformConfig(),
    )


def load_project_config_file(project_root: Path) -> dict[str, object]:
    """Load optional bundle_obfuscator.toml from the project root."""
    config_path = project_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: Mapping[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _tuple_of_strings(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{name}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{name}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_path(value: object, name: str, base: Path, default: Path | None) -> Path | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string path.")
    path = Path(value)
    return path if path.is_absolute() else base / path


def merge_config(
    base: ObfuscatorConfig, payload: Mapping[str, object], overrides: CliOverrides
) -> ObfuscatorConfig:
    """Merge defaults, project config, then CLI/startup overrides."""
    run_payload = _get_table(payload, "run")
    batch_payload = _get_table(payload, "batch")
    filter_payload = _get_table(payload, "filter")
    transform_payload = _get_table(payload, "transform")

    run = RunConfig(
        run_in_dev=_optional_bool(
            run_payload.get("run_in_dev"), "run.run_in_dev", base.run.run_in_dev
        ),
        source_map=_optional_bool(
            run_payload.get("source_map"), "run.source_map", base.run.source_map
        ),
        source_map_location=_optional_path(
            run_payload.get("source_map_location"),
            "run.source_map_location",
            base.project_root,
            base.run.source_map_location,
        ),
        source_map_header_lines=_optional_non_negative_int(
            run_payload.get("source_map_header_lines"),
            "run.source_map_header_lines",
            base.run.source_map_header_lines,
        ),
        log_obfuscated_files=_optional_bool(
            run_payload.get("log_obfuscated_files"),
            "run.log_obfuscated_files",
            base.run.log_obfuscated_files,
        ),
    )

    batch = BatchConfig(
        size=_optional_positive_int_with_cap(
            batch_payload.get("size"), "batch.size", base.batch.size, MAX_BATCH_SIZE_CAP
        ),
        collect_garbage=_optional_bool(
            batch_payload.get("collect_garbage"),
            "batch.collect_garbage",
            base.batch.collect_garbage,
        ),
    )

    vendor_markers = base.filter.vendor_markers
    if "vendor_markers" in filter_payload:
        vendor_markers = _tuple_of_strings(
            filter_payload["vendor_markers"], "filter.vendor_markers"
        )
    filter_config = FilterConfig(
        vendor_markers=vendor_markers,
        require_existing_file=_optional_bool(
            filter_payload.get("require_existing_file"),
            "filter.require_existing_file",
            base.filter.require_existing_file,
        ),
    )

    command = base.transform.command
    if "command" in transform_payload:
        command = _tuple_of_strings(transform_payload["command"], "transform.command")
    options = dict(base.transform.options)
    if "options" in transform_payload:
        options.update(_get_table(transform_payload, "options"))
    timeout_seconds = base.transform.timeout_seconds
    if "timeout_seconds" in transform_payload:
        timeout_seconds = _optional_positive_int_with_cap(
            transform_payload["timeout_seconds"], "transform.timeout_seconds", 0, None
        )
    transform = TransformConfig(command=command, options=options, timeout_seconds=timeout_seconds)

    merged = ObfuscatorConfig(
        project_root=base.project_root,
        data_dir=base.data_dir,
        run=run,
        batch=batch,
        filter=filter_config,
        transform=transform,
    )
    return apply_cli_overrides(apply_env_overrides(merged, os.environ), overrides)


def apply_env_overrides(
    config: ObfuscatorConfig, environ: Mapping[str, str]
) -> ObfuscatorConfig:
    """Apply environment switches above the project file."""
    raw = environ.get(DEV_OVERRIDE_ENV, "").strip().lower()
    if raw not in {"1", "true", "yes"}:
        return config
    run = RunConfig(
        run_in_dev=True,
        source_map=config.run.source_map,
        source_map_location=config.run.source_map_location,
        source_map_header_lines=config.run.source_map_header_lines,
        log_obfuscated_files=config.run.log_obfuscated_files,
    )
    return ObfuscatorConfig(
        project_root=config.project_root,
        data_dir=config.data_dir,
        run=run,
        batch=config.batch,
        filter=config.filter,
        transform=config.transform,
    )


def apply_cli_overrides(config: ObfuscatorConfig, overrides: CliOverrides) -> ObfuscatorConfig:
    """Apply startup overrides at highest precedence."""
    run = RunConfig(
        run_in_dev=(
            overrides.run_in_dev if overrides.run_in_dev is not None else config.run.run_in_dev
        ),
        source_map=(
            overrides.source_map if overrides.source_map is not None else config.run.source_map
        ),
        source_map_location=overrides.source_map_location or config.run.source_map_location,
        source_map_header_lines=config.run.source_map_header_lines,
        log_obfuscated_files=(
            overrides.log_obfuscated_files
            if overrides.log_obfuscated_files is not None
            else config.run.log_obfuscated_files
        ),
    )
    batch = BatchConfig(
        size=_optional_positive_int_with_cap(
            overrides.batch_size, "overrides.batch_size", config.batch.size, MAX_BATCH_SIZE_CAP
        ),
        collect_garbage=config.batch.collect_garbage,
    )
    transform = config.transform
    if overrides.transform_command:
        transform = TransformConfig(
            command=overrides.transform_command,
            options=config.transform.options,
            timeout_seconds=config.transform.timeout_seconds,
        )
    data_dir = overrides.data_dir or config.data_dir
    return ObfuscatorConfig(
        project_root=config.project_root,
        data_dir=data_dir.resolve(),
        run=run,
        batch=batch,
        filter=config.filter,
        transform=transform,
    )


def load_effective_config(
    project_root: Path, overrides: CliOverrides | None = None
) -> ObfuscatorConfig:
    """Load effective config using merge order defaults -> file -> env -> overrides."""
    resolved_root = project_root.resolve()
    base = default_config(resolved_root)
    payload = load_project_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_non_negative_int(value: object, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Config field '{name}' must be a non-negative integer.")
    return value


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
