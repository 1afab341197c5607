from __future__ import annotations

from pathlib import Path

import pytest

from bundle_obfuscator.config import (
    DEFAULT_BATCH_SIZE,
    DEV_OVERRIDE_ENV,
    CliOverrides,
    load_effective_config,
)


def _write_config(root: Path, *lines: str) -> None:
    (root / "bundle_obfuscator.toml").write_text("\n".join(lines), encoding="utf-8")


def test_defaults_without_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DEV_OVERRIDE_ENV, raising=False)
    config = load_effective_config(tmp_path)

    assert config.batch.size == DEFAULT_BATCH_SIZE
    assert config.run.run_in_dev is False
    assert config.run.source_map is False
    assert config.run.source_map_header_lines == 2
    assert config.filter.vendor_markers == ("node_modules",)
    assert config.transform.command == ()
    assert config.data_dir == tmp_path.resolve() / ".bundle_obfuscator"
    assert config.scratch_dir == config.data_dir / "tmp"


def test_merge_order_defaults_then_file_then_cli(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv(DEV_OVERRIDE_ENV, raising=False)
    _write_config(
        tmp_path,
        "[run]",
        "source_map = true",
        "log_obfuscated_files = true",
        "",
        "[batch]",
        "size = 4",
        "",
        "[transform]",
        'command = ["obfuscate", "--stdin"]',
        "",
        "[transform.options]",
        "compact = true",
    )

    config = load_effective_config(
        tmp_path,
        overrides=CliOverrides(batch_size=12, source_map=False),
    )

    assert config.batch.size == 12
    assert config.run.source_map is False
    assert config.run.log_obfuscated_files is True
    assert config.transform.command == ("obfuscate", "--stdin")
    assert dict(config.transform.options) == {"compact": True}


def test_relative_source_map_location_resolves_against_project_root(tmp_path: Path) -> None:
    _write_config(tmp_path, "[run]", 'source_map_location = "maps/out.map"')

    config = load_effective_config(tmp_path)

    assert config.run.effective_source_map_location() == tmp_path.resolve() / "maps" / "out.map"


def test_default_source_map_location_is_relative_name(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.run.effective_source_map_location() == Path("index.android.bundle.map")


@pytest.mark.parametrize("raw", ["1", "true", "YES"])
def test_dev_environment_switch_enables_dev_runs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv(DEV_OVERRIDE_ENV, raw)

    assert load_effective_config(tmp_path).run.run_in_dev is True


def test_cli_override_beats_dev_environment_switch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(DEV_OVERRIDE_ENV, "true")

    config = load_effective_config(tmp_path, overrides=CliOverrides(run_in_dev=False))

    assert config.run.run_in_dev is False


def test_data_dir_override_replaces_default(tmp_path: Path) -> None:
    config = load_effective_config(
        tmp_path, overrides=CliOverrides(data_dir=tmp_path / "elsewhere")
    )

    assert config.data_dir == (tmp_path / "elsewhere").resolve()
    assert config.run_log_path == config.data_dir / "runs.jsonl"


def test_public_dict_is_plain_data(tmp_path: Path) -> None:
    snapshot = load_effective_config(tmp_path).to_public_dict()

    assert snapshot["batch"] == {"size": DEFAULT_BATCH_SIZE, "collect_garbage": True}
    assert snapshot["transform"] == {"command": [], "options": {}, "timeout_seconds": None}
