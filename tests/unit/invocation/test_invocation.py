from __future__ import annotations

import logging
from pathlib import Path

import pytest

from bundle_obfuscator.config import RunConfig
from bundle_obfuscator.invocation import (
    DEFAULT_BUNDLE_OUTPUT,
    parse_invocation,
    resolve_bundle_path,
    skip_reason,
)


def test_bundle_command_with_outputs_is_parsed() -> None:
    invocation = parse_invocation(
        [
            "bundle",
            "--platform",
            "android",
            "--dev",
            "false",
            "--bundle-output",
            "out/index.android.bundle",
            "--sourcemap-output",
            "out/index.android.bundle.map",
        ]
    )

    assert invocation.command == "bundle"
    assert invocation.dev is False
    assert invocation.bundle_output == Path("out/index.android.bundle")
    assert invocation.sourcemap_output == Path("out/index.android.bundle.map")


def test_command_is_first_non_option_token() -> None:
    assert parse_invocation(["--reset-cache", "start"]).command == "start"
    assert parse_invocation([]).command is None


@pytest.mark.parametrize(("raw", "expected"), [("true", True), ("TRUE", True), ("false", False)])
def test_dev_flag_value(raw: str, expected: bool) -> None:
    assert parse_invocation(["bundle", "--dev", raw]).dev is expected


def test_non_bundle_command_is_skipped() -> None:
    reason = skip_reason(parse_invocation(["start"]), RunConfig())

    assert reason == "Not a *bundle* command"


def test_dev_bundle_is_skipped_unless_overridden() -> None:
    invocation = parse_invocation(["bundle", "--dev", "true"])

    reason = skip_reason(invocation, RunConfig())
    assert reason is not None
    assert reason.startswith("Development mode")
    assert skip_reason(invocation, RunConfig(run_in_dev=True)) is None


def test_release_bundle_runs() -> None:
    assert skip_reason(parse_invocation(["bundle", "--dev", "false"]), RunConfig()) is None


def test_bundle_output_is_used_when_given(tmp_path: Path) -> None:
    target = tmp_path / "out.bundle"
    invocation = parse_invocation(["bundle", "--bundle-output", str(target)])

    assert resolve_bundle_path(invocation, tmp_path) == target.resolve()


def test_missing_bundle_output_falls_back_with_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="bundle_obfuscator.invocation"):
        path = resolve_bundle_path(parse_invocation(["bundle"]), tmp_path)

    assert path == (tmp_path / DEFAULT_BUNDLE_OUTPUT).resolve()
    assert "Could not determine bundle path" in caplog.text
