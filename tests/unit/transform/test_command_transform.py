from __future__ import annotations

import sys
from pathlib import Path

import pytest

from bundle_obfuscator.transform import CommandTransform, TransformError, render_options

UPPERCASE_SCRIPT = "import sys; sys.stdout.write(sys.stdin.read().upper())"
ECHO_ARGS_SCRIPT = "import sys; sys.stdin.read(); sys.stdout.write(' '.join(sys.argv[1:]))"


def test_code_is_piped_through_command() -> None:
    transform = CommandTransform([sys.executable, "-c", UPPERCASE_SCRIPT])

    assert transform("var a = 1;", {}).obfuscated_code == "VAR A = 1;"


def test_options_are_appended_as_arguments() -> None:
    transform = CommandTransform([sys.executable, "-c", ECHO_ARGS_SCRIPT])

    result = transform("x", {"compact": True, "seed": 7})

    assert result.obfuscated_code == "--compact true --seed 7"


def test_nonzero_exit_raises_transform_error() -> None:
    script = "import sys; sys.stderr.write('boom\\n'); sys.exit(3)"
    transform = CommandTransform([sys.executable, "-c", script])

    with pytest.raises(TransformError, match="status 3: boom"):
        transform("x", {})


def test_missing_executable_raises_transform_error(tmp_path: Path) -> None:
    transform = CommandTransform([str(tmp_path / "no-such-binary")])

    with pytest.raises(TransformError, match="failed to start"):
        transform("x", {})


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        CommandTransform([])


def test_render_options_sorts_keys_and_formats_values() -> None:
    options = {
        "stringArray": False,
        "compact": True,
        "reservedNames": ["^foo", "^bar"],
        "seed": None,
        "threshold": 0.75,
    }

    assert render_options(options) == [
        "--compact",
        "true",
        "--reservedNames",
        "^foo,^bar",
        "--stringArray",
        "false",
        "--threshold",
        "0.75",
    ]
