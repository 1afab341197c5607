"""Transform adapter piping code through an external command."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence

from bundle_obfuscator.transform.base import TransformError, TransformResult


def render_options(options: Mapping[str, object]) -> list[str]:
    """Render options as '--key value' arguments in sorted key order.

    Booleans render as 'true'/'false'; None values are skipped.
    """
    args: list[str] = []
    for key in sorted(options):
        value = options[key]
        if value is None:
            continue
        if isinstance(value, bool):
            rendered = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            rendered = ",".join(str(item) for item in value)
        else:
            rendered = str(value)
        args.extend([f"--{key}", rendered])
    return args


class CommandTransform:
    """Run one command per file, code on stdin and transformed code on stdout."""

    def __init__(self, command: Sequence[str], timeout_seconds: int | None = None) -> None:
        if not command:
            raise ValueError("Transform command must not be empty.")
        self._command = tuple(command)
        self._timeout_seconds = timeout_seconds

    @property
    def command(self) -> tuple[str, ...]:
        """Return the base command without rendered options."""
        return self._command

    def __call__(self, code: str, options: Mapping[str, object]) -> TransformResult:
        cmd = [*self._command, *render_options(options)]
        try:
            completed = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self._timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise TransformError(reason=f"Transform timed out after {exc.timeout}s.") from exc
        except OSError as exc:
            raise TransformError(reason=f"Transform command failed to start: {exc}") from exc
        if completed.returncode != 0:
            detail = completed.stderr.strip().splitlines()
            message = detail[-1] if detail else "no stderr output"
            raise TransformError(
                reason=f"Transform exited with status {completed.returncode}: {message}"
            )
        return TransformResult(obfuscated_code=completed.stdout)
