"""Host command-line inspection: trigger condition and bundle location."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from bundle_obfuscator.config import DEV_OVERRIDE_ENV, RunConfig

logger = logging.getLogger(__name__)

BUNDLE_COMMAND = "bundle"
DEFAULT_BUNDLE_OUTPUT = Path("android/app/src/main/assets/index.android.bundle")


@dataclass(slots=True, frozen=True)
class Invocation:
    """Fields of the host command line relevant to the pipeline."""

    command: str | None
    dev: bool
    bundle_output: Path | None
    sourcemap_output: Path | None


def _build_host_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    parser.add_argument("--bundle-output", default=None)
    parser.add_argument("--sourcemap-output", default=None)
    parser.add_argument("--dev", default=None)
    return parser


def parse_invocation(argv: Sequence[str]) -> Invocation:
    """Extract the command and bundle flags, ignoring unrelated options.

    The command is the first token that is not an option.
    """
    args, remaining = _build_host_parser().parse_known_args(list(argv))
    command = next((token for token in remaining if not token.startswith("-")), None)
    dev = isinstance(args.dev, str) and args.dev.strip().lower() == "true"
    return Invocation(
        command=command,
        dev=dev,
        bundle_output=Path(args.bundle_output) if args.bundle_output else None,
        sourcemap_output=Path(args.sourcemap_output) if args.sourcemap_output else None,
    )


def skip_reason(invocation: Invocation, run: RunConfig) -> str | None:
    """Return why the pipeline must not run, or None when it should run."""
    if invocation.command != BUNDLE_COMMAND:
        return "Not a *bundle* command"
    if invocation.dev and not run.run_in_dev:
        return (
            "Development mode. Override with run.run_in_dev or "
            f"{DEV_OVERRIDE_ENV}=true environment variable"
        )
    return None


def resolve_bundle_path(invocation: Invocation, project_root: Path) -> Path:
    """Return the bundle path, falling back to the default Android location."""
    if invocation.bundle_output is not None:
        return invocation.bundle_output.resolve()
    logger.warning(
        "Could not determine bundle path from --bundle-output, using default %s",
        DEFAULT_BUNDLE_OUTPUT,
    )
    return (project_root / DEFAULT_BUNDLE_OUTPUT).resolve()
