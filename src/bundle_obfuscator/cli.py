"""Command-line stage running the pipeline over an already tagged bundle."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import shlex
import sys
from pathlib import Path

from bundle_obfuscator.bundle import SegmentMismatchError
from bundle_obfuscator.config import CliOverrides, load_effective_config
from bundle_obfuscator.logging import JsonlRunLog
from bundle_obfuscator.pipeline import create_pipeline
from bundle_obfuscator.security import find_project_root

logger = logging.getLogger("bundle_obfuscator")

DEBUG_ENV = "BUNDLE_OBFUSCATOR_DEBUG"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for pipeline options.

    Unrecognized arguments are treated as the host bundler command line.
    """
    parser = argparse.ArgumentParser(
        prog="bundle-obfuscator",
        allow_abbrev=False,
        description="Transform application modules inside a tagged bundle.",
        epilog="Example: bundle-obfuscator bundle --bundle-output out/index.android.bundle",
    )
    parser.add_argument("--project-root", required=False, default=None)
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--transform-command", required=False, default=None)
    parser.add_argument("--batch-size", type=int, required=False, default=None)
    parser.add_argument("--source-map", choices=("true", "false"), required=False, default=None)
    parser.add_argument("--source-map-location", required=False, default=None)
    parser.add_argument("--run-in-dev", choices=("true", "false"), required=False, default=None)
    parser.add_argument(
        "--log-obfuscated-files",
        action="store_true",
        help="Keep the scratch directory for inspection.",
    )
    parser.add_argument(
        "--show-runs",
        type=int,
        required=False,
        default=None,
        metavar="N",
        help="Print the last N recorded runs as JSON lines and exit.",
    )
    parser.add_argument(
        "--runs-status",
        choices=("completed", "empty", "failed"),
        required=False,
        default=None,
    )
    parser.add_argument("--verbose", action="store_true")
    return parser


def configure_logging(verbose: bool) -> None:
    """Configure process-wide logging for CLI runs."""
    debug = verbose or os.getenv(DEBUG_ENV, "").strip().lower() in {"1", "true", "yes"}
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _optional_bool(raw: str | None) -> bool | None:
    if raw is None:
        return None
    return raw == "true"


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed options into config overrides."""
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        run_in_dev=_optional_bool(args.run_in_dev),
        source_map=_optional_bool(args.source_map),
        source_map_location=(
            Path(args.source_map_location).resolve()
            if args.source_map_location is not None
            else None
        ),
        log_obfuscated_files=True if args.log_obfuscated_files else None,
        batch_size=args.batch_size,
        transform_command=(
            tuple(shlex.split(args.transform_command))
            if args.transform_command is not None
            else None
        ),
    )


def show_runs(args: argparse.Namespace, project_root: Path | None) -> int:
    """Print recorded run events, newest last."""
    try:
        config = load_effective_config(
            find_project_root(project_root or Path.cwd()), overrides_from_args(args)
        )
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    events = JsonlRunLog(config.run_log_path).read(limit=args.show_runs, status=args.runs_status)
    for event in events:
        sys.stdout.write(json.dumps(event, sort_keys=True) + "\n")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the bundle obfuscator process."""
    parser = build_arg_parser()
    args, host_argv = parser.parse_known_args(argv)
    configure_logging(args.verbose)

    project_root = Path(args.project_root) if args.project_root is not None else None
    if args.show_runs is not None:
        return show_runs(args, project_root)
    try:
        pipeline = create_pipeline(
            host_argv,
            project_root=project_root,
            overrides=overrides_from_args(args),
        )
    except ValueError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR
    if pipeline is None:
        return EXIT_OK

    try:
        result = asyncio.run(pipeline.finalize_from_bundle())
    except (OSError, ValueError, SegmentMismatchError) as exc:
        logger.error("Obfuscation failed: %s", exc)
        return EXIT_FAILURE

    if result.report is not None:
        logger.info(
            "Transformed %d of %d files in %d batches",
            result.report.transformed_count,
            result.report.file_count,
            result.report.batch_count,
        )
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
