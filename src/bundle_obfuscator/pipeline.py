"""Bundle obfuscation pipeline: collect during emission, then process."""

from __future__ import annotations

import asyncio
import gc
import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from bundle_obfuscator.bundle import (
    FileRecord,
    pair_segments,
    reassemble,
    selection_from_bundle,
    split_bundle,
    write_bundle,
)
from bundle_obfuscator.config import (
    CliOverrides,
    ObfuscatorConfig,
    TransformConfig,
    load_effective_config,
)
from bundle_obfuscator.invocation import parse_invocation, resolve_bundle_path, skip_reason
from bundle_obfuscator.logging import JsonlRunLog, RunEvent, utc_timestamp
from bundle_obfuscator.security import find_project_root
from bundle_obfuscator.sourcemap import SourceMapComposer
from bundle_obfuscator.tagging import ModuleFilter, ModuleRecord, ModuleSelection
from bundle_obfuscator.transform import (
    BatchProcessor,
    BatchReport,
    CommandTransform,
    ScratchLayout,
    TransformFn,
)
from bundle_obfuscator.transform.files import (
    ReadTextFn,
    WriteTextFn,
    read_text_async,
    write_text_async,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PipelineResult:
    """Outcome of one pipeline run."""

    status: str
    bundle_path: Path | None = None
    selected_count: int = 0
    report: BatchReport | None = None
    source_map_path: Path | None = None


def build_transform(config: TransformConfig) -> TransformFn:
    """Build the configured external command transform."""
    if not config.command:
        raise ValueError("Config field 'transform.command' must name a transform command.")
    return CommandTransform(config.command, timeout_seconds=config.timeout_seconds)


async def obfuscate_bundle(
    bundle_path: Path,
    selection: Sequence[ModuleRecord] | None,
    transform: TransformFn,
    config: ObfuscatorConfig,
    *,
    scratch: ScratchLayout | None = None,
    read_text: ReadTextFn = read_text_async,
    write_text: WriteTextFn = write_text_async,
) -> PipelineResult:
    """Replace selected modules' code inside the bundle at bundle_path.

    With ``selection=None`` the selection is rebuilt from the file labels
    embedded in the bundle. An empty selection leaves the bundle untouched.
    """
    if selection is not None and not selection:
        return PipelineResult(status="empty", bundle_path=bundle_path)

    split = split_bundle(await read_text(bundle_path))
    records = selection_from_bundle(split) if selection is None else tuple(selection)
    if not records:
        return PipelineResult(status="empty", bundle_path=bundle_path)
    if len(split.segments) != len(records):
        logger.warning(
            "Bundle has %d tagged segments but %d modules were selected; pairing the first %d.",
            len(split.segments),
            len(records),
            min(len(split.segments), len(records)),
        )
    pairs = pair_segments(split.segments, records)
    files = [
        FileRecord(name=record.canonical_path, original_code=segment.tagged_code)
        for segment, record in pairs
    ]

    scratch = scratch or ScratchLayout(config.scratch_dir)
    sources = [(scratch.src_path(record.name), record.original_code) for record in files]
    scratch.reset()
    await asyncio.gather(*(write_text(path, code) for path, code in sources))

    composer: SourceMapComposer | None = None
    if config.run.source_map:
        composer = SourceMapComposer(
            file_name=config.run.effective_source_map_location().name,
            header_lines=config.run.source_map_header_lines,
        )
    processor = BatchProcessor(
        transform,
        scratch,
        batch_size=config.batch.size,
        source_sink=composer,
        reclaim=gc.collect if config.batch.collect_garbage else None,
        read_text=read_text,
        write_text=write_text,
    )
    report = await processor.run(files, config.transform.options)

    await asyncio.to_thread(write_bundle, bundle_path, reassemble(split, files))

    source_map_path: Path | None = None
    if composer is not None:
        logger.info("Generating source map")
        source_map_path = composer.write(
            config.project_root / config.run.effective_source_map_location()
        )
    return PipelineResult(
        status="completed",
        bundle_path=bundle_path,
        selected_count=len(records),
        report=report,
        source_map_path=source_map_path,
    )


class BundlePipeline:
    """One bundle run: a module filter for emission and a one-shot finalize.

    The host calls ``module_filter`` for every emitted module, then awaits
    ``finalize`` once emission has completed.
    """

    def __init__(
        self,
        config: ObfuscatorConfig,
        bundle_path: Path,
        transform: TransformFn,
        *,
        run_log: JsonlRunLog | None = None,
    ) -> None:
        self._config = config
        self._bundle_path = bundle_path
        self._transform = transform
        self._run_log = run_log
        self._selection = ModuleSelection()
        self._filter = ModuleFilter(self._selection, config.project_root, config.filter)
        self._finalized = False

    @property
    def config(self) -> ObfuscatorConfig:
        """Return the effective configuration."""
        return self._config

    @property
    def bundle_path(self) -> Path:
        """Return the bundle path this run rewrites."""
        return self._bundle_path

    @property
    def selection(self) -> ModuleSelection:
        """Return the module selection accumulated so far."""
        return self._selection

    def module_filter(self, module: Mapping[str, object]) -> bool:
        """Tag application modules; every module is kept in the bundle."""
        return self._filter(module)

    async def finalize(self) -> PipelineResult:
        """Process the bundle once emission is complete."""
        records = self._begin()
        if not records:
            logger.info("No files to obfuscate, skipping obfuscation")
            result = PipelineResult(status="empty", bundle_path=self._bundle_path)
            self._record(result)
            return result
        return await self._execute(records)

    async def finalize_from_bundle(self) -> PipelineResult:
        """Process an already tagged bundle, taking the selection from its labels."""
        self._begin()
        return await self._execute(None)

    def _begin(self) -> tuple[ModuleRecord, ...]:
        if self._finalized:
            raise RuntimeError("Pipeline already finalized.")
        self._finalized = True
        return self._selection.seal()

    async def _execute(self, records: Sequence[ModuleRecord] | None) -> PipelineResult:
        logger.info("Obfuscating code in %s", self._bundle_path)
        scratch = ScratchLayout(self._config.scratch_dir)
        try:
            result = await obfuscate_bundle(
                self._bundle_path,
                records,
                self._transform,
                self._config,
                scratch=scratch,
            )
        except Exception as exc:
            self._record(
                PipelineResult(status="failed", bundle_path=self._bundle_path),
                error=str(exc),
            )
            raise
        if result.status == "empty":
            logger.info("No tagged modules found in %s", self._bundle_path)
        elif result.report is not None and result.report.failed:
            logger.warning(
                "%d of %d files left untransformed",
                len(result.report.failed),
                result.report.file_count,
            )
        if not self._config.run.log_obfuscated_files:
            scratch.remove()
        self._record(result)
        return result

    def _record(self, result: PipelineResult, error: str | None = None) -> None:
        if self._run_log is None:
            return
        report = result.report
        self._run_log.append(
            RunEvent(
                timestamp=utc_timestamp(),
                run_id=uuid.uuid4().hex[:12],
                status=result.status,
                bundle_path=str(result.bundle_path) if result.bundle_path else None,
                selected_count=result.selected_count,
                transformed_count=report.transformed_count if report else 0,
                failed_files=report.failed if report else (),
                batch_count=report.batch_count if report else 0,
                source_map_path=str(result.source_map_path) if result.source_map_path else None,
                error=error,
            )
        )


def create_pipeline(
    argv: Sequence[str],
    project_root: Path | None = None,
    transform: TransformFn | None = None,
    overrides: CliOverrides | None = None,
) -> BundlePipeline | None:
    """Build a pipeline for a host command line, or None when it must not run.

    A skipped run performs no I/O beyond reading configuration.
    """
    root = find_project_root(project_root or Path.cwd())
    config = load_effective_config(root, overrides)
    logger.debug("Effective config: %s", config.to_public_dict())
    invocation = parse_invocation(argv)
    reason = skip_reason(invocation, config.run)
    if reason is not None:
        logger.warning("Obfuscation SKIPPED [%s]", reason)
        return None
    if config.run.source_map_location is None and invocation.sourcemap_output is not None:
        config = replace(
            config,
            run=replace(config.run, source_map_location=invocation.sourcemap_output.resolve()),
        )
    return BundlePipeline(
        config,
        resolve_bundle_path(invocation, root),
        transform or build_transform(config.transform),
        run_log=JsonlRunLog(config.run_log_path),
    )
