"""Build orchestration for ebookforge.

Responsibilities:
- Load and validate the spec file.
- Plan a run: assign chapter ids, resolve every chapter chain and the output
  stage before any chain starts.
- Wire scheduler, executor and completion barrier on one event loop.

Key types:
- `EbookForge`: orchestration facade.
- `BuildPlan`: fully resolved run, ready to start.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from ..config import ForgeConfig
from ..errors import PipelineStageError
from ..io.spec_loader import SpecLoader, resolve_spec_path
from ..io.storage import ArtifactStore
from ..io.workspace import ensure_workspace
from ..models.datatypes import (
    BuildSpec,
    Chapter,
    FilterChain,
    NamedChains,
    RunSummary,
)
from ..telemetry.logger import RunLogger
from .barrier import CompletionBarrier
from .cache import ContentCache
from .params import ProcessingParams
from .registry import FilterRegistry, ResolvedFilter
from .scheduler import ChapterPlan, SourceGroup, SourceScheduler
from .sequence import ChainExecutor, build_chain


@dataclass(frozen=True, slots=True)
class BuildPlan:
    """Everything a run needs, resolved up front."""

    spec: BuildSpec
    chapters: tuple[Chapter, ...]
    groups: tuple[SourceGroup, ...]
    output_units: tuple[ResolvedFilter, ...]
    output_params: ProcessingParams
    cache: ContentCache


class EbookForge:
    """Coordinate spec loading, planning and chain execution for one build."""

    def __init__(self, registry: FilterRegistry, run_logger: RunLogger | None = None) -> None:
        """Bind the run to an explicit filter registry and optional logger."""

        self._registry = registry
        self._run_logger = run_logger

    def load_spec(self, spec_name: str | Path, config: ForgeConfig) -> BuildSpec:
        """Locate and validate a spec file, mapping failures to stage errors."""

        self._log_start("spec")
        try:
            spec_path = resolve_spec_path(spec_name, config.specs_dir)
            spec = SpecLoader.load(spec_path)
        except FileNotFoundError as exc:
            self._log_failure("spec", exc)
            raise PipelineStageError(
                stage="spec",
                detail=str(exc),
                hint="Pass an existing spec path or a file name under `--specs-dir`.",
            ) from exc
        except ValueError as exc:
            self._log_failure("spec", exc)
            raise PipelineStageError(
                stage="spec",
                detail=f"Invalid spec `{spec_name}`: {exc}",
                hint="Fix the spec file and rerun.",
            ) from exc
        self._log_complete("spec", chapters=len(spec.contents))
        return spec

    def plan(self, spec: BuildSpec, config: ForgeConfig, cache: ContentCache) -> BuildPlan:
        """Resolve every chain of the run without starting any of them."""

        self._log_start("plan")
        chapters = tuple(
            Chapter.from_entry(index, entry) for index, entry in enumerate(spec.contents)
        )
        base_params = ProcessingParams(
            spec=spec,
            chapter=None,
            chapters=chapters,
            cache=cache,
            cache_store=ArtifactStore(config.cache_dir),
            output_store=ArtifactStore(config.output_dir),
            config=config,
            decode_entities=config.decode_entities,
            run_logger=self._run_logger,
        )

        plans = []
        for chapter in chapters:
            filter_ids = self._chapter_filter_ids(spec, chapter)
            units = self._registry.resolve(filter_ids, context=f'"{chapter.title}"')
            params = ProcessingParams(
                spec=spec,
                chapter=chapter,
                chapters=chapters,
                cache=cache,
                cache_store=base_params.cache_store,
                output_store=base_params.output_store,
                config=config,
                decode_entities=config.decode_entities,
                run_logger=self._run_logger,
            )
            plans.append(ChapterPlan(chapter, units, params))

        output_units = self._registry.resolve(
            spec.output.identifiers(), context="the output stage"
        )
        groups = SourceScheduler.group(plans)
        self._log_complete("plan", chapters=len(chapters), groups=len(groups))
        return BuildPlan(
            spec=spec,
            chapters=chapters,
            groups=groups,
            output_units=output_units,
            output_params=base_params.for_output_stage(),
            cache=cache,
        )

    def check(self, spec: BuildSpec, config: ForgeConfig) -> BuildPlan:
        """Plan a run against the current cache without touching the filesystem."""

        return self.plan(spec, config, ContentCache.snapshot(config.cache_dir))

    def run(self, spec: BuildSpec, config: ForgeConfig) -> RunSummary:
        """Run the whole build to completion on a fresh event loop."""

        return asyncio.run(self.run_async(spec, config))

    async def run_async(self, spec: BuildSpec, config: ForgeConfig) -> RunSummary:
        """Plan, start every chapter chain, and wait for the output stage."""

        cache = ContentCache.snapshot(config.cache_dir)
        build_plan = self.plan(spec, config, cache)
        ensure_workspace(config)

        executor = ChainExecutor()

        def start_output_stage() -> None:
            self._log_start("output", filters=len(build_plan.output_units))
            executor.start(
                build_chain(
                    build_plan.output_units,
                    build_plan.output_params,
                    lambda: self._log_complete("output"),
                    label="output",
                    run_logger=self._run_logger,
                )
            )

        barrier = CompletionBarrier(
            len(build_plan.chapters), start_output_stage, self._run_logger
        )
        self._log_start("run", chapters=len(build_plan.chapters), cached=len(cache))
        SourceScheduler(self._run_logger).start(build_plan.groups, executor, barrier)

        try:
            await executor.drain()
        except PipelineStageError as exc:
            executor.cancel_pending()
            self._log_failure(exc.stage, exc)
            raise
        except Exception as exc:
            executor.cancel_pending()
            self._log_failure("run", exc)
            raise PipelineStageError(
                stage="run",
                detail=f"{type(exc).__name__}: {exc}",
                hint="A filter failed; see the log above for the chain that stopped.",
            ) from exc

        self._log_complete("run", loaded=barrier.loaded)
        return RunSummary(
            spec_name=spec.name,
            chapter_count=len(build_plan.chapters),
            source_groups=len(build_plan.groups),
            completed_chapters=barrier.loaded,
            output_fired=barrier.released,
            cached_entries=len(cache),
        )

    @staticmethod
    def _chapter_filter_ids(spec: BuildSpec, chapter: Chapter) -> tuple[str, ...]:
        """Return the chain identifiers that apply to `chapter`."""

        if isinstance(spec.filters, FilterChain):
            return spec.filters.identifiers()

        if isinstance(spec.filters, NamedChains):
            if chapter.filters is None:
                raise PipelineStageError(
                    stage="plan",
                    detail=(
                        f'In "{chapter.title}": When a collection of filters is specified, '
                        "each chapter must also specify which filter chain to use."
                    ),
                    hint='Add a "filters" property naming one of the spec\'s chains.',
                )
            chain = spec.filters.chain_for(chapter.filters)
            if chain is None:
                raise PipelineStageError(
                    stage="plan",
                    detail=(
                        f'In "{chapter.title}": Cannot resolve the filter chain '
                        f'"{chapter.filters}".'
                    ),
                    hint=f"Known chains: {', '.join(sorted(spec.filters.chains))}.",
                )
            return chain.identifiers()

        raise PipelineStageError(
            stage="plan",
            detail=f'Unsupported filter chain type "{type(spec.filters).__name__}".',
        )

    def _log_start(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage, **context)

    def _log_complete(self, stage: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage, **context)

    def _log_failure(self, stage: str, exc: BaseException) -> None:
        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage, type(exc).__name__)
