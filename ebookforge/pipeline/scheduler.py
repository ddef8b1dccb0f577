"""Per-source chapter scheduling.

Responsibilities:
- Group chapter plans by source locator in first-seen order.
- Start group leaders eagerly and defer followers until the leader completes.

Followers typically rely on side effects of their leader (a cache entry, a
shared download), so they never run before or alongside it.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.datatypes import Chapter
from ..telemetry.logger import RunLogger
from .barrier import CompletionBarrier
from .params import ProcessingParams
from .registry import ResolvedFilter
from .sequence import ChainExecutor, CompletionCallback, _ChainRun, build_chain


@dataclass(frozen=True, slots=True)
class ChapterPlan:
    """A chapter with its resolved filter chain and execution context."""

    chapter: Chapter
    units: tuple[ResolvedFilter, ...]
    params: ProcessingParams

    def chain(
        self, on_complete: CompletionCallback, run_logger: RunLogger | None = None
    ) -> _ChainRun:
        """Build this chapter's chain with the given terminal callback."""

        return build_chain(
            self.units,
            self.params,
            on_complete,
            label=f"chapter:{self.chapter.id}",
            run_logger=run_logger,
        )


@dataclass(frozen=True, slots=True)
class SourceGroup:
    """Chapters sharing one source locator, in spec order."""

    src: str
    plans: tuple[ChapterPlan, ...]

    @property
    def leader(self) -> ChapterPlan:
        return self.plans[0]

    @property
    def followers(self) -> tuple[ChapterPlan, ...]:
        return self.plans[1:]


class SourceScheduler:
    """Group chapters by source and start their chains."""

    def __init__(self, run_logger: RunLogger | None = None) -> None:
        self._run_logger = run_logger

    @staticmethod
    def group(plans: list[ChapterPlan] | tuple[ChapterPlan, ...]) -> tuple[SourceGroup, ...]:
        """Group plans by `src`, keeping first-seen order across and within groups."""

        grouped: dict[str, list[ChapterPlan]] = {}
        for plan in plans:
            grouped.setdefault(plan.chapter.src, []).append(plan)
        return tuple(SourceGroup(src, tuple(members)) for src, members in grouped.items())

    def start(
        self,
        groups: tuple[SourceGroup, ...],
        executor: ChainExecutor,
        barrier: CompletionBarrier,
    ) -> None:
        """Start every group leader; followers start from their leader's terminal callback."""

        for group in groups:
            if not group.followers:
                executor.start(group.leader.chain(barrier.arrive, self._run_logger))
                continue

            def release_followers(group: SourceGroup = group) -> None:
                barrier.arrive()
                for plan in group.followers:
                    executor.start(plan.chain(barrier.arrive, self._run_logger))

            executor.start(group.leader.chain(release_followers, self._run_logger))
