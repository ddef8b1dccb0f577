"""ebookforge build engine.

This package contains the filter registry, content cache snapshot, per-source
scheduler, chain executor, completion barrier, and the orchestration facade
that ties them together for one build.
"""

from .barrier import CompletionBarrier
from .cache import ContentCache
from .orchestrator import BuildPlan, EbookForge
from .params import ProcessingParams
from .registry import FilterRegistry, ResolvedFilter
from .scheduler import ChapterPlan, SourceGroup, SourceScheduler
from .sequence import ChainExecutor, ChainState, FilterSequence, SingleFilterRun, build_chain

__all__ = [
    "BuildPlan",
    "ChainExecutor",
    "ChainState",
    "ChapterPlan",
    "CompletionBarrier",
    "ContentCache",
    "EbookForge",
    "FilterRegistry",
    "FilterSequence",
    "ProcessingParams",
    "ResolvedFilter",
    "SingleFilterRun",
    "SourceGroup",
    "SourceScheduler",
    "build_chain",
]
