"""Model package exports for ebookforge datatypes."""

from .datatypes import (
    BuildSpec,
    Chapter,
    ChapterEntry,
    FilterChain,
    FilterSpec,
    NamedChains,
    OutputSpec,
    RunSummary,
    SingleFilter,
)

__all__ = [
    "BuildSpec",
    "Chapter",
    "ChapterEntry",
    "FilterChain",
    "FilterSpec",
    "NamedChains",
    "OutputSpec",
    "RunSummary",
    "SingleFilter",
]
