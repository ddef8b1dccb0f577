"""Core datatypes shared across ebookforge modules.

Responsibilities:
- Represent the validated build spec as immutable records.
- Represent the mutable per-chapter state that filter chains operate on.

Key types:
- `SingleFilter`, `FilterChain`, `NamedChains`: tagged filter reference variants.
- `ChapterEntry`, `BuildSpec`: load-time spec records.
- `Chapter`: scheduled chapter with its owned document tree.
- `RunSummary`: outcome of one build run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

from bs4 import BeautifulSoup


@dataclass(frozen=True, slots=True)
class SingleFilter:
    """One filter identifier used on its own."""

    filter_id: str

    def identifiers(self) -> tuple[str, ...]:
        """Return the referenced identifiers in run order."""

        return (self.filter_id,)


@dataclass(frozen=True, slots=True)
class FilterChain:
    """An ordered, non-empty sequence of filter identifiers."""

    filter_ids: tuple[str, ...]

    def identifiers(self) -> tuple[str, ...]:
        """Return the referenced identifiers in run order."""

        return self.filter_ids


@dataclass(frozen=True, slots=True)
class NamedChains:
    """A mapping from chain name to an ordered filter chain."""

    chains: Mapping[str, FilterChain]

    def chain_for(self, name: str) -> FilterChain | None:
        """Return the chain registered under `name`, if any."""

        return self.chains.get(name)


FilterSpec = Union[SingleFilter, FilterChain, NamedChains]
ChapterFilters = Union[FilterChain, NamedChains]
OutputSpec = Union[SingleFilter, FilterChain]


@dataclass(frozen=True, slots=True)
class ChapterEntry:
    """One chapter as declared in the spec file.

    Attributes:
        title: Human-readable chapter title.
        src: Source locator the chapter content originates from.
        filters: Chain name, required when the spec uses named chains.
        extra: Remaining chapter keys, handed to filters through `Chapter.meta`.
    """

    title: str
    src: str
    filters: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildSpec:
    """Validated declarative description of one build.

    Attributes:
        contents: Chapter entries in spec order.
        filters: Chapter filter chain, or named chains selected per chapter.
        output: Output stage run once over the whole spec.
        title: Book title used by output filters.
        author: Optional book author.
        language: Book language code.
        source_path: File the spec was loaded from, when known.
        extra: Remaining top-level keys.
    """

    contents: tuple[ChapterEntry, ...]
    filters: ChapterFilters
    output: OutputSpec
    title: str = "Untitled"
    author: str | None = None
    language: str = "en"
    source_path: Path | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        """Return a short label for logs and summaries."""

        if self.source_path is not None:
            return self.source_path.stem
        return self.title


def empty_document() -> BeautifulSoup:
    """Return a fresh, empty parse tree for a chapter."""

    return BeautifulSoup("", "html.parser")


@dataclass(slots=True)
class Chapter:
    """A scheduled chapter and the state its filter chain mutates.

    The `id` is assigned from the spec position when the run is planned and is
    not reassigned afterwards; `dom` and `meta` belong to the chapter's chain.
    """

    id: str
    title: str
    src: str
    filters: str | None = None
    dom: BeautifulSoup = field(default_factory=empty_document)
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_entry(cls, index: int, entry: ChapterEntry) -> Chapter:
        """Create the scheduled chapter for the entry at spec position `index`."""

        return cls(
            id=str(index),
            title=entry.title,
            src=entry.src,
            filters=entry.filters,
            meta=dict(entry.extra),
        )


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Outcome of one build run."""

    spec_name: str
    chapter_count: int
    source_groups: int
    completed_chapters: int
    output_fired: bool
    cached_entries: int
