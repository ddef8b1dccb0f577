"""Shared pytest fixtures for the full ebookforge test suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from ebookforge.config import ForgeConfig
from ebookforge.io.spec_loader import SpecLoader
from ebookforge.io.storage import ArtifactStore
from ebookforge.models.datatypes import BuildSpec, Chapter, ChapterEntry
from ebookforge.pipeline.cache import ContentCache
from ebookforge.pipeline.params import ProcessingParams

Events = list[tuple[str, str, str]]


@pytest.fixture
def forge_config(tmp_path: Path) -> ForgeConfig:
    """Provide a config whose working directories live under `tmp_path`."""

    return ForgeConfig(
        specs_dir=tmp_path / "specs",
        cache_dir=tmp_path / "cache",
        output_dir=tmp_path / "output",
    )


@pytest.fixture
def events() -> Events:
    """Collect `(filter, chain, phase)` tuples in the order they happen."""

    return []


@pytest.fixture
def recording_filter(events: Events) -> Callable[..., Callable[..., object]]:
    """Build filter units that log start/end events and resume after `delay` seconds."""

    def _factory(name: str, delay: float = 0.0) -> Callable[..., object]:
        async def _apply(params: ProcessingParams, next: Callable[[], None]) -> None:
            chain = params.chapter.id if params.chapter is not None else "output"
            events.append((name, chain, "start"))
            await asyncio.sleep(delay)
            events.append((name, chain, "end"))
            next()

        return _apply

    return _factory


@pytest.fixture
def make_spec() -> Callable[..., BuildSpec]:
    """Build a validated spec from a raw mapping payload."""

    def _factory(**payload: object) -> BuildSpec:
        return SpecLoader.from_mapping(payload)

    return _factory


@pytest.fixture
def make_params(
    forge_config: ForgeConfig, make_spec: Callable[..., BuildSpec]
) -> Callable[..., ProcessingParams]:
    """Build chapter-chain params for a one-chapter spec."""

    def _factory(
        src: str = "https://example.com/one",
        title: str = "One",
        **chapter_extra: object,
    ) -> ProcessingParams:
        spec = make_spec(
            title="Test Book",
            contents=[{"title": title, "src": src, **chapter_extra}],
            filters=["fetch", "clean"],
            output="write_html",
        )
        chapter = Chapter.from_entry(0, spec.contents[0])
        return ProcessingParams(
            spec=spec,
            chapter=chapter,
            chapters=(chapter,),
            cache=ContentCache.snapshot(forge_config.cache_dir),
            cache_store=ArtifactStore(forge_config.cache_dir),
            output_store=ArtifactStore(forge_config.output_dir),
            config=forge_config,
        )

    return _factory


@pytest.fixture
def chapter_entry() -> ChapterEntry:
    """Provide a minimal chapter entry."""

    return ChapterEntry(title="Prologue", src="https://example.com/prologue")
