"""Unit tests for the built-in filter units."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
import requests

from ebookforge.errors import PipelineStageError
from ebookforge.filters import clean, extract, fetch, write_html, write_manifest
from ebookforge.io.storage import cache_key_for


def _run(unit, params) -> list[str]:
    """Run one unit to completion and return the continuation calls."""

    resumed: list[str] = []

    async def _drive() -> None:
        result = unit(params, lambda: resumed.append("next"))
        if asyncio.iscoroutine(result):
            await result

    asyncio.run(_drive())
    return resumed


class _FakeResponse:
    def __init__(self, text: str) -> None:
        self.text = text

    def raise_for_status(self) -> None:
        return None


def test_fetch_reads_local_file_into_chapter_tree(tmp_path: Path, make_params) -> None:
    source = tmp_path / "one.html"
    source.write_text("<html><body><p>Hello</p></body></html>", encoding="utf-8")
    params = make_params(src=str(source))

    assert _run(fetch.apply, params) == ["next"]
    assert params.chapter.dom.find("p").get_text() == "Hello"
    assert params.chapter.meta["fetched_from"] == "file"


def test_fetch_downloads_remote_source_and_writes_cache(
    monkeypatch: pytest.MonkeyPatch, make_params
) -> None:
    calls: list[str] = []

    def _fake_get(url: str, **kwargs: object) -> _FakeResponse:
        calls.append(url)
        return _FakeResponse("<p>Remote</p>")

    monkeypatch.setattr(requests, "get", _fake_get)
    params = make_params(src="https://example.com/chapter-1")

    assert _run(fetch.apply, params) == ["next"]
    key = cache_key_for("https://example.com/chapter-1")
    assert calls == ["https://example.com/chapter-1"]
    assert params.cache_store.load_text(key) == "<p>Remote</p>"
    assert params.chapter.meta["fetched_from"] == "network"

    second = make_params(src="https://example.com/chapter-1")
    assert _run(fetch.apply, second) == ["next"]
    assert calls == ["https://example.com/chapter-1"]
    assert second.chapter.meta["fetched_from"] == "cache"
    assert second.chapter.dom.get_text() == "Remote"


def test_fetch_maps_transport_errors_to_stage_errors(
    monkeypatch: pytest.MonkeyPatch, make_params
) -> None:
    def _failing_get(url: str, **kwargs: object) -> _FakeResponse:
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "get", _failing_get)

    with pytest.raises(PipelineStageError) as excinfo:
        _run(fetch.apply, make_params(src="https://example.com/down"))

    assert excinfo.value.stage == "fetch"
    assert "connection refused" in excinfo.value.detail


def test_fetch_rejects_missing_local_source(make_params) -> None:
    with pytest.raises(PipelineStageError, match="source file not found"):
        _run(fetch.apply, make_params(src="no/such/file.html"))


def test_fetch_refuses_to_run_in_output_stage(make_params) -> None:
    params = make_params().for_output_stage()

    with pytest.raises(PipelineStageError, match="only runs in chapter chains"):
        _run(fetch.apply, params)


def test_extract_narrows_tree_to_selected_content(make_params) -> None:
    params = make_params(selector="div.content")
    params.chapter.dom = params.parse(
        '<body><nav>Menu</nav><div class="content"><p>Story</p></div></body>'
    )

    assert _run(extract.apply, params) == ["next"]
    assert params.chapter.dom.get_text() == "Story"
    assert params.chapter.dom.find("nav") is None


def test_extract_keeps_fragments_without_body_by_default(make_params) -> None:
    params = make_params()
    params.chapter.dom = params.parse("<p>Fragment</p>")

    assert _run(extract.apply, params) == ["next"]
    assert params.chapter.dom.get_text() == "Fragment"


def test_extract_fails_when_explicit_selector_misses(make_params) -> None:
    params = make_params(selector="#missing")
    params.chapter.dom = params.parse("<p>Text</p>")

    with pytest.raises(PipelineStageError, match="selector `#missing` matched nothing"):
        _run(extract.apply, params)


def test_clean_purges_noise_and_unescapes_text(make_params) -> None:
    params = make_params()
    params.chapter.dom = params.parse(
        "<div><script>track()</script><style>p{}</style><!-- ad -->"
        "<p>Tom &amp;amp; Jerry</p></div>"
    )

    assert _run(clean.apply, params) == ["next"]
    markup = params.chapter.dom.decode()
    assert "script" not in markup
    assert "style" not in markup
    assert "ad" not in markup
    assert params.chapter.dom.find("p").get_text() == "Tom & Jerry"
    assert params.chapter.meta["purged_elements"] == 3


def test_write_html_renders_every_chapter_in_order(make_params, forge_config) -> None:
    params = make_params(title="First <Light>").for_output_stage()
    params.chapters[0].dom = params.parse("<body><p>Body text</p></body>")

    assert _run(write_html.apply, params) == ["next"]
    document = (forge_config.output_dir / "test-book.html").read_text(encoding="utf-8")
    assert "<title>Test Book</title>" in document
    assert '<section id="chapter-0">' in document
    assert "<h1>First &lt;Light&gt;</h1>" in document
    assert "<p>Body text</p>" in document
    assert "<body><p>" not in document


def test_write_manifest_lists_chapters(make_params, forge_config) -> None:
    params = make_params(src="https://example.com/a").for_output_stage()

    assert _run(write_manifest.apply, params) == ["next"]
    payload = json.loads(
        (forge_config.output_dir / "test-book.manifest.json").read_text(encoding="utf-8")
    )
    assert payload["title"] == "Test Book"
    assert payload["chapters"] == [
        {"id": "0", "title": "One", "src": "https://example.com/a", "fetched_from": None}
    ]
