"""Unit tests for spec file loading and load-time validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ebookforge.io.spec_loader import SpecLoader, resolve_spec_path
from ebookforge.models.datatypes import FilterChain, NamedChains, SingleFilter


def _write_json(path: Path, payload: dict[str, object]) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_load_json_spec_builds_tagged_variants(tmp_path: Path) -> None:
    """A list of filters and a string output should map to chain/single variants."""

    spec_path = _write_json(
        tmp_path / "novel.json",
        {
            "title": "The Novel",
            "author": "A. Writer",
            "contents": [
                {"title": "One", "src": "https://example.com/1", "selector": "#text"},
                {"title": "Two", "src": "https://example.com/2"},
            ],
            "filters": ["fetch", "extract", "clean"],
            "output": "write_epub",
            "cover": "cover.jpg",
        },
    )

    spec = SpecLoader.load(spec_path)

    assert spec.title == "The Novel"
    assert spec.author == "A. Writer"
    assert spec.language == "en"
    assert spec.name == "novel"
    assert spec.filters == FilterChain(("fetch", "extract", "clean"))
    assert spec.output == SingleFilter("write_epub")
    assert [entry.title for entry in spec.contents] == ["One", "Two"]
    assert spec.contents[0].extra == {"selector": "#text"}
    assert spec.extra == {"cover": "cover.jpg"}


def test_load_yaml_spec_with_named_chains_and_output_list(tmp_path: Path) -> None:
    spec_path = tmp_path / "serial.yaml"
    spec_path.write_text(
        """
contents:
  - title: Intro
    src: intro.html
    filters: local
  - title: Web
    src: https://example.com/web
    filters: remote
filters:
  local: [fetch]
  remote: [fetch, extract, clean]
output: [write_html, write_manifest]
""".strip(),
        encoding="utf-8",
    )

    spec = SpecLoader.load(spec_path)

    assert isinstance(spec.filters, NamedChains)
    assert spec.filters.chain_for("remote") == FilterChain(("fetch", "extract", "clean"))
    assert spec.filters.chain_for("missing") is None
    assert spec.output == FilterChain(("write_html", "write_manifest"))
    assert spec.contents[0].filters == "local"
    assert spec.title == "serial"


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ([], 'non-empty "contents"'),
        ([{"src": "x"}], 'Each chapter must contain a "title" property'),
        ([{"title": "A"}], 'In "A": Each chapter must contain a "src" property'),
        ([{"title": "A", "src": "x", "filters": 3}], 'must name a filter chain'),
    ],
)
def test_invalid_chapters_are_rejected(contents: list[object], message: str) -> None:
    with pytest.raises(ValueError, match=message):
        SpecLoader.from_mapping({"contents": contents, "filters": ["fetch"], "output": "write_html"})


@pytest.mark.parametrize("filters", ["fetch", [], ["fetch", ""], {}, {"web": []}])
def test_invalid_filter_shapes_are_rejected(filters: object) -> None:
    with pytest.raises(ValueError):
        SpecLoader.from_mapping(
            {"contents": [{"title": "A", "src": "x"}], "filters": filters, "output": "write_html"}
        )


@pytest.mark.parametrize("output", [None, 3, [], ["write_html", 5], {"a": "b"}])
def test_invalid_output_shapes_are_rejected(output: object) -> None:
    with pytest.raises(ValueError, match="Unable to interpret the output filter reference"):
        SpecLoader.from_mapping(
            {"contents": [{"title": "A", "src": "x"}], "filters": ["fetch"], "output": output}
        )


def test_non_mapping_and_broken_json_are_rejected(tmp_path: Path) -> None:
    list_path = tmp_path / "list.json"
    list_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="top-level mapping"):
        SpecLoader.load(list_path)

    broken_path = tmp_path / "broken.json"
    broken_path.write_text("{", encoding="utf-8")
    with pytest.raises(ValueError, match="not valid JSON"):
        SpecLoader.load(broken_path)


def test_resolve_spec_path_prefers_direct_path_then_specs_dir(tmp_path: Path) -> None:
    specs_dir = tmp_path / "specs"
    specs_dir.mkdir()
    named = specs_dir / "book.json"
    named.write_text("{}", encoding="utf-8")

    assert resolve_spec_path(named, specs_dir) == named
    assert resolve_spec_path("book.json", specs_dir) == named
    with pytest.raises(FileNotFoundError, match="Spec file not found"):
        resolve_spec_path("other.json", specs_dir)
