"""Spec file loading and load-time validation.

Responsibilities:
- Read JSON or YAML spec files into a mapping payload.
- Validate chapter entries and the `filters`/`output` shapes once, producing
  tagged `FilterChain`/`NamedChains`/`SingleFilter` values.

Key public functions:
- `SpecLoader.load`: parse and validate a spec file.
- `SpecLoader.from_mapping`: validate an already-parsed payload.
- `resolve_spec_path`: locate a spec by path or by name under the specs directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..models.datatypes import (
    BuildSpec,
    ChapterEntry,
    ChapterFilters,
    FilterChain,
    NamedChains,
    OutputSpec,
    SingleFilter,
)
from ..parsing import is_identifier_list, normalize_optional_string

_CHAPTER_KEYS = frozenset({"title", "src", "filters"})
_SPEC_KEYS = frozenset({"contents", "filters", "output", "title", "author", "language"})


def resolve_spec_path(name: str | Path, specs_dir: Path) -> Path:
    """Return the spec file for `name`, trying it as a path first.

    Raises:
        FileNotFoundError: If neither the path nor `specs_dir / name` exists.
    """

    direct = Path(name)
    if direct.is_file():
        return direct
    candidate = specs_dir / direct
    if candidate.is_file():
        return candidate
    raise FileNotFoundError(f"Spec file not found: `{name}` (also searched `{specs_dir}`).")


class SpecLoader:
    """Factory methods for creating `BuildSpec` from spec files."""

    @staticmethod
    def load(path: Path) -> BuildSpec:
        """Read and validate the spec file at `path`."""

        raw_text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in {".yaml", ".yml"}:
            payload = yaml.safe_load(raw_text)
        else:
            try:
                payload = json.loads(raw_text)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Spec `{path}` is not valid JSON: {exc}") from exc

        if not isinstance(payload, Mapping):
            raise ValueError(f"Spec `{path}` must contain a top-level mapping/object.")
        return SpecLoader.from_mapping(payload, source_path=path)

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any], *, source_path: Path | None = None
    ) -> BuildSpec:
        """Validate a parsed spec payload and build the typed spec."""

        contents = SpecLoader._parse_contents(payload.get("contents"))
        filters = SpecLoader._parse_filters(payload.get("filters"))
        output = SpecLoader._parse_output(payload.get("output"))
        title = normalize_optional_string(payload.get("title"))
        if title is None and source_path is not None:
            title = source_path.stem
        return BuildSpec(
            contents=contents,
            filters=filters,
            output=output,
            title=title or "Untitled",
            author=normalize_optional_string(payload.get("author")),
            language=normalize_optional_string(payload.get("language")) or "en",
            source_path=source_path,
            extra={key: value for key, value in payload.items() if key not in _SPEC_KEYS},
        )

    @staticmethod
    def _parse_contents(raw: Any) -> tuple[ChapterEntry, ...]:
        """Validate the `contents` list."""

        if not isinstance(raw, list) or not raw:
            raise ValueError('The spec must contain a non-empty "contents" list of chapters.')

        entries = []
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"Chapter #{index} must be an object.")
            title = item.get("title")
            if not isinstance(title, str) or not title.strip():
                raise ValueError(
                    f'Chapter #{index}: Each chapter must contain a "title" property (string).'
                )
            src = item.get("src")
            if not isinstance(src, str) or not src.strip():
                raise ValueError(
                    f'In "{title}": Each chapter must contain a "src" property (string).'
                )
            chain_name = item.get("filters")
            if chain_name is not None and not isinstance(chain_name, str):
                raise ValueError(
                    f'In "{title}": The "filters" property must name a filter chain (string).'
                )
            entries.append(
                ChapterEntry(
                    title=title,
                    src=src,
                    filters=chain_name,
                    extra={
                        key: value for key, value in item.items() if key not in _CHAPTER_KEYS
                    },
                )
            )
        return tuple(entries)

    @staticmethod
    def _parse_filters(raw: Any) -> ChapterFilters:
        """Validate `filters` as an identifier list or a mapping of named chains."""

        if isinstance(raw, list):
            if not is_identifier_list(raw):
                raise ValueError(
                    'The "filters" chain must be a non-empty list of filter names.'
                )
            return FilterChain(tuple(raw))

        if isinstance(raw, Mapping):
            if not raw:
                raise ValueError('The "filters" collection must name at least one chain.')
            chains = {}
            for name, chain in raw.items():
                if not is_identifier_list(chain):
                    raise ValueError(
                        f'The filter chain "{name}" must be a non-empty list of filter names.'
                    )
                chains[str(name)] = FilterChain(tuple(chain))
            return NamedChains(chains)

        raise ValueError(
            f'Unsupported filter chain type "{type(raw).__name__}". '
            "It must be either a list of filter names or a mapping of named chains."
        )

    @staticmethod
    def _parse_output(raw: Any) -> OutputSpec:
        """Validate `output` as one identifier or an identifier list."""

        if isinstance(raw, str) and raw.strip():
            return SingleFilter(raw)
        if is_identifier_list(raw):
            return FilterChain(tuple(raw))
        raise ValueError(
            "Unable to interpret the output filter reference. "
            "It must be either a string or array of strings."
        )
