"""Filter unit discovery and identifier resolution.

Responsibilities:
- Load the built-in filter modules and any user filter directories once per run.
- Resolve filter identifiers to callable units, failing fast on unknown names.

A filter unit is any module exposing `apply(params, next)`; its identifier is
the module name (built-ins) or the file stem (user directories).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
import importlib
import importlib.util
from pathlib import Path
import pkgutil
import sys
from types import ModuleType
from typing import Any

from ..errors import PipelineStageError

FilterUnit = Callable[[Any, Callable[[], None]], Any]

_BUILTIN_PACKAGE = "ebookforge.filters"
_USER_MODULE_PREFIX = "ebookforge_user_filters"


@dataclass(frozen=True, slots=True)
class ResolvedFilter:
    """A filter unit together with the identifier it was resolved from."""

    filter_id: str
    apply: FilterUnit


def _apply_of(module: ModuleType, filter_id: str) -> FilterUnit:
    """Return the module's `apply` callable or reject the module."""

    unit = getattr(module, "apply", None)
    if not callable(unit):
        raise PipelineStageError(
            stage="filters",
            detail=f"Filter module `{filter_id}` does not define an `apply(params, next)` function.",
            hint="Every filter module must expose a callable `apply`.",
        )
    return unit


def _load_file_module(path: Path) -> ModuleType:
    """Import a standalone filter file under a private module name."""

    spec = importlib.util.spec_from_file_location(f"{_USER_MODULE_PREFIX}.{path.stem}", path)
    if spec is None or spec.loader is None:
        raise PipelineStageError(
            stage="filters",
            detail=f"Cannot load filter module from `{path}`.",
        )
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(spec.name, None)
        raise PipelineStageError(
            stage="filters",
            detail=f"Failed to import filter `{path.stem}` from `{path}`: {exc}",
            hint="Fix the filter module and rerun.",
        ) from exc
    return module


class FilterRegistry:
    """Identifier → filter unit lookup, built once per run."""

    def __init__(self, units: Mapping[str, FilterUnit] | None = None) -> None:
        """Initialize the registry from an explicit identifier mapping."""

        self._units: dict[str, FilterUnit] = dict(units or {})

    @classmethod
    def discover(cls, filter_dirs: Iterable[Path] = ()) -> FilterRegistry:
        """Load built-in filters, then user filter directories in order.

        A user filter replaces a built-in (or earlier user) filter with the
        same identifier.
        """

        units: dict[str, FilterUnit] = {}
        package = importlib.import_module(_BUILTIN_PACKAGE)
        for module_info in pkgutil.iter_modules(package.__path__):
            if module_info.name.startswith("_"):
                continue
            module = importlib.import_module(f"{_BUILTIN_PACKAGE}.{module_info.name}")
            units[module_info.name] = _apply_of(module, module_info.name)

        for directory in filter_dirs:
            if not directory.is_dir():
                raise PipelineStageError(
                    stage="filters",
                    detail=f"Filter directory not found: `{directory}`.",
                    hint="Pass an existing directory via `--filters-dir`.",
                )
            for path in sorted(directory.glob("*.py")):
                if path.stem.startswith("_"):
                    continue
                units[path.stem] = _apply_of(_load_file_module(path), path.stem)

        return cls(units)

    def get(self, filter_id: str) -> FilterUnit:
        """Return the unit for `filter_id`.

        Raises:
            PipelineStageError: If no filter is registered under `filter_id`.
        """

        unit = self._units.get(filter_id)
        if unit is None:
            raise PipelineStageError(
                stage="filters",
                detail=f"No such filter: {filter_id}",
                hint="Run `ebookforge filters` to list available filters.",
            )
        return unit

    def resolve(self, filter_ids: Sequence[str], context: str) -> tuple[ResolvedFilter, ...]:
        """Resolve an ordered chain of identifiers, naming `context` on failure."""

        resolved = []
        for filter_id in filter_ids:
            try:
                unit = self.get(filter_id)
            except PipelineStageError as exc:
                raise PipelineStageError(
                    stage=exc.stage,
                    detail=f"In {context}: {exc.detail}",
                    hint=exc.hint,
                ) from exc
            resolved.append(ResolvedFilter(filter_id, unit))
        return tuple(resolved)

    def identifiers(self) -> list[str]:
        """Return every registered identifier, sorted."""

        return sorted(self._units)

    def __contains__(self, filter_id: object) -> bool:
        return filter_id in self._units

    def __len__(self) -> int:
        return len(self._units)
