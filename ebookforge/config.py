"""Configuration model and loaders for ebookforge.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Merge explicit CLI overrides on top of loaded values.

Key types:
- `ForgeConfig`: normalized runtime settings for a build run.
- `ConfigLoader`: static construction helpers for `ForgeConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import (
    normalize_optional_string,
    parse_positive_float,
    parse_required_boolean,
)

_DEFAULT_USER_AGENT = "ebookforge/0.1 (+https://pypi.org/project/ebookforge/)"
_DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ForgeConfig:
    """Runtime configuration for one build run.

    Attributes:
        specs_dir: Directory searched for spec files given by name.
        cache_dir: Directory whose entries the content cache snapshots.
        output_dir: Directory output filters write final artifacts into.
        filter_dirs: Extra directories holding user filter modules.
        decode_entities: When on, `clean` skips unescaping text that still holds
            entities after parsing (double-escaped pages). Parsing itself always
            decodes one level of entities.
        debug: Enable debug logging (element purges and chain internals).
        request_timeout_seconds: Timeout used by network-backed filters.
        user_agent: User-Agent header sent by network-backed filters.
    """

    specs_dir: Path = Path("specs")
    cache_dir: Path = Path("cache")
    output_dir: Path = Path("output")
    filter_dirs: tuple[Path, ...] = field(default_factory=tuple)
    decode_entities: bool = False
    debug: bool = False
    request_timeout_seconds: float = _DEFAULT_REQUEST_TIMEOUT_SECONDS
    user_agent: str = _DEFAULT_USER_AGENT

    def with_overrides(self, **overrides: Any) -> ForgeConfig:
        """Return a copy with every non-`None` override applied."""

        applied = {key: value for key, value in overrides.items() if value is not None}
        if "filter_dirs" in applied:
            applied["filter_dirs"] = tuple(Path(item) for item in applied["filter_dirs"])
        return replace(self, **applied)


class ConfigLoader:
    """Factory methods for creating `ForgeConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "specs_dir",
            "cache_dir",
            "output_dir",
            "filter_dirs",
            "decode_entities",
            "debug",
            "request_timeout_seconds",
            "user_agent",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> ForgeConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ForgeConfig:
        """Create a validated config from `EBOOKFORGE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key in ConfigLoader._SUPPORTED_YAML_KEYS:
            value = normalize_optional_string(env_map.get(f"EBOOKFORGE_{key.upper()}"))
            if value is None:
                continue
            if key == "filter_dirs":
                payload[key] = [item for item in value.split(os.pathsep) if item.strip()]
            else:
                payload[key] = value
        return ConfigLoader._build_config_from_mapping(payload, source_label="environment")

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> ForgeConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(str(key) for key in payload if key not in ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValueError(f"{source_label} has unsupported key(s): {', '.join(unknown)}.")

        defaults = ForgeConfig()
        values: dict[str, Any] = {}
        for key in ("specs_dir", "cache_dir", "output_dir"):
            if key in payload:
                values[key] = ConfigLoader._required_path(payload, key, source_label)
        if "filter_dirs" in payload:
            values["filter_dirs"] = ConfigLoader._path_list(payload, "filter_dirs", source_label)
        for key in ("decode_entities", "debug"):
            if key in payload:
                values[key] = parse_required_boolean(payload[key], key)
        if "request_timeout_seconds" in payload:
            values["request_timeout_seconds"] = parse_positive_float(
                payload["request_timeout_seconds"], "request_timeout_seconds"
            )
        if "user_agent" in payload:
            user_agent = normalize_optional_string(payload["user_agent"])
            if user_agent is None:
                raise ValueError(f"{source_label}: `user_agent` must be a non-empty string.")
            values["user_agent"] = user_agent
        return replace(defaults, **values)

    @staticmethod
    def _required_path(payload: Mapping[str, Any], key: str, source_label: str) -> Path:
        """Read one non-empty path value."""

        value = normalize_optional_string(payload.get(key))
        if value is None:
            raise ValueError(f"{source_label}: `{key}` must be a non-empty path.")
        return Path(value)

    @staticmethod
    def _path_list(payload: Mapping[str, Any], key: str, source_label: str) -> tuple[Path, ...]:
        """Read a list of paths, accepting a single path string as a one-item list."""

        raw = payload.get(key)
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list):
            raise ValueError(f"{source_label}: `{key}` must be a list of paths.")
        paths = []
        for item in raw:
            value = normalize_optional_string(item)
            if value is None:
                raise ValueError(f"{source_label}: `{key}` entries must be non-empty paths.")
            paths.append(Path(value))
        return tuple(paths)
