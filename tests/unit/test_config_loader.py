"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from ebookforge.config import ConfigLoader, ForgeConfig


def test_config_loader_from_yaml_loads_and_normalizes_values(tmp_path: Path) -> None:
    config_path = tmp_path / "ebookforge.yml"
    config_path.write_text(
        """
specs_dir: " books "
cache_dir: " .cache "
output_dir: out
filter_dirs:
  - plugins
  - " more "
decode_entities: " yes "
debug: false
request_timeout_seconds: "12.5"
user_agent: " crawler/1.0 "
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.specs_dir == Path("books")
    assert config.cache_dir == Path(".cache")
    assert config.output_dir == Path("out")
    assert config.filter_dirs == (Path("plugins"), Path("more"))
    assert config.decode_entities is True
    assert config.debug is False
    assert config.request_timeout_seconds == 12.5
    assert config.user_agent == "crawler/1.0"


def test_config_loader_from_yaml_uses_defaults_for_empty_file(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == ForgeConfig()


def test_config_loader_rejects_unknown_and_invalid_values(tmp_path: Path) -> None:
    unknown_path = tmp_path / "unknown.yml"
    unknown_path.write_text("output_dir: out\nthreads: 4\n", encoding="utf-8")
    with pytest.raises(ValueError, match=r"unsupported key\(s\): threads"):
        ConfigLoader.from_yaml(unknown_path)

    bool_path = tmp_path / "bool.yml"
    bool_path.write_text("debug: maybe\n", encoding="utf-8")
    with pytest.raises(ValueError, match="`debug` must be a boolean"):
        ConfigLoader.from_yaml(bool_path)

    timeout_path = tmp_path / "timeout.yml"
    timeout_path.write_text("request_timeout_seconds: -1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="`request_timeout_seconds` must be a positive number"):
        ConfigLoader.from_yaml(timeout_path)

    root_path = tmp_path / "root.yml"
    root_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(root_path)


def test_config_loader_from_env_reads_prefixed_variables() -> None:
    env = {
        "EBOOKFORGE_OUTPUT_DIR": " dist ",
        "EBOOKFORGE_FILTER_DIRS": "",
        "EBOOKFORGE_DEBUG": "on",
        "UNRELATED": "ignored",
    }

    config = ConfigLoader.from_env(env)

    assert config.output_dir == Path("dist")
    assert config.filter_dirs == ()
    assert config.debug is True
    assert config.cache_dir == Path("cache")


def test_with_overrides_skips_none_values() -> None:
    config = ForgeConfig(output_dir=Path("out"))

    updated = config.with_overrides(output_dir=None, cache_dir=Path("c"), filter_dirs=["p"])

    assert updated.output_dir == Path("out")
    assert updated.cache_dir == Path("c")
    assert updated.filter_dirs == (Path("p"),)
