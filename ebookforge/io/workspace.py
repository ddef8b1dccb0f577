"""On-disk working directory bootstrap."""

from __future__ import annotations

from ..config import ForgeConfig


def ensure_workspace(config: ForgeConfig) -> None:
    """Create the cache and output directories when they do not exist yet."""

    config.cache_dir.mkdir(parents=True, exist_ok=True)
    config.output_dir.mkdir(parents=True, exist_ok=True)
