"""Artifact storage abstraction.

Responsibilities:
- Provide deterministic filesystem storage for cache entries and output artifacts.
- Derive stable cache entry names from chapter source locators.
"""

from __future__ import annotations

from hashlib import sha256
import json
from pathlib import Path
import re


def cache_key_for(src: str) -> str:
    """Return a stable, filesystem-safe cache entry name for a source locator."""

    digest = sha256(src.encode("utf-8")).hexdigest()[:16]
    tail = re.sub(r"[^A-Za-z0-9._-]+", "_", src.rstrip("/").rsplit("/", 1)[-1])
    tail = tail.strip("._")[:48] or "source"
    return f"{tail}-{digest}.html"


class ArtifactStore:
    """Filesystem-backed store rooted at one directory."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root directory."""

        self.root = root

    def path_for(self, relative_path: Path | str) -> Path:
        """Return the absolute location of an entry."""

        return self.root / relative_path

    def save_text(self, relative_path: Path | str, content: str) -> Path:
        """Save text content and return final path."""

        path = self.path_for(relative_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def save_json(self, relative_path: Path | str, payload: dict[str, object]) -> Path:
        """Save JSON-serializable payload and return final path."""

        return self.save_text(
            relative_path,
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
        )

    def load_text(self, relative_path: Path | str) -> str:
        """Load text content from the store."""

        return self.path_for(relative_path).read_text(encoding="utf-8")

    def exists(self, relative_path: Path | str) -> bool:
        """Return whether the given entry exists."""

        return self.path_for(relative_path).exists()
