"""Startup snapshot of previously cached resources.

Responsibilities:
- Record which entries the cache directory held when the run started.
- Answer membership queries for filters deciding whether to re-fetch.

The snapshot is taken once; entries written by filters during the run are not
reflected in later membership checks of the same run.
"""

from __future__ import annotations

from pathlib import Path


class ContentCache:
    """Immutable set of cache entry names captured at startup."""

    __slots__ = ("_entries", "_root")

    def __init__(self, entries: frozenset[str], root: Path) -> None:
        """Initialize the snapshot from already-collected entry names."""

        self._entries = entries
        self._root = root

    @classmethod
    def snapshot(cls, root: Path) -> ContentCache:
        """Capture the entry names present in `root` (empty when it does not exist)."""

        if not root.is_dir():
            return cls(frozenset(), root)
        return cls(frozenset(entry.name for entry in root.iterdir()), root)

    @property
    def root(self) -> Path:
        """Directory the snapshot was taken from."""

        return self._root

    def contains(self, name: str) -> bool:
        """Return whether `name` was present when the snapshot was taken."""

        return name in self._entries

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return len(self._entries)
