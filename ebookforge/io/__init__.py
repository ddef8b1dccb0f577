"""Filesystem-facing helpers: spec loading, workspace bootstrap, artifact storage."""

from .spec_loader import SpecLoader, resolve_spec_path
from .storage import ArtifactStore, cache_key_for
from .workspace import ensure_workspace

__all__ = [
    "ArtifactStore",
    "SpecLoader",
    "cache_key_for",
    "ensure_workspace",
    "resolve_spec_path",
]
