"""Slugs for output artifact names derived from book titles."""

from __future__ import annotations

import re
import unicodedata

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


def slugify_title(value: str, fallback: str = "book", max_length: int = 80) -> str:
    """Return an ASCII slug of `value`, at most `max_length` characters long."""

    ascii_only = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG_RUN.sub("-", ascii_only.lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or fallback
