"""Text helpers shared with filter units."""

from .entities import decode_crs, unescape_html
from .slug import slugify_title

__all__ = ["decode_crs", "slugify_title", "unescape_html"]
