"""Strip non-content markup and unescape leftover entities."""

from __future__ import annotations

from collections.abc import Callable

from bs4.element import Comment, NavigableString

from ..pipeline.params import ProcessingParams
from ._support import require_chapter

_NOISE_SELECTOR = "script, style, noscript, iframe, link, meta"


def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    chapter = require_chapter(params, "clean")
    dom = chapter.dom

    removed = params.purge(dom.select(_NOISE_SELECTOR))
    removed += params.purge(dom.find_all(string=lambda text: isinstance(text, Comment)))

    if not params.decode_entities:
        for node in dom.find_all(string=True):
            if type(node) is NavigableString and "&" in node:
                node.replace_with(params.unescape_html(str(node)))

    chapter.meta["purged_elements"] = removed
    next()
