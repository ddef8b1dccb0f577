"""Package every chapter into an EPUB book with EbookLib."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from html import escape
from pathlib import Path

from ebooklib import epub

from ..pipeline.params import ProcessingParams
from ..text.slug import slugify_title
from ._support import chapter_fragment

_STYLESHEET = """
body { font-family: Georgia, "Times New Roman", serif; line-height: 1.6; margin: 1em; }
h1 { margin-top: 1.5em; margin-bottom: 0.5em; line-height: 1.2; }
p { margin-bottom: 0.8em; text-align: justify; }
"""


def build_book(params: ProcessingParams) -> epub.EpubBook:
    """Assemble the EPUB structure: metadata, one XHTML item per chapter, TOC, spine."""

    spec = params.spec
    slug = slugify_title(spec.title)
    book = epub.EpubBook()
    book.set_identifier(f"ebookforge-{slug}")
    book.set_title(spec.title)
    book.set_language(spec.language)
    if spec.author:
        book.add_author(spec.author)

    css = epub.EpubItem(
        uid="style",
        file_name="style/default.css",
        media_type="text/css",
        content=_STYLESHEET.encode("utf-8"),
    )
    book.add_item(css)

    items = []
    for chapter in params.chapters:
        item = epub.EpubHtml(
            title=chapter.title,
            file_name=f"chapter_{int(chapter.id):03d}.xhtml",
            lang=spec.language,
        )
        item.content = (
            f"<h1>{escape(chapter.title)}</h1>\n{chapter_fragment(chapter)}"
        ).encode("utf-8")
        item.add_item(css)
        book.add_item(item)
        items.append(item)

    book.toc = tuple(items)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", *items]
    return book


async def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    book = build_book(params)
    path: Path = params.output_store.path_for(f"{slugify_title(params.spec.title)}.epub")
    path.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(epub.write_epub, str(path), book)
    params.log("written", artifact=path.name)
    next()
