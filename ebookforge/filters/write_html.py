"""Write every chapter into one standalone HTML document."""

from __future__ import annotations

from collections.abc import Callable
from html import escape

from ..pipeline.params import ProcessingParams
from ..text.slug import slugify_title
from ._support import chapter_fragment


def render_document(params: ProcessingParams) -> str:
    """Render the book as a single HTML page, one section per chapter."""

    spec = params.spec
    sections = [
        f'<section id="chapter-{chapter.id}">\n'
        f"<h1>{escape(chapter.title)}</h1>\n"
        f"{chapter_fragment(chapter)}\n"
        "</section>"
        for chapter in params.chapters
    ]
    byline = f'<meta name="author" content="{escape(spec.author)}">\n' if spec.author else ""
    return (
        "<!DOCTYPE html>\n"
        f'<html lang="{escape(spec.language)}">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        f"{byline}"
        f"<title>{escape(spec.title)}</title>\n"
        "</head>\n"
        "<body>\n"
        + "\n".join(sections)
        + "\n</body>\n</html>\n"
    )


def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    path = params.output_store.save_text(
        f"{slugify_title(params.spec.title)}.html", render_document(params)
    )
    params.log("written", artifact=path.name)
    next()
