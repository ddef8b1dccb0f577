"""Write a JSON manifest describing the built chapters."""

from __future__ import annotations

from collections.abc import Callable

from ..pipeline.params import ProcessingParams
from ..text.slug import slugify_title


def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    spec = params.spec
    payload: dict[str, object] = {
        "title": spec.title,
        "author": spec.author,
        "language": spec.language,
        "chapters": [
            {
                "id": chapter.id,
                "title": chapter.title,
                "src": chapter.src,
                "fetched_from": chapter.meta.get("fetched_from"),
            }
            for chapter in params.chapters
        ],
    }
    path = params.output_store.save_json(
        f"{slugify_title(spec.title)}.manifest.json", payload
    )
    params.log("written", artifact=path.name)
    next()
