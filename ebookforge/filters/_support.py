"""Helpers shared by the built-in filters."""

from __future__ import annotations

from ..errors import PipelineStageError
from ..models.datatypes import Chapter
from ..pipeline.params import ProcessingParams


def require_chapter(params: ProcessingParams, filter_id: str) -> Chapter:
    """Return the chain's chapter, rejecting use in the output stage."""

    if params.chapter is None:
        raise PipelineStageError(
            stage=filter_id,
            detail=f"The `{filter_id}` filter only runs in chapter chains.",
            hint="Move it from `output` to `filters` in the spec.",
        )
    return params.chapter


def chapter_fragment(chapter: Chapter) -> str:
    """Serialize a chapter's tree, without the surrounding `<body>` when present."""

    body = chapter.dom.find("body")
    if body is not None:
        return body.decode_contents()
    return chapter.dom.decode()
