"""Narrow a chapter's tree to its content element(s).

The selector comes from the chapter's `selector` key, then the spec's
top-level `selector`, then defaults to `body`. An explicit selector must
match; the default keeps fragment documents (which have no `<body>`) whole.
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import PipelineStageError
from ..pipeline.params import ProcessingParams
from ._support import require_chapter

_DEFAULT_SELECTOR = "body"


def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    chapter = require_chapter(params, "extract")
    selector = chapter.meta.get("selector") or params.spec.extra.get("selector")
    matches = chapter.dom.select(selector or _DEFAULT_SELECTOR)

    if not matches:
        if selector:
            raise PipelineStageError(
                stage="extract",
                detail=(
                    f'In "{chapter.title}": selector `{selector}` matched nothing '
                    f"in `{chapter.src}`."
                ),
                hint="Adjust the chapter `selector` to the page's content element.",
            )
        next()
        return

    chapter.dom = params.parse("".join(match.decode_contents() for match in matches))
    chapter.meta["selector"] = selector or _DEFAULT_SELECTOR
    next()
