"""Load a chapter's source into its parse tree.

Sources are resolved in order: an existing cache entry, an `http(s)` URL
(downloaded in a worker thread and written to the cache), or a local file.
The cache directory itself is checked as well as the startup snapshot, so a
follower chapter reuses the entry its group leader wrote during this run.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse

import requests

from ..config import ForgeConfig
from ..errors import PipelineStageError
from ..io.storage import cache_key_for
from ..pipeline.params import ProcessingParams
from ._support import require_chapter


def _is_remote(src: str) -> bool:
    return urlparse(src).scheme in {"http", "https"}


def _download(src: str, config: ForgeConfig) -> str:
    """Fetch one URL and return its decoded body."""

    try:
        response = requests.get(
            src,
            headers={"User-Agent": config.user_agent},
            timeout=config.request_timeout_seconds,
        )
        response.raise_for_status()
    except requests.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else "unknown"
        raise PipelineStageError(
            stage="fetch",
            detail=f"Fetching `{src}` failed with HTTP status {status}.",
            hint="Check the chapter `src` URL.",
        ) from exc
    except requests.RequestException as exc:
        raise PipelineStageError(
            stage="fetch",
            detail=f"Fetching `{src}` failed: {exc}",
            hint="Check network connectivity or raise `request_timeout_seconds`.",
        ) from exc
    return response.text


async def apply(params: ProcessingParams, next: Callable[[], None]) -> None:
    chapter = require_chapter(params, "fetch")
    key = cache_key_for(chapter.src)

    if key in params.cache or params.cache_store.exists(key):
        markup = params.cache_store.load_text(key)
        origin = "cache"
    elif _is_remote(chapter.src):
        markup = await asyncio.to_thread(_download, chapter.src, params.config)
        params.cache_store.save_text(key, markup)
        origin = "network"
    else:
        path = Path(chapter.src)
        if not path.is_file():
            raise PipelineStageError(
                stage="fetch",
                detail=f'In "{chapter.title}": source file not found: `{chapter.src}`.',
                hint="Use an http(s) URL or an existing file path as `src`.",
            )
        markup = await asyncio.to_thread(path.read_text, encoding="utf-8")
        origin = "file"

    chapter.dom = params.parse(markup)
    chapter.meta["cache_key"] = key
    chapter.meta["fetched_from"] = origin
    params.log("fetched", origin=origin, src=chapter.src)
    next()
