"""Per-chapter execution context handed to every filter unit."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from bs4 import BeautifulSoup
from bs4.element import PageElement, Tag

from ..config import ForgeConfig
from ..io.storage import ArtifactStore
from ..models.datatypes import BuildSpec, Chapter
from ..telemetry.logger import RunLogger
from ..text.entities import decode_crs, unescape_html
from .cache import ContentCache


@dataclass(slots=True)
class ProcessingParams:
    """Context owned by one running chain.

    Chapter chains see their own `chapter`; the output stage runs with
    `chapter=None` and reads every chapter through `chapters`.

    Attributes:
        spec: The validated build spec.
        chapter: Chapter this chain works on, or `None` for the output stage.
        chapters: Every scheduled chapter in spec order.
        cache: Startup snapshot of the cache directory.
        cache_store: Read/write access to cache entries.
        output_store: Write access to the output directory.
        config: Runtime configuration.
        decode_entities: When off, `clean` unescapes text that still holds entities
            after parsing; `parse()` decodes one level either way.
        run_logger: Optional structured logger.
    """

    spec: BuildSpec
    chapter: Chapter | None
    chapters: tuple[Chapter, ...]
    cache: ContentCache
    cache_store: ArtifactStore
    output_store: ArtifactStore
    config: ForgeConfig
    decode_entities: bool = False
    run_logger: RunLogger | None = None

    def for_output_stage(self) -> ProcessingParams:
        """Return a copy that no longer references any chapter."""

        return replace(self, chapter=None)

    def parse(self, markup: str) -> BeautifulSoup:
        """Parse markup with `html.parser`, which decodes one level of entities."""

        return BeautifulSoup(markup, "html.parser")

    def decode_crs(self, text: str) -> str:
        """Decode numeric character references."""

        return decode_crs(text)

    def unescape_html(self, text: str) -> str:
        """Unescape ampersands, numeric references and common named entities."""

        return unescape_html(text)

    def purge(self, elements: Iterable[PageElement]) -> int:
        """Remove every element from its tree and return how many were removed."""

        removed = 0
        for element in list(elements):
            if self.run_logger is not None and self.run_logger.debug_enabled:
                text = element.get_text() if isinstance(element, Tag) else str(element)
                self.run_logger.log_debug("delete", text=text[:60])
            element.extract()
            removed += 1
        return removed

    def log(self, event: str, **context: object) -> None:
        """Emit a filter-level event when a logger is attached."""

        if self.run_logger is None:
            return
        chain = f"chapter:{self.chapter.id}" if self.chapter is not None else "output"
        self.run_logger.log_chain_event(chain, event, **context)
