"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level logs for build stages.
- Emit chain-level logs for filter stage transitions and barrier progress.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic log lines for CLI-observable build activity."""

    def __init__(self, sink: TextIO | None = None, *, debug: bool = False) -> None:
        """Initialize logger sink and configure deterministic formatting."""

        self._sink = sink or sys.stderr
        self.debug_enabled = debug
        _loguru_logger.remove()
        _loguru_logger.add(
            self._sink,
            format="{message}",
            level="DEBUG" if debug else "INFO",
            colorize=False,
        )

    def _emit(self, kind: str, level: str, event: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[{kind}] level={level} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_stage_start(self, stage: str, **context: object) -> None:
        """Emit a stage-start runtime event."""

        self._emit("phase", "INFO", "start", stage=stage, **context)

    def log_stage_complete(self, stage: str, **context: object) -> None:
        """Emit a stage-complete runtime event."""

        self._emit("phase", "INFO", "complete", stage=stage, **context)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("phase", "ERROR", "failure", stage=stage, error_type=error_type)

    def log_chain_event(self, chain: str, event: str, **context: object) -> None:
        """Emit a filter-chain transition (start, stage, complete, failure)."""

        level = "ERROR" if event == "failure" else "INFO"
        self._emit("chain", level, event, chain=chain, **context)

    def log_barrier(self, loaded: int, total: int) -> None:
        """Emit completion-barrier progress."""

        self._emit("barrier", "INFO", "arrive", loaded=loaded, total=total)

    def log_debug(self, event: str, **context: object) -> None:
        """Emit a debug-only diagnostic line."""

        self._emit("debug", "DEBUG", event, **context)
