"""Completion barrier gating the output stage.

The barrier owns the run's completion counter. Each chapter chain's terminal
callback calls `arrive()` once; when the count reaches the chapter total the
release callback fires, exactly once.
"""

from __future__ import annotations

from collections.abc import Callable

from ..errors import ChainContractError
from ..telemetry.logger import RunLogger


class CompletionBarrier:
    """Count chapter completions and release the output stage once."""

    def __init__(
        self,
        total: int,
        on_release: Callable[[], None],
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize a zeroed counter for `total` chapter chains."""

        if total < 1:
            raise ChainContractError("A completion barrier needs at least one chapter.")
        self._total = total
        self._loaded = 0
        self._released = False
        self._on_release = on_release
        self._run_logger = run_logger

    @property
    def loaded(self) -> int:
        """Number of chapter chains that have completed."""

        return self._loaded

    @property
    def total(self) -> int:
        """Number of chapter chains the barrier waits for."""

        return self._total

    @property
    def released(self) -> bool:
        """Whether the output stage has been released."""

        return self._released

    def arrive(self) -> None:
        """Record one chapter completion; release when all chapters are done."""

        if self._released:
            raise ChainContractError(
                f"Completion barrier received more than {self._total} chapter completions."
            )
        self._loaded += 1
        if self._run_logger is not None:
            self._run_logger.log_barrier(self._loaded, self._total)
        if self._loaded == self._total:
            self._released = True
            self._on_release()
