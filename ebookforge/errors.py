"""Domain exceptions for build orchestration and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a specific build stage fails."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped build error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ChainContractError(RuntimeError):
    """Raised when engine internals are driven outside their calling contract."""


class FilterContractError(RuntimeError):
    """Raised when a filter unit breaks the `apply(params, next)` contract."""

    def __init__(self, filter_id: str, detail: str) -> None:
        """Initialize a contract violation bound to one filter identifier."""

        super().__init__(f"Filter `{filter_id}` {detail}")
        self.filter_id = filter_id
