"""Filter chain execution.

Responsibilities:
- Run an ordered list of filter units against one `ProcessingParams`.
- Advance stage by stage only when the running unit invokes its continuation.
- Track each chain as an explicit `PENDING → RUNNING → COMPLETED | FAILED` state machine.

Key types:
- `FilterSequence`: a chain of two or more units.
- `SingleFilterRun`: the one-unit case, run directly.
- `ChainExecutor`: schedules chains on the running event loop and drains them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from enum import Enum
import inspect

from ..errors import ChainContractError, FilterContractError
from ..telemetry.logger import RunLogger
from .params import ProcessingParams
from .registry import ResolvedFilter

CompletionCallback = Callable[[], None]


class ChainState(Enum):
    """Lifecycle of one filter chain."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class _ChainRun:
    """Shared stage-by-stage execution for chapter and output chains.

    Subclasses bound the unit count with `min_units`/`max_units` and word the
    rejection through `unit_count_error`.
    """

    min_units = 1
    max_units: int | None = None
    unit_count_error = "A chain needs at least one unit, got {count}."

    def __init__(
        self,
        units: Sequence[ResolvedFilter],
        params: ProcessingParams,
        on_complete: CompletionCallback | None = None,
        *,
        label: str,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Validate the unit list and prepare a pending chain."""

        self._check_unit_count(len(units))
        self.units = tuple(units)
        self.params = params
        self.label = label
        self.state = ChainState.PENDING
        self.stage_index: int | None = None
        self.violation: FilterContractError | None = None
        self.violation_handler: Callable[[BaseException], None] | None = None
        self._on_complete = on_complete
        self._run_logger = run_logger

    def _check_unit_count(self, count: int) -> None:
        if count < self.min_units or (self.max_units is not None and count > self.max_units):
            raise ChainContractError(self.unit_count_error.format(count=count))

    async def run(self) -> None:
        """Run every unit in order, then invoke the completion callback once."""

        if self.state is not ChainState.PENDING:
            raise ChainContractError(f"Chain `{self.label}` was already started.")
        self._log("start", filters=len(self.units))
        try:
            for index, unit in enumerate(self.units):
                self.state = ChainState.RUNNING
                self.stage_index = index
                self._log("stage", index=index, filter=unit.filter_id)
                await self._run_stage(unit)
                if self.violation is not None:
                    raise self.violation
        except Exception as exc:
            self.state = ChainState.FAILED
            self._log("failure", error_type=type(exc).__name__)
            raise

        self.state = ChainState.COMPLETED
        self.stage_index = None
        self._log("complete")
        if self._on_complete is not None:
            self._on_complete()

    async def _run_stage(self, unit: ResolvedFilter) -> None:
        """Invoke one unit and wait until it resumes the chain.

        A second continuation call raises inside the unit while its stage is
        still open. Once the stage has settled the call can only come from a
        loop callback, so it is recorded as the chain's violation instead.
        """

        resumed: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        settled = False

        def resume() -> None:
            if not resumed.done():
                resumed.set_result(None)
                return
            error = FilterContractError(unit.filter_id, "invoked its continuation more than once.")
            self._record_violation(error)
            if not settled:
                raise error

        result = unit.apply(self.params, resume)
        if inspect.isawaitable(result):
            await result
        await resumed
        settled = True

    def _record_violation(self, error: FilterContractError) -> None:
        """Keep the first contract violation and report it to the executor."""

        if self.violation is not None:
            return
        self.violation = error
        if self.state is ChainState.COMPLETED:
            self.state = ChainState.FAILED
            self._log("failure", error_type=type(error).__name__)
        if self.violation_handler is not None:
            self.violation_handler(error)

    def _log(self, event: str, **context: object) -> None:
        if self._run_logger is not None:
            self._run_logger.log_chain_event(self.label, event, **context)


class FilterSequence(_ChainRun):
    """A chain of at least two filter units."""

    min_units = 2
    unit_count_error = "Cannot create a sequence of less than two operations."


class SingleFilterRun(_ChainRun):
    """Exactly one filter unit, invoked directly with a terminal continuation."""

    max_units = 1
    unit_count_error = "A single-filter run needs exactly one unit, got {count}."


def build_chain(
    units: Sequence[ResolvedFilter],
    params: ProcessingParams,
    on_complete: CompletionCallback | None = None,
    *,
    label: str,
    run_logger: RunLogger | None = None,
) -> _ChainRun:
    """Pick the single-unit path or a full sequence for `units`."""

    chain_type = SingleFilterRun if len(units) == 1 else FilterSequence
    return chain_type(units, params, on_complete, label=label, run_logger=run_logger)


class ChainExecutor:
    """Start chains as tasks on the running loop and wait for all of them.

    The first failure, whether a chain raised or a unit broke the continuation
    contract after its stage settled, stops the drain. Chains whose task had
    not begun by then never start.
    """

    def __init__(self) -> None:
        """Initialize empty task bookkeeping."""

        self._pending: set[asyncio.Task[None]] = set()
        self._changed = asyncio.Event()
        self._failure: BaseException | None = None
        self.started: list[_ChainRun] = []

    def start(self, chain: _ChainRun) -> asyncio.Task[None]:
        """Schedule `chain` to run; must be called with an event loop running."""

        chain.violation_handler = self.fail
        task = asyncio.get_running_loop().create_task(self._run(chain), name=chain.label)
        task.add_done_callback(self._task_done)
        self._pending.add(task)
        self.started.append(chain)
        self._changed.set()
        return task

    def fail(self, error: BaseException) -> None:
        """Record a run failure; the first one recorded is re-raised by `drain()`."""

        if self._failure is None:
            self._failure = error
        self._changed.set()

    async def drain(self) -> None:
        """Wait for every started chain, including ones started while waiting.

        Returns once nothing is pending, or re-raises the first failure as soon
        as it is recorded.
        """

        while True:
            self._changed.clear()
            if self._failure is not None:
                raise self._failure
            if not self._pending:
                return
            await self._changed.wait()

    def cancel_pending(self) -> None:
        """Cancel chains that are still running after a failed run."""

        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    async def _run(self, chain: _ChainRun) -> None:
        if self._failure is not None:
            return
        await chain.run()

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.fail(task.exception())
        self._changed.set()
