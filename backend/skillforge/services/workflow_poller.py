"""Workflow poller.

Each poller owns one ``asyncio.Task`` that queries a workflow's status on a
fixed cadence until the server reports a terminal state, the caller cancels,
or the wall-clock budget runs out. Ticks are strictly sequential: the next
query is only issued after the previous one resolved and the interval
elapsed. The budget bounds the whole task, observer callbacks included.

    idle -> polling -> completed | failed | cancelled

Exactly one terminal transition happens per poller; later attempts are
no-ops. Explicit ``cancel()`` and budget exhaustion share ``_finish``.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from skillforge.core.config import Settings, get_settings
from skillforge.core.exceptions import SkillForgeError, WorkflowFailed, WorkflowTimedOut
from skillforge.core.logging import get_logger
from skillforge.schemas.workflow import Workflow, WorkflowStatus
from skillforge.services.gateway import RoadmapGateway

logger = get_logger(__name__)

WorkflowCallback = Callable[[Workflow], Awaitable[None] | None]
FailureCallback = Callable[[WorkflowFailed | WorkflowTimedOut], Awaitable[None] | None]


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset({PollerState.COMPLETED, PollerState.FAILED, PollerState.CANCELLED})


class PollingTier(str, Enum):
    """Polling cadences; ``fast`` is the default for roadmap workflows."""

    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"

    def interval(self, settings: Settings) -> float:
        return {
            PollingTier.FAST: settings.POLL_INTERVAL_FAST,
            PollingTier.NORMAL: settings.POLL_INTERVAL_NORMAL,
            PollingTier.SLOW: settings.POLL_INTERVAL_SLOW,
        }[self]


def _current_task() -> asyncio.Task[Any] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class WorkflowPoller:
    """Poll one workflow until it reaches a terminal state."""

    def __init__(
        self,
        gateway: RoadmapGateway,
        workflow_id: str,
        *,
        interval: float,
        budget: float,
        on_update: WorkflowCallback | None = None,
        on_complete: WorkflowCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> None:
        if interval <= 0 or budget <= 0:
            raise ValueError("interval and budget must be positive")

        self.gateway = gateway
        self.workflow_id = workflow_id
        self.interval = interval
        self.budget = budget
        self.on_update = on_update
        self.on_complete = on_complete
        self.on_failure = on_failure

        self.state = PollerState.IDLE
        self.workflow: Workflow | None = None
        self.error: WorkflowFailed | WorkflowTimedOut | None = None
        self.ticks = 0

        self._task: asyncio.Task[None] | None = None
        self._deadline = 0.0
        self._last_reported: tuple[WorkflowStatus, str, int] | None = None

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, WorkflowTimedOut)

    def start(self) -> "WorkflowPoller":
        """Begin polling immediately. Returns ``self`` as the cancel handle."""
        if self.state is not PollerState.IDLE:
            raise RuntimeError(f"Poller for {self.workflow_id} already started")

        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.budget
        self.state = PollerState.POLLING
        self._task = loop.create_task(self._run(), name=f"workflow-poller:{self.workflow_id}")
        logger.info(
            "Workflow polling started",
            workflow_id=self.workflow_id,
            interval=self.interval,
            budget=self.budget,
        )
        return self

    def cancel(self) -> bool:
        """Stop polling. Returns False if the poller had already stopped."""
        stopped = self._finish(PollerState.CANCELLED)
        if stopped:
            logger.info("Workflow polling cancelled", workflow_id=self.workflow_id)
        return stopped

    async def wait(self) -> PollerState:
        """Wait until the poller's task has finished and return the final state."""
        if self._task is not None:
            await asyncio.wait({self._task})
        return self.state

    def _finish(
        self,
        state: PollerState,
        error: WorkflowFailed | WorkflowTimedOut | None = None,
    ) -> bool:
        if self.is_terminal:
            return False
        self.state = state
        self.error = error

        task = self._task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        return True

    async def _run(self) -> None:
        # The deadline covers queries, observers and sleeps alike
        try:
            async with asyncio.timeout_at(self._deadline):
                while self.state is PollerState.POLLING:
                    await self._tick()
                    if self.state is not PollerState.POLLING:
                        return
                    await asyncio.sleep(self.interval)
        except TimeoutError:
            await self._time_out()
        except Exception as e:
            logger.exception("Workflow poller crashed", workflow_id=self.workflow_id)
            await self._fail(WorkflowFailed(self.workflow_id, f"Workflow poller crashed: {e}"))

    async def _tick(self) -> None:
        try:
            workflow = await self.gateway.workflow_status(self.workflow_id)
        except SkillForgeError as e:
            # A failed tick is transient; the next tick tries again
            logger.warning(
                "Workflow status check failed",
                workflow_id=self.workflow_id,
                error=str(e),
            )
            return
        self.ticks += 1
        await self._handle(workflow)

    async def _fail(self, error: WorkflowFailed) -> None:
        if self._finish(PollerState.FAILED, error):
            logger.warning(
                "Workflow failed",
                workflow_id=self.workflow_id,
                error=error.message,
            )
            await self._notify(self.on_failure, error)

    async def _handle(self, workflow: Workflow) -> None:
        self.workflow = workflow

        if workflow.status is WorkflowStatus.COMPLETED and workflow.has_roadmap:
            if self._finish(PollerState.COMPLETED):
                logger.info(
                    "Workflow completed",
                    workflow_id=self.workflow_id,
                    roadmap_id=workflow.roadmap_id,
                    ticks=self.ticks,
                )
                await self._notify(self.on_complete, workflow)
            return

        if workflow.status is WorkflowStatus.FAILED:
            await self._fail(
                WorkflowFailed(self.workflow_id, workflow.error or "Roadmap generation failed")
            )
            return

        snapshot = workflow.snapshot()
        if workflow.status is WorkflowStatus.PENDING or snapshot == self._last_reported:
            return
        self._last_reported = snapshot
        logger.debug(
            "Workflow progress",
            workflow_id=self.workflow_id,
            stage=workflow.current_stage,
            progress=workflow.progress,
        )
        await self._notify(self.on_update, workflow)

    async def _time_out(self) -> None:
        error = WorkflowTimedOut(self.workflow_id, self.budget)
        if self._finish(PollerState.CANCELLED, error):
            logger.warning(
                "Workflow polling timed out",
                workflow_id=self.workflow_id,
                budget=self.budget,
                ticks=self.ticks,
            )
            await self._notify(self.on_failure, error)

    async def _notify(self, callback: Callable[[Any], Any] | None, payload: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Workflow observer raised", workflow_id=self.workflow_id)


class WorkflowPollerRegistry:
    """Keeps at most one live poller per workflow id.

    Pollers for different workflows share nothing; starting a poller for an
    id that is already being polled cancels the previous one first.
    """

    def __init__(self, gateway: RoadmapGateway, settings: Settings | None = None) -> None:
        self.gateway = gateway
        self.settings = settings or get_settings()
        self._pollers: dict[str, WorkflowPoller] = {}

    def __len__(self) -> int:
        return len(self._pollers)

    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._pollers

    def get(self, workflow_id: str) -> WorkflowPoller | None:
        return self._pollers.get(workflow_id)

    def start_polling(
        self,
        workflow_id: str,
        on_update: WorkflowCallback | None = None,
        on_complete: WorkflowCallback | None = None,
        on_failure: FailureCallback | None = None,
        *,
        tier: PollingTier = PollingTier.FAST,
        interval: float | None = None,
        budget: float | None = None,
        gateway: RoadmapGateway | None = None,
    ) -> WorkflowPoller:
        """Start polling ``workflow_id`` and return the poller as a cancel handle."""
        previous = self._pollers.pop(workflow_id, None)
        if previous is not None and previous.cancel():
            logger.info("Replaced existing poller", workflow_id=workflow_id)

        poller = WorkflowPoller(
            gateway or self.gateway,
            workflow_id,
            interval=interval if interval is not None else tier.interval(self.settings),
            budget=budget if budget is not None else self.settings.POLL_BUDGET_SECONDS,
            on_update=on_update,
            on_complete=on_complete,
            on_failure=on_failure,
        )
        self._pollers[workflow_id] = poller
        poller.start()
        if poller.task is not None:
            poller.task.add_done_callback(lambda _task: self._discard(workflow_id, poller))
        return poller

    def cancel(self, workflow_id: str) -> bool:
        poller = self._pollers.pop(workflow_id, None)
        return poller.cancel() if poller is not None else False

    def cancel_all(self) -> int:
        """Cancel every live poller; returns how many were stopped."""
        pollers = list(self._pollers.values())
        self._pollers.clear()
        return sum(1 for poller in pollers if poller.cancel())

    def _discard(self, workflow_id: str, poller: WorkflowPoller) -> None:
        if self._pollers.get(workflow_id) is poller:
            del self._pollers[workflow_id]
