"""Tests for workflow polling."""

import asyncio

import httpx
import pytest

from conftest import FakeBackend, Reply, record, workflow_json
from skillforge.core.config import Settings
from skillforge.core.exceptions import WorkflowFailed, WorkflowTimedOut
from skillforge.services.gateway import RoadmapGateway
from skillforge.services.workflow_poller import (
    PollerState,
    PollingTier,
    WorkflowPoller,
    WorkflowPollerRegistry,
)

STATUS_PATH = "/personalized-roadmap/status/wf-1"
COMPLETED = workflow_json("completed", 100, "done", roadmapId="r-1")


def _poller(gateway: RoadmapGateway, **kwargs) -> WorkflowPoller:
    kwargs.setdefault("interval", 0.01)
    kwargs.setdefault("budget", 2.0)
    return WorkflowPoller(gateway, "wf-1", **kwargs)


class TestPollingLifecycle:
    """Updates, completion and failure."""

    @pytest.mark.asyncio
    async def test_progress_then_completion(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on(
            "GET",
            STATUS_PATH,
            workflow_json("pending"),
            workflow_json("in_progress", 30, "research"),
            workflow_json("in_progress", 80, "planning"),
            COMPLETED,
        )
        updates, completed, failures = [], [], []

        poller = _poller(
            gateway,
            on_update=record(updates),
            on_complete=record(completed),
            on_failure=record(failures),
        ).start()
        state = await poller.wait()

        assert state is PollerState.COMPLETED
        assert [w.progress for w in updates] == [30, 80]
        assert len(completed) == 1
        assert completed[0].roadmap_id == "r-1"
        assert failures == []
        assert poller.ticks == 4

    @pytest.mark.asyncio
    async def test_unchanged_progress_is_reported_once(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on(
            "GET",
            STATUS_PATH,
            workflow_json("in_progress", 50, "research"),
            workflow_json("in_progress", 50, "research"),
            workflow_json("in_progress", 50, "research"),
            COMPLETED,
        )
        updates = []

        await _poller(gateway, on_update=record(updates)).start().wait()

        assert len(updates) == 1

    @pytest.mark.asyncio
    async def test_completed_without_roadmap_keeps_polling(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("completed", 100, "saving"), COMPLETED)
        updates, completed = [], []

        poller = _poller(gateway, on_update=record(updates), on_complete=record(completed))
        await poller.start().wait()

        assert poller.state is PollerState.COMPLETED
        assert len(updates) == 1
        assert len(completed) == 1
        assert poller.ticks == 2

    @pytest.mark.asyncio
    async def test_failure_carries_server_message(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on(
            "GET",
            STATUS_PATH,
            workflow_json("in_progress", 10, "research"),
            workflow_json("failed", 10, "research", error="Research agent crashed"),
        )
        completed, failures = [], []

        poller = _poller(gateway, on_complete=record(completed), on_failure=record(failures))
        state = await poller.start().wait()

        assert state is PollerState.FAILED
        assert completed == []
        assert len(failures) == 1
        assert isinstance(failures[0], WorkflowFailed)
        assert failures[0].message == "Research agent crashed"
        assert poller.error is failures[0]

    @pytest.mark.asyncio
    async def test_transient_errors_do_not_stop_polling(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on(
            "GET",
            STATUS_PATH,
            Reply(502, {"message": "bad gateway"}),
            httpx.ConnectError("refused"),
            COMPLETED,
        )
        completed = []

        poller = _poller(gateway, on_complete=record(completed))
        state = await poller.start().wait()

        assert state is PollerState.COMPLETED
        assert len(completed) == 1
        assert backend.count("GET", STATUS_PATH) == 3

    @pytest.mark.asyncio
    async def test_async_callbacks(self, backend: FakeBackend, gateway: RoadmapGateway) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 20, "research"), COMPLETED)
        seen = []

        async def on_update(workflow) -> None:
            await asyncio.sleep(0)
            seen.append(("update", workflow.progress))

        async def on_complete(workflow) -> None:
            seen.append(("complete", workflow.roadmap_id))

        await _poller(gateway, on_update=on_update, on_complete=on_complete).start().wait()

        assert seen == [("update", 20), ("complete", "r-1")]

    @pytest.mark.asyncio
    async def test_observer_errors_do_not_stop_polling(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 20, "research"), COMPLETED)

        def on_update(workflow) -> None:
            raise RuntimeError("UI went away")

        poller = _poller(gateway, on_update=on_update)
        assert await poller.start().wait() is PollerState.COMPLETED

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_and_notifies(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, RuntimeError("boom"))
        failures = []

        poller = _poller(gateway, on_failure=record(failures))
        state = await asyncio.wait_for(poller.start().wait(), timeout=2)

        assert state is PollerState.FAILED
        assert len(failures) == 1
        assert isinstance(failures[0], WorkflowFailed)
        assert "crashed" in failures[0].message
        assert poller.error is failures[0]

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self, backend: FakeBackend, gateway: RoadmapGateway) -> None:
        backend.on("GET", STATUS_PATH, COMPLETED)
        poller = _poller(gateway).start()

        with pytest.raises(RuntimeError):
            poller.start()
        await poller.wait()

    @pytest.mark.asyncio
    async def test_rejects_non_positive_interval(self, gateway: RoadmapGateway) -> None:
        with pytest.raises(ValueError):
            _poller(gateway, interval=0)


class TestTermination:
    """Budget exhaustion, cancellation and single terminal transition."""

    @pytest.mark.asyncio
    async def test_budget_exhaustion_times_out(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        failures = []

        loop = asyncio.get_running_loop()
        started = loop.time()
        poller = _poller(gateway, interval=0.01, budget=0.1, on_failure=record(failures))
        state = await poller.start().wait()
        elapsed = loop.time() - started

        assert state is PollerState.CANCELLED
        assert poller.timed_out
        assert len(failures) == 1
        assert isinstance(failures[0], WorkflowTimedOut)
        assert not isinstance(failures[0], WorkflowFailed)
        assert elapsed < 1.0

        ticks = backend.count("GET", STATUS_PATH)
        await asyncio.sleep(0.05)
        assert backend.count("GET", STATUS_PATH) == ticks

    @pytest.mark.asyncio
    async def test_hung_query_is_bounded_by_budget(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        async def hang(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(30)
            return httpx.Response(200, json=COMPLETED)

        backend.on("GET", STATUS_PATH, hang)
        failures = []

        poller = _poller(gateway, budget=0.1, on_failure=record(failures))
        poller.start()
        await asyncio.sleep(0.05)
        assert backend.count("GET", STATUS_PATH) == 1

        state = await asyncio.wait_for(poller.wait(), timeout=2)

        assert state is PollerState.CANCELLED
        assert isinstance(failures[0], WorkflowTimedOut)
        assert poller.ticks == 0
        assert backend.count("GET", STATUS_PATH) == 1

    @pytest.mark.asyncio
    async def test_slow_observer_is_bounded_by_budget(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        failures = []

        async def on_update(workflow) -> None:
            await asyncio.sleep(30)

        poller = _poller(gateway, budget=0.1, on_update=on_update, on_failure=record(failures))
        state = await asyncio.wait_for(poller.start().wait(), timeout=2)

        assert state is PollerState.CANCELLED
        assert poller.timed_out
        assert len(failures) == 1
        assert isinstance(failures[0], WorkflowTimedOut)

    @pytest.mark.asyncio
    async def test_ticks_never_overlap(self, backend: FakeBackend, gateway: RoadmapGateway) -> None:
        in_flight = 0
        peak = 0

        async def slow_status(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            try:
                await asyncio.sleep(0.05)
            finally:
                in_flight -= 1
            return httpx.Response(200, json=workflow_json("in_progress", 50, "research"))

        backend.on("GET", STATUS_PATH, slow_status)

        poller = _poller(gateway, interval=0.01, budget=0.3)
        await asyncio.wait_for(poller.start().wait(), timeout=2)

        assert poller.timed_out
        assert poller.ticks >= 2
        assert peak == 1

    @pytest.mark.asyncio
    async def test_cancel_stops_polling_silently(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        updates, completed, failures = [], [], []

        poller = _poller(
            gateway,
            on_update=record(updates),
            on_complete=record(completed),
            on_failure=record(failures),
        ).start()
        await asyncio.sleep(0.05)

        assert poller.cancel() is True
        state = await poller.wait()
        ticks = backend.count("GET", STATUS_PATH)
        await asyncio.sleep(0.05)

        assert state is PollerState.CANCELLED
        assert poller.error is None
        assert completed == []
        assert failures == []
        assert backend.count("GET", STATUS_PATH) == ticks

    @pytest.mark.asyncio
    async def test_terminal_transition_happens_once(
        self, backend: FakeBackend, gateway: RoadmapGateway
    ) -> None:
        backend.on("GET", STATUS_PATH, COMPLETED)
        completed = []

        poller = _poller(gateway, on_complete=record(completed))
        await poller.start().wait()

        assert poller.cancel() is False
        assert poller.state is PollerState.COMPLETED
        assert len(completed) == 1


class TestRegistry:
    """One poller per workflow, independent across workflows."""

    @pytest.mark.asyncio
    async def test_restart_replaces_previous_poller(
        self, backend: FakeBackend, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        registry = WorkflowPollerRegistry(gateway, test_settings)

        first = registry.start_polling("wf-1")
        second = registry.start_polling("wf-1")

        assert first.state is PollerState.CANCELLED
        assert registry.get("wf-1") is second
        assert len(registry) == 1
        assert registry.cancel_all() == 1

    @pytest.mark.asyncio
    async def test_cancelling_one_leaves_others_running(
        self, backend: FakeBackend, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        backend.on(
            "GET",
            "/personalized-roadmap/status/wf-2",
            workflow_json("in_progress", 10, "research", workflowId="wf-2"),
            workflow_json("completed", 100, "done", workflowId="wf-2", roadmapId="r-2"),
        )
        registry = WorkflowPollerRegistry(gateway, test_settings)
        completed = []

        first = registry.start_polling("wf-1")
        second = registry.start_polling("wf-2", on_complete=record(completed))
        assert registry.cancel("wf-1") is True

        assert await second.wait() is PollerState.COMPLETED
        assert first.state is PollerState.CANCELLED
        assert [w.workflow_id for w in completed] == ["wf-2"]

    @pytest.mark.asyncio
    async def test_finished_pollers_are_discarded(
        self, backend: FakeBackend, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        backend.on("GET", STATUS_PATH, COMPLETED)
        registry = WorkflowPollerRegistry(gateway, test_settings)

        poller = registry.start_polling("wf-1")
        await poller.wait()
        await asyncio.sleep(0)

        assert "wf-1" not in registry
        assert registry.cancel("wf-1") is False

    @pytest.mark.asyncio
    async def test_tier_sets_interval(
        self, backend: FakeBackend, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        registry = WorkflowPollerRegistry(gateway, test_settings)

        poller = registry.start_polling("wf-1", tier=PollingTier.SLOW)

        assert poller.interval == test_settings.POLL_INTERVAL_SLOW
        assert poller.budget == test_settings.POLL_BUDGET_SECONDS
        registry.cancel_all()

    @pytest.mark.asyncio
    async def test_explicit_zero_overrides_are_rejected(
        self, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        registry = WorkflowPollerRegistry(gateway, test_settings)

        with pytest.raises(ValueError):
            registry.start_polling("wf-1", interval=0)
        with pytest.raises(ValueError):
            registry.start_polling("wf-1", budget=0)
        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_explicit_overrides_win_over_tier(
        self, backend: FakeBackend, gateway: RoadmapGateway, test_settings: Settings
    ) -> None:
        backend.on("GET", STATUS_PATH, workflow_json("in_progress", 50, "research"))
        registry = WorkflowPollerRegistry(gateway, test_settings)

        poller = registry.start_polling("wf-1", tier=PollingTier.SLOW, interval=0.03, budget=1.5)

        assert poller.interval == 0.03
        assert poller.budget == 1.5
        registry.cancel_all()
