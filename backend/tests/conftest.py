"""Shared fixtures: a scripted SkillForge backend behind httpx.MockTransport."""

import inspect
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
import pytest
import pytest_asyncio

from skillforge.core.config import Settings
from skillforge.services.gateway import RoadmapGateway
from skillforge.services.roadmap_orchestrator import RoadmapOrchestrator

BASE_URL = "http://backend.test/api"
SAVED_ID = "507f191e810c19729de860ea"


@dataclass
class Reply:
    """A canned response; a fresh ``httpx.Response`` is built per request."""

    status_code: int = 200
    body: Any = None

    def build(self) -> httpx.Response:
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)


@dataclass
class Call:
    method: str
    path: str
    body: Any
    headers: httpx.Headers


class FakeBackend:
    """Records every call and answers from per-route scripts.

    A route scripted with several responders answers them in order and
    then keeps repeating the last one. Responders can be a JSON body, a
    ``Reply``, an exception to raise, or a (sync or async) callable that
    takes the request.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._routes: dict[tuple[str, str], list[Any]] = {}

    def on(self, method: str, path: str, *responders: Any) -> "FakeBackend":
        self._routes[(method.upper(), path)] = list(responders)
        return self

    def paths(self) -> list[str]:
        return [f"{call.method} {call.path}" for call in self.calls]

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call.method == method and call.path == path)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(request.method, path, body, request.headers))

        responders = self._routes.get((request.method, path))
        if not responders:
            return httpx.Response(404, json={"message": f"No route for {path}"})
        responder = responders.pop(0) if len(responders) > 1 else responders[0]

        if isinstance(responder, Exception):
            raise responder
        if isinstance(responder, Reply):
            return responder.build()
        if callable(responder):
            result = responder(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        return httpx.Response(200, json=responder)


def workflow_json(status: str, progress: int = 0, stage: str = "", **extra: Any) -> dict:
    return {
        "workflowId": "wf-1",
        "targetSkill": "Python",
        "status": status,
        "currentStage": stage,
        "progress": progress,
        "createdAt": "2024-05-01T10:00:00Z",
        **extra,
    }


def roadmap_json(roadmap_id: str = SAVED_ID, title: str = "Python Roadmap", **extra: Any) -> dict:
    return {
        "_id": roadmap_id,
        "userId": "user-1",
        "title": title,
        "description": "Learn Python",
        "category": "Programming",
        "difficultyLevel": "Intermediate",
        "milestones": [
            {"_id": "m1", "title": "Basics", "order": 1, "isCompleted": False},
        ],
        "steps": [{"day": 1, "topic": "Syntax", "lessonIds": ["l1"]}],
        "status": "active",
        **extra,
    }


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        API_BASE_URL=BASE_URL,
        POLL_INTERVAL_FAST=0.01,
        POLL_INTERVAL_NORMAL=0.02,
        POLL_INTERVAL_SLOW=0.05,
        POLL_BUDGET_SECONDS=5.0,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def http_client(backend: FakeBackend):
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(backend.handle))
    yield client
    await client.aclose()


@pytest.fixture
def gateway(http_client: httpx.AsyncClient) -> RoadmapGateway:
    return RoadmapGateway(http_client)


@pytest_asyncio.fixture
async def orchestrator(gateway: RoadmapGateway, test_settings: Settings):
    orchestrator = RoadmapOrchestrator(gateway, test_settings)
    yield orchestrator
    orchestrator.shutdown()


def record(events: list) -> Callable[[Any], None]:
    """Callback that appends whatever it is given to ``events``."""
    return events.append
