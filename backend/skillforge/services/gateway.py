"""Roadmap generation gateway.

Thin async wrapper over the SkillForge backend. Each method shapes one
request, sends it and validates the response into a schema. Transport and
HTTP failures become ``GatewayError`` (``RoadmapConflict`` for 409); bodies
that do not match the schema become ``MalformedResponse``.
"""

from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from skillforge.core.config import Settings
from skillforge.core.exceptions import GatewayError, MalformedResponse, RoadmapConflict
from skillforge.core.logging import get_logger
from skillforge.schemas.generation import (
    BaselineRoadmapPayload,
    ResearchRoadmapPayload,
    ResearchRoadmapRequest,
    ResearchStatus,
)
from skillforge.schemas.roadmap import (
    GenerateAndSaveRequest,
    GenerateAndSaveResponse,
    LevelSummaryResponse,
    Roadmap,
    RoadmapDetailsResponse,
    RoadmapEnvelope,
    SavedRoadmapStatus,
    SummarizeLevelRequest,
)
from skillforge.schemas.workflow import (
    PersonalizedRoadmapRequest,
    Workflow,
    WorkflowSubmission,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def create_http_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
    """Create the shared client for backend calls."""
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        headers={"Accept": "application/json"},
        **kwargs,
    )


def _error_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return response.reason_phrase


class RoadmapGateway:
    """Request/response wrapper for roadmap endpoints. Holds no state
    besides the shared HTTP client and the caller's bearer token."""

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._token = token

    def with_token(self, token: str | None) -> "RoadmapGateway":
        """Same client, different caller credentials."""
        return RoadmapGateway(self._client, token)

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.warning("Backend request failed", method=method, path=path, error=str(e))
            raise GatewayError(
                f"Failed to reach backend for {method} {path}: {e}",
                context={"path": path},
            ) from e

        if response.status_code == httpx.codes.CONFLICT:
            message = _error_message(response)
            logger.info("Backend reported conflict", path=path, message=message)
            raise RoadmapConflict(message, context={"path": path})

        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Backend returned error",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise GatewayError(
                message,
                status_code=response.status_code,
                context={"path": path},
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(
                f"Backend returned non-JSON body for {method} {path}",
                {"path": path},
            ) from e

    @staticmethod
    def _parse(model: type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Unexpected response shape",
                path=path,
                model=model.__name__,
                errors=e.error_count(),
            )
            raise MalformedResponse(
                f"Unexpected response shape from {path}",
                {"path": path, "model": model.__name__},
            ) from e

    async def _get(self, model: type[ModelT], path: str) -> ModelT:
        return self._parse(model, await self._request("GET", path), path)

    async def _post(self, model: type[ModelT], path: str, body: Any) -> ModelT:
        return self._parse(model, await self._request("POST", path, json=body), path)

    # ------------------------------------------------------------------
    # Research agent
    # ------------------------------------------------------------------

    async def research_status(self) -> ResearchStatus:
        return await self._get(ResearchStatus, "/research/status")

    async def research_roadmap(self, request: ResearchRoadmapRequest) -> ResearchRoadmapPayload:
        return await self._post(ResearchRoadmapPayload, "/research/roadmap", request.to_wire())

    # ------------------------------------------------------------------
    # Roadmaps
    # ------------------------------------------------------------------

    async def generate_llm(self) -> BaselineRoadmapPayload:
        return await self._post(BaselineRoadmapPayload, "/roadmap/generate-llm", {})

    async def generate_and_save(self, request: GenerateAndSaveRequest) -> GenerateAndSaveResponse:
        return await self._post(
            GenerateAndSaveResponse, "/roadmap/generate-and-save", request.to_wire()
        )

    async def saved_status(self, roadmap_id: str) -> SavedRoadmapStatus:
        return await self._get(
            SavedRoadmapStatus, f"/roadmap/user/status/{quote(roadmap_id, safe='')}"
        )

    async def get_roadmap(self, key: str) -> Roadmap:
        """``GET /roadmap/{key}``; the backend keys this path by user or roadmap id."""
        envelope = await self._get(RoadmapEnvelope, f"/roadmap/{quote(key, safe='')}")
        return envelope.roadmap

    async def roadmap_details(self, description: str) -> RoadmapDetailsResponse:
        return await self._get(
            RoadmapDetailsResponse, f"/roadmap/details/{quote(description, safe='')}"
        )

    async def summarize_level(self, roadmap_id: str, milestone_id: str) -> LevelSummaryResponse:
        return await self._post(
            LevelSummaryResponse,
            f"/roadmap/{quote(roadmap_id, safe='')}/summarize-level",
            SummarizeLevelRequest(milestone_id=milestone_id).to_wire(),
        )

    # ------------------------------------------------------------------
    # Personalized workflows
    # ------------------------------------------------------------------

    async def submit_personalized(self, request: PersonalizedRoadmapRequest) -> WorkflowSubmission:
        return await self._post(
            WorkflowSubmission, "/personalized-roadmap/generate", request.to_wire()
        )

    async def workflow_status(self, workflow_id: str) -> Workflow:
        return await self._get(
            Workflow, f"/personalized-roadmap/status/{quote(workflow_id, safe='')}"
        )
