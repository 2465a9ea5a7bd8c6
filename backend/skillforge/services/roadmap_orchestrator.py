"""Roadmap orchestrator.

Single entry point that wires the gateway, fallback coordinator, resolution
router and workflow pollers together. Reads that the backend may serve from
its cache return envelopes whose ``from_cache`` flag is passed through
untouched; it is reported, never acted on.
"""

from skillforge.core.config import Settings, get_settings
from skillforge.core.logging import get_logger
from skillforge.schemas.roadmap import (
    GenerationRequest,
    LevelSummaryResponse,
    Roadmap,
    RoadmapDetailsResponse,
)
from skillforge.schemas.selection import ResolutionResult, RoadmapSelection
from skillforge.schemas.workflow import PersonalizedRoadmapRequest, Workflow, WorkflowSubmission
from skillforge.services.gateway import RoadmapGateway
from skillforge.services.generation_coordinator import FallbackGenerationCoordinator
from skillforge.services.resolution_router import RoadmapResolutionRouter
from skillforge.services.workflow_poller import (
    FailureCallback,
    PollingTier,
    WorkflowCallback,
    WorkflowPoller,
    WorkflowPollerRegistry,
)

logger = get_logger(__name__)


class RoadmapOrchestrator:
    """Facade over roadmap generation, resolution and workflow polling."""

    def __init__(
        self,
        gateway: RoadmapGateway,
        settings: Settings | None = None,
        pollers: WorkflowPollerRegistry | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.gateway = gateway
        self.coordinator = FallbackGenerationCoordinator(gateway, self.settings)
        self.router = RoadmapResolutionRouter(gateway, self.settings)
        self.pollers = (
            pollers if pollers is not None else WorkflowPollerRegistry(gateway, self.settings)
        )

    def for_token(self, token: str | None) -> "RoadmapOrchestrator":
        """Orchestrator acting with the caller's credentials.

        The poller registry is shared so that one workflow never gets two
        pollers, whichever request started it.
        """
        if token is None:
            return self
        return RoadmapOrchestrator(self.gateway.with_token(token), self.settings, self.pollers)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate_roadmap(self, request: GenerationRequest) -> Roadmap:
        return await self.coordinator.generate(request)

    async def resolve(self, selection: RoadmapSelection) -> ResolutionResult:
        return await self.router.resolve(selection)

    async def submit_personalized(self, request: PersonalizedRoadmapRequest) -> WorkflowSubmission:
        submission = await self.gateway.submit_personalized(request)
        logger.info(
            "Personalized roadmap workflow submitted",
            workflow_id=submission.workflow_id,
            target_skill=request.target_skill,
        )
        return submission

    def watch_workflow(
        self,
        workflow_id: str,
        on_update: WorkflowCallback | None = None,
        on_complete: WorkflowCallback | None = None,
        on_failure: FailureCallback | None = None,
        *,
        tier: PollingTier = PollingTier.FAST,
    ) -> WorkflowPoller:
        """Poll a workflow; replaces any poller already watching it."""
        return self.pollers.start_polling(
            workflow_id,
            on_update,
            on_complete,
            on_failure,
            tier=tier,
            gateway=self.gateway,
        )

    async def start_personalized(
        self,
        request: PersonalizedRoadmapRequest,
        on_update: WorkflowCallback | None = None,
        on_complete: WorkflowCallback | None = None,
        on_failure: FailureCallback | None = None,
    ) -> WorkflowPoller:
        """Submit a personalized generation and start polling it."""
        submission = await self.submit_personalized(request)
        return self.watch_workflow(submission.workflow_id, on_update, on_complete, on_failure)

    def cancel_workflow(self, workflow_id: str) -> bool:
        return self.pollers.cancel(workflow_id)

    async def get_workflow_status(self, workflow_id: str) -> Workflow:
        """One-off status read, independent of any poller."""
        return await self.gateway.workflow_status(workflow_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user_roadmap(self, user_id: str) -> Roadmap:
        return await self.gateway.get_roadmap(user_id)

    async def get_roadmap_details(self, description: str) -> RoadmapDetailsResponse:
        response = await self.gateway.roadmap_details(description)
        logger.info("Roadmap details read", from_cache=response.from_cache)
        return response

    async def summarize_level(self, roadmap_id: str, milestone_id: str) -> LevelSummaryResponse:
        response = await self.gateway.summarize_level(roadmap_id, milestone_id)
        logger.info(
            "Level summary read",
            roadmap_id=roadmap_id,
            milestone_id=milestone_id,
            from_cache=response.from_cache,
        )
        return response

    def shutdown(self) -> int:
        """Cancel every live poller."""
        stopped = self.pollers.cancel_all()
        if stopped:
            logger.info("Cancelled workflow pollers", count=stopped)
        return stopped
