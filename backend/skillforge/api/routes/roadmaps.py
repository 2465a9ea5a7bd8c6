"""Roadmap API routes."""

from fastapi import APIRouter, HTTPException, status

from skillforge.api.deps import OrchestratorDep
from skillforge.core.auth import CurrentUserDep
from skillforge.core.logging import get_logger
from skillforge.schemas.roadmap import (
    GenerationRequest,
    LevelSummaryResponse,
    Roadmap,
    RoadmapDetailsResponse,
    SummarizeLevelRequest,
)
from skillforge.schemas.selection import ResolutionOutcome, ResolutionResult, ResolveRequest

logger = get_logger(__name__)
router = APIRouter(prefix="/roadmaps", tags=["roadmaps"])


@router.post("/generate", response_model=Roadmap)
async def generate_roadmap(
    data: GenerationRequest,
    orchestrator: OrchestratorDep,
) -> Roadmap:
    """Generate a roadmap, using the research agent when it is available."""
    return await orchestrator.generate_roadmap(data)


@router.post("/resolve", response_model=ResolutionResult)
async def resolve_roadmap(
    data: ResolveRequest,
    orchestrator: OrchestratorDep,
) -> ResolutionResult:
    """Load the user's saved roadmap for a selection or generate a new one.

    Responds 409 with the backend's message when the user already has
    another active roadmap.
    """
    result = await orchestrator.resolve(data.to_selection())
    if result.outcome is ResolutionOutcome.CONFLICT:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    return result


@router.get("/me", response_model=Roadmap)
async def get_my_roadmap(
    user_id: CurrentUserDep,
    orchestrator: OrchestratorDep,
) -> Roadmap:
    """Get the current user's roadmap."""
    return await orchestrator.get_user_roadmap(user_id)


@router.get("/details/{description}", response_model=RoadmapDetailsResponse)
async def get_roadmap_details(
    description: str,
    orchestrator: OrchestratorDep,
) -> RoadmapDetailsResponse:
    """Roadmap details; ``fromCache`` is reported exactly as the backend sent it."""
    return await orchestrator.get_roadmap_details(description)


@router.post("/{roadmap_id}/summarize-level", response_model=LevelSummaryResponse)
async def summarize_level(
    roadmap_id: str,
    data: SummarizeLevelRequest,
    orchestrator: OrchestratorDep,
) -> LevelSummaryResponse:
    """AI summary of one milestone, possibly served from the backend cache."""
    return await orchestrator.summarize_level(roadmap_id, data.milestone_id)
