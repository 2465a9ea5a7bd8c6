"""Catalog API routes."""

from fastapi import APIRouter, HTTPException, status

from skillforge.api.deps import OrchestratorDep
from skillforge.schemas.roadmap import CatalogRoadmap
from skillforge.schemas.selection import ResolutionOutcome, ResolutionResult
from skillforge.services import catalog

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _get_template(slug: str) -> CatalogRoadmap:
    template = catalog.get_catalog_roadmap(slug)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Catalog roadmap not found",
        )
    return template


@router.get("", response_model=list[CatalogRoadmap])
async def list_catalog() -> list[CatalogRoadmap]:
    return catalog.list_catalog()


@router.get("/{slug}", response_model=CatalogRoadmap)
async def get_catalog_roadmap(slug: str) -> CatalogRoadmap:
    return _get_template(slug)


@router.post("/{slug}/resolve", response_model=ResolutionResult)
async def resolve_catalog_roadmap(slug: str, orchestrator: OrchestratorDep) -> ResolutionResult:
    """Start a roadmap seeded from a catalog template."""
    selection = catalog.selection_from_catalog(_get_template(slug))
    result = await orchestrator.resolve(selection)
    if result.outcome is ResolutionOutcome.CONFLICT:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
    return result
