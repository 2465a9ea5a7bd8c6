"""Service layer modules."""

from skillforge.services import (
    catalog,
    gateway,
    generation_coordinator,
    resolution_router,
    roadmap_orchestrator,
    workflow_poller,
)

__all__ = [
    "catalog",
    "gateway",
    "generation_coordinator",
    "resolution_router",
    "roadmap_orchestrator",
    "workflow_poller",
]
