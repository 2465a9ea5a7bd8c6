"""Personalized roadmap workflow routes."""

from fastapi import APIRouter, HTTPException, status

from skillforge.api.deps import OrchestratorDep
from skillforge.core.logging import get_logger
from skillforge.schemas.workflow import PersonalizedRoadmapRequest, WorkflowView
from skillforge.services.workflow_poller import WorkflowPoller

logger = get_logger(__name__)
router = APIRouter(prefix="/workflows", tags=["workflows"])


def _view(poller: WorkflowPoller) -> WorkflowView:
    return WorkflowView(
        workflow_id=poller.workflow_id,
        state=poller.state.value,
        ticks=poller.ticks,
        workflow=poller.workflow,
        error=poller.error.to_dict() if poller.error else None,
    )


@router.post("", response_model=WorkflowView, status_code=status.HTTP_202_ACCEPTED)
async def start_workflow(
    data: PersonalizedRoadmapRequest,
    orchestrator: OrchestratorDep,
) -> WorkflowView:
    """Submit a personalized roadmap generation and start polling it.

    Progress can be followed on ``/ws/workflows/{workflow_id}`` or by
    reading this resource.
    """
    poller = await orchestrator.start_personalized(data)
    return _view(poller)


@router.get("/{workflow_id}", response_model=WorkflowView)
async def get_workflow(workflow_id: str, orchestrator: OrchestratorDep) -> WorkflowView:
    """State of a workflow.

    While a poller is live its last observation is returned; otherwise the
    backend is asked directly and ``state`` is empty.
    """
    poller = orchestrator.pollers.get(workflow_id)
    if poller:
        return _view(poller)
    workflow = await orchestrator.get_workflow_status(workflow_id)
    return WorkflowView(workflow_id=workflow_id, workflow=workflow)


@router.delete("/{workflow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_workflow(workflow_id: str, orchestrator: OrchestratorDep) -> None:
    """Stop polling a workflow. The server-side job is not affected."""
    if not orchestrator.cancel_workflow(workflow_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active poller for this workflow",
        )
    logger.info("Workflow polling cancelled by client", workflow_id=workflow_id)
