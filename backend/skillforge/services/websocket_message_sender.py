"""WebSocket message sender service.

Formats and sends workflow events to a connected UI. Every event has the
shape ``{"type": ..., "data": {...}}``.
"""

from fastapi import WebSocket

from skillforge.core.exceptions import WorkflowFailed, WorkflowTimedOut
from skillforge.core.logging import get_logger
from skillforge.schemas.workflow import Workflow

logger = get_logger(__name__)


async def _send_event(websocket: WebSocket, event_type: str, data: dict | None = None) -> None:
    """Send a WebSocket event with consistent structure.

    Args:
        websocket: WebSocket connection
        event_type: Type of event (e.g., "progress", "roadmap")
        data: Optional data payload for the event
    """
    payload: dict = {"type": event_type}
    if data is not None:
        payload["data"] = data
    await websocket.send_json(payload)


async def send_watching(websocket: WebSocket, *, workflow_id: str) -> None:
    """Acknowledge that polling started for a workflow."""
    await _send_event(websocket, "watching", {"workflowId": workflow_id})
    logger.debug("Watching sent", workflow_id=workflow_id)


async def send_progress(websocket: WebSocket, *, workflow: Workflow) -> None:
    """Send a stage/progress update."""
    await _send_event(
        websocket,
        "progress",
        {
            "workflowId": workflow.workflow_id,
            "status": workflow.status.value,
            "stage": workflow.current_stage,
            "progress": workflow.progress,
        },
    )
    logger.debug("Progress sent", workflow_id=workflow.workflow_id, progress=workflow.progress)


async def send_roadmap(websocket: WebSocket, *, workflow: Workflow) -> None:
    """Send the finished workflow together with its roadmap."""
    await _send_event(websocket, "roadmap", workflow.model_dump(mode="json", by_alias=True))
    logger.info("Roadmap sent", workflow_id=workflow.workflow_id, roadmap_id=workflow.roadmap_id)


async def send_workflow_error(
    websocket: WebSocket,
    *,
    error: WorkflowFailed | WorkflowTimedOut,
) -> None:
    """Send a terminal failure; time-outs get their own event type.

    A timed-out workflow may still finish server-side, so the UI must not
    present it as a failure.
    """
    event_type = "timeout" if isinstance(error, WorkflowTimedOut) else "error"
    await _send_event(websocket, event_type, {"workflowId": error.workflow_id, **error.to_dict()})
    logger.warning("Workflow error sent", workflow_id=error.workflow_id, event_type=event_type)


async def send_error(websocket: WebSocket, *, message: str) -> None:
    """Send a generic error message to client."""
    await _send_event(websocket, "error", {"message": message})
    logger.warning("Error sent", message=message)


async def send_done(websocket: WebSocket, *, state: str) -> None:
    """Send done event with the poller's final state."""
    await _send_event(websocket, "done", {"state": state})
    logger.info("Done sent", state=state)
