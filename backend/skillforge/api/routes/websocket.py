"""WebSocket route streaming workflow progress."""

import asyncio
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from skillforge.api.deps import WsOrchestratorDep
from skillforge.core.exceptions import WorkflowFailed, WorkflowTimedOut
from skillforge.core.logging import get_logger
from skillforge.schemas.workflow import Workflow
from skillforge.services.websocket_message_sender import (
    send_done,
    send_error,
    send_progress,
    send_roadmap,
    send_watching,
    send_workflow_error,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/ws", tags=["websocket"])


async def _listen(websocket: WebSocket) -> str:
    """Read client messages until it disconnects or asks to cancel."""
    while True:
        try:
            text = await websocket.receive_text()
        except WebSocketDisconnect:
            return "disconnected"
        try:
            message = json.loads(text)
        except json.JSONDecodeError:
            await send_error(websocket, message="Expected a JSON message")
            continue
        if isinstance(message, dict) and message.get("type") == "cancel":
            return "cancel"


@router.websocket("/workflows/{workflow_id}")
async def watch_workflow(
    websocket: WebSocket,
    workflow_id: str,
    orchestrator: WsOrchestratorDep,
) -> None:
    """Poll a workflow and push its progress to the client.

    Events: ``watching``, ``progress``, ``roadmap``, ``error``, ``timeout``
    and a final ``done``. Sending ``{"type": "cancel"}`` or disconnecting
    stops the poller.
    """
    await websocket.accept()
    logger.info("WebSocket connected", workflow_id=workflow_id)

    async def on_update(workflow: Workflow) -> None:
        await send_progress(websocket, workflow=workflow)

    async def on_complete(workflow: Workflow) -> None:
        await send_roadmap(websocket, workflow=workflow)

    async def on_failure(error: WorkflowFailed | WorkflowTimedOut) -> None:
        await send_workflow_error(websocket, error=error)

    await send_watching(websocket, workflow_id=workflow_id)
    poller = orchestrator.watch_workflow(workflow_id, on_update, on_complete, on_failure)

    listener = asyncio.create_task(_listen(websocket))
    try:
        await asyncio.wait({listener, poller.task}, return_when=asyncio.FIRST_COMPLETED)
        if listener.done():
            reason = listener.result()
            poller.cancel()
            logger.info("Workflow watch stopped by client", workflow_id=workflow_id, reason=reason)
            if reason == "disconnected":
                return
        else:
            listener.cancel()
        await send_done(websocket, state=poller.state.value)
        await websocket.close()
    except WebSocketDisconnect:
        poller.cancel()
        logger.info("WebSocket disconnected", workflow_id=workflow_id)
    finally:
        if not listener.done():
            listener.cancel()
