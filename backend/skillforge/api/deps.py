"""API dependencies."""

from typing import Annotated

from fastapi import Depends, Request, WebSocket

from skillforge.core.auth import AuthTokenDep, get_auth_token_from_ws
from skillforge.services.roadmap_orchestrator import RoadmapOrchestrator


def get_orchestrator(request: Request, token: AuthTokenDep) -> RoadmapOrchestrator:
    """Orchestrator bound to the caller's bearer token."""
    orchestrator: RoadmapOrchestrator = request.app.state.orchestrator
    return orchestrator.for_token(token)


def get_ws_orchestrator(websocket: WebSocket) -> RoadmapOrchestrator:
    orchestrator: RoadmapOrchestrator = websocket.app.state.orchestrator
    return orchestrator.for_token(get_auth_token_from_ws(websocket))


OrchestratorDep = Annotated[RoadmapOrchestrator, Depends(get_orchestrator)]
WsOrchestratorDep = Annotated[RoadmapOrchestrator, Depends(get_ws_orchestrator)]
