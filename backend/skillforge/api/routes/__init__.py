"""API routes."""

from skillforge.api.routes import catalog, roadmaps, websocket, workflows

__all__ = ["catalog", "roadmaps", "websocket", "workflows"]
