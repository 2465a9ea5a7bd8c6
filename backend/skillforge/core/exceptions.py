"""Error taxonomy for roadmap generation and workflow orchestration.

Recoverable errors (``SourceUnavailable``, ``MalformedResponse``,
``StatusCheckFailed``) are handled inside the services that raise them.
``RoadmapConflict``, ``GenerationFailed``, ``WorkflowFailed`` and
``WorkflowTimedOut`` always reach the caller.
"""

from typing import Any


class SkillForgeError(Exception):
    """Base class for all orchestration errors.

    Carries a ``context`` dict that is merged into log lines and API error
    payloads.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and API responses."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class GatewayError(SkillForgeError):
    """Transport failure or non-success HTTP status from the backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.status_code = status_code


class RoadmapConflict(GatewayError):
    """The user already holds an active roadmap (HTTP 409)."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, status_code=409, context=context)


class MalformedResponse(SkillForgeError):
    """A backend response did not match the expected shape."""


class SourceUnavailable(SkillForgeError):
    """The research-capable generation source reports it is not operational."""


class GenerationFailed(SkillForgeError):
    """Every generation source was exhausted without producing a roadmap."""


class StatusCheckFailed(SkillForgeError):
    """Checking a user's saved roadmap state failed transiently."""


class WorkflowFailed(SkillForgeError):
    """The server reported a terminal failure for an async workflow."""

    def __init__(self, workflow_id: str, message: str) -> None:
        super().__init__(message, {"workflow_id": workflow_id})
        self.workflow_id = workflow_id


class WorkflowTimedOut(SkillForgeError):
    """The client gave up polling before the server reached a terminal state.

    The workflow may still complete server-side.
    """

    def __init__(self, workflow_id: str, budget_seconds: float) -> None:
        super().__init__(
            f"Workflow {workflow_id} did not finish within {budget_seconds:g}s",
            {"workflow_id": workflow_id, "budget_seconds": budget_seconds},
        )
        self.workflow_id = workflow_id
        self.budget_seconds = budget_seconds
