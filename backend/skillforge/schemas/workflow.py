"""Personalized roadmap workflow schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import field_validator

from skillforge.schemas.common import CamelModel
from skillforge.schemas.roadmap import Roadmap


class WorkflowStatus(str, Enum):
    """Server-side workflow status."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({WorkflowStatus.COMPLETED, WorkflowStatus.FAILED})


class Workflow(CamelModel):
    """Read-only client projection of a server-tracked generation job."""

    workflow_id: str
    target_skill: str = ""
    status: WorkflowStatus
    current_stage: str = ""
    progress: int = 0
    created_at: datetime | None = None
    completed_at: datetime | None = None
    roadmap_id: str | None = None
    roadmap: Roadmap | None = None
    error: str | None = None

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp_progress(cls, value: Any) -> int:
        if value is None:
            return 0
        return max(0, min(100, int(value)))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def has_roadmap(self) -> bool:
        return self.roadmap is not None or bool(self.roadmap_id)

    def snapshot(self) -> tuple[WorkflowStatus, str, int]:
        """What observers see: status, stage and progress."""
        return (self.status, self.current_stage, self.progress)


class PersonalizedRoadmapRequest(CamelModel):
    """Body of ``POST /personalized-roadmap/generate``."""

    target_skill: str
    learning_style: str | None = None
    time_commitment: str | None = None
    current_level: str | None = None


class WorkflowSubmission(CamelModel):
    """Response of ``POST /personalized-roadmap/generate``."""

    workflow_id: str
    message: str = ""


class WorkflowView(CamelModel):
    """What the API reports about a workflow being polled."""

    workflow_id: str
    state: str | None = None
    ticks: int = 0
    workflow: Workflow | None = None
    error: dict[str, Any] | None = None
