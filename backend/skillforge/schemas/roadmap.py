"""Roadmap schemas shared by the gateway, services and API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from skillforge.schemas.common import CamelModel


class DifficultyLevel(str, Enum):
    """Roadmap difficulty."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def _missing_(cls, value: object) -> "DifficultyLevel | None":
        # Backends and catalog data disagree on casing ("beginner", "BEGINNER")
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class RoadmapStatus(str, Enum):
    """Lifecycle of a user-owned roadmap."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class RoadmapStep(CamelModel):
    """A single day of a roadmap."""

    day: int
    topic: str
    lesson_ids: list[str] = Field(default_factory=list)


class Milestone(CamelModel):
    """A milestone owned by exactly one roadmap."""

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    title: str
    description: str = ""
    estimated_weeks: float | None = None
    skills: list[str] = Field(default_factory=list)
    order: int = 0
    completed: bool = Field(
        default=False,
        validation_alias=AliasChoices("completed", "isCompleted"),
    )
    resources: list[dict[str, Any]] = Field(default_factory=list)


class RoadmapProgress(CamelModel):
    """Progress counters reported by the backend."""

    completed_steps: int = 0
    total_steps: int = 0
    percentage_complete: float = 0.0


class Roadmap(CamelModel):
    """Canonical roadmap shape returned to callers."""

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id"))
    user_id: str | None = None
    title: str = ""
    description: str = ""
    category: str | None = None
    difficulty_level: DifficultyLevel | None = None
    milestones: list[Milestone] = Field(default_factory=list)
    steps: list[RoadmapStep] = Field(default_factory=list)
    progress: RoadmapProgress = Field(default_factory=RoadmapProgress)
    status: RoadmapStatus = RoadmapStatus.DRAFT

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def _lenient_difficulty(cls, value: Any) -> Any:
        if value is None or isinstance(value, DifficultyLevel):
            return value
        try:
            return DifficultyLevel(value)
        except ValueError:
            return None


class RoadmapEnvelope(CamelModel):
    """``{"roadmap": ...}`` response body."""

    roadmap: Roadmap


# ============================================================================
# Generate-and-save / saved status
# ============================================================================


class GenerateAndSaveRequest(CamelModel):
    """Body of ``POST /roadmap/generate-and-save``."""

    title: str
    description: str
    category: str
    difficulty_level: DifficultyLevel
    enable_web_scraping: bool
    timeframe_weeks: int
    daily_time_minutes: int


class GenerateAndSaveResponse(CamelModel):
    """Response of ``POST /roadmap/generate-and-save``."""

    roadmap: Roadmap
    message: str = ""
    generated_with_ai: bool = Field(default=False, alias="generatedWithAI")
    web_scraping_used: bool = False


class SavedRoadmapStatus(CamelModel):
    """Whether the current user already owns a roadmap derived from an id."""

    is_saved: bool = False
    roadmap_id: str | None = None
    status: str | None = None


# ============================================================================
# Cached reads
# ============================================================================


class AiLevelSummary(CamelModel):
    """AI-written summary of one milestone.

    Regenerable and never authoritative over milestone state. Unknown fields
    are kept so the UI receives whatever the backend produced.
    """

    model_config = ConfigDict(extra="allow")

    roadmap_id: str | None = None
    milestone_id: str | None = None
    title: str = ""
    summary: str = ""
    key_points: list[str] = Field(default_factory=list)
    generated_at: datetime | None = None


class SummarizeLevelRequest(CamelModel):
    milestone_id: str


class RoadmapDetailsResponse(CamelModel):
    """Roadmap details with the backend's cache provenance flag."""

    roadmap: Roadmap
    from_cache: bool | None = None


class LevelSummaryResponse(CamelModel):
    """Milestone summary with the backend's cache provenance flag."""

    summary: AiLevelSummary
    from_cache: bool | None = None


# ============================================================================
# Generation input
# ============================================================================


class GenerationRequest(CamelModel):
    """A user's request for a generated roadmap. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    target_skill: str = Field(min_length=1)
    weekly_hours: float | None = Field(default=None, gt=0)
    excluded_skills: tuple[str, ...] = ()
    focus_areas: tuple[str, ...] = ()
    difficulty_level: DifficultyLevel | None = None
    timeframe_weeks: int | None = Field(default=None, gt=0)

    @field_validator("target_skill")
    @classmethod
    def _strip_skill(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("target_skill must not be blank")
        return value


# ============================================================================
# Catalog
# ============================================================================


class CatalogStep(CamelModel):
    day: int
    topic: str
    lesson_id: str | None = None


class CatalogRoadmap(CamelModel):
    """Read-only template roadmap identified by a human-readable slug."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    category: str = "General"
    estimated_duration: str | None = None
    difficulty: DifficultyLevel | None = None
    steps: tuple[CatalogStep, ...] = ()
