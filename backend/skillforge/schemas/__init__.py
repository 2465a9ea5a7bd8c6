"""Pydantic schemas."""

from skillforge.schemas.generation import (
    BaselineRoadmapPayload,
    ResearchRoadmapPayload,
    ResearchRoadmapRequest,
    ResearchStatus,
    SourceRoadmapPayload,
    normalize_source_roadmap,
)
from skillforge.schemas.roadmap import (
    AiLevelSummary,
    CatalogRoadmap,
    DifficultyLevel,
    GenerateAndSaveRequest,
    GenerateAndSaveResponse,
    GenerationRequest,
    LevelSummaryResponse,
    Milestone,
    Roadmap,
    RoadmapDetailsResponse,
    RoadmapProgress,
    RoadmapStatus,
    RoadmapStep,
    SavedRoadmapStatus,
)
from skillforge.schemas.selection import (
    CatalogRoadmapRef,
    PersistedRoadmapRef,
    ResolutionOutcome,
    ResolutionResult,
    RoadmapSelection,
    classify_roadmap_ref,
)
from skillforge.schemas.workflow import (
    PersonalizedRoadmapRequest,
    Workflow,
    WorkflowStatus,
    WorkflowSubmission,
)

__all__ = [
    "AiLevelSummary",
    "BaselineRoadmapPayload",
    "CatalogRoadmap",
    "CatalogRoadmapRef",
    "DifficultyLevel",
    "GenerateAndSaveRequest",
    "GenerateAndSaveResponse",
    "GenerationRequest",
    "LevelSummaryResponse",
    "Milestone",
    "PersistedRoadmapRef",
    "PersonalizedRoadmapRequest",
    "ResearchRoadmapPayload",
    "ResearchRoadmapRequest",
    "ResearchStatus",
    "ResolutionOutcome",
    "ResolutionResult",
    "Roadmap",
    "RoadmapDetailsResponse",
    "RoadmapProgress",
    "RoadmapSelection",
    "RoadmapStatus",
    "RoadmapStep",
    "SavedRoadmapStatus",
    "SourceRoadmapPayload",
    "Workflow",
    "WorkflowStatus",
    "WorkflowSubmission",
    "classify_roadmap_ref",
    "normalize_source_roadmap",
]
