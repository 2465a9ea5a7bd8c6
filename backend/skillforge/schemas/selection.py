"""Roadmap selection and resolution schemas."""

import re
from enum import Enum
from typing import Annotated, Literal

from pydantic import Field

from skillforge.schemas.common import CamelModel
from skillforge.schemas.roadmap import DifficultyLevel, Roadmap

# Persisted store records use 24-hex-character object ids
PERSISTED_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class PersistedRoadmapRef(CamelModel):
    """Reference to a user-owned, store-backed roadmap record."""

    kind: Literal["persisted"] = "persisted"
    roadmap_id: str = Field(pattern=PERSISTED_ID_PATTERN.pattern)


class CatalogRoadmapRef(CamelModel):
    """Reference to a static catalog template."""

    kind: Literal["catalog"] = "catalog"
    slug: str = Field(min_length=1)


RoadmapRef = Annotated[
    PersistedRoadmapRef | CatalogRoadmapRef,
    Field(discriminator="kind"),
]


def classify_roadmap_ref(identifier: str) -> PersistedRoadmapRef | CatalogRoadmapRef:
    """Build a typed reference from a raw identifier.

    Only the boundary that receives untyped identifiers (API input,
    recommendation lists) should call this; everything downstream branches
    on ``ref.kind``.
    """
    identifier = identifier.strip()
    if PERSISTED_ID_PATTERN.match(identifier):
        return PersistedRoadmapRef(roadmap_id=identifier)
    return CatalogRoadmapRef(slug=identifier)


class RoadmapSelection(CamelModel):
    """A roadmap item the user picked from the catalog or recommendations."""

    ref: RoadmapRef
    title: str
    description: str = ""
    category: str = "General"
    difficulty_level: DifficultyLevel | None = None
    timeframe_weeks: int | None = Field(default=None, gt=0)
    daily_time_minutes: int | None = Field(default=None, gt=0)

    @classmethod
    def from_identifier(cls, identifier: str, **display: object) -> "RoadmapSelection":
        return cls(ref=classify_roadmap_ref(identifier), **display)


class ResolutionOutcome(str, Enum):
    LOADED = "loaded"
    CREATED = "created"
    CONFLICT = "conflict"


class ResolutionResult(CamelModel):
    """What the resolution router decided.

    ``roadmap`` is ``None`` only for conflicts, in which case ``message`` is
    the server's explanation verbatim.
    """

    outcome: ResolutionOutcome
    roadmap: Roadmap | None = None
    is_new: bool = False
    message: str = ""


class ResolveRequest(CamelModel):
    """API body for resolving a roadmap item by its raw identifier."""

    identifier: str = Field(min_length=1)
    title: str
    description: str = ""
    category: str = "General"
    difficulty_level: DifficultyLevel | None = None
    timeframe_weeks: int | None = Field(default=None, gt=0)
    daily_time_minutes: int | None = Field(default=None, gt=0)

    def to_selection(self) -> RoadmapSelection:
        return RoadmapSelection.from_identifier(
            self.identifier,
            **self.model_dump(exclude={"identifier"}),
        )
