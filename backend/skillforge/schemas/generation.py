"""Generation source payloads and their normalization.

The research agent and the baseline LLM endpoint answer with different
shapes. Each is modelled separately and tagged with ``source``;
``normalize_source_roadmap`` is the only place a source shape becomes a
canonical ``Roadmap``.
"""

from typing import Annotated, Any, Literal

from pydantic import Field

from skillforge.core.exceptions import MalformedResponse
from skillforge.schemas.common import CamelModel
from skillforge.schemas.roadmap import (
    GenerationRequest,
    Roadmap,
    RoadmapProgress,
    RoadmapStep,
)


class ResearchStatus(CamelModel):
    """``GET /research/status``."""

    operational: bool = False


class ResearchRoadmapRequest(CamelModel):
    """Body of ``POST /research/roadmap``."""

    topic: str
    level: str
    timeframe: str
    daily_time_minutes: int
    focus: str
    include_projects: bool = True


class ResearchStep(CamelModel):
    """A step as the research agent emits it; every field may be missing."""

    day: Any = None
    title: Any = None
    topic: Any = None


class ResearchRoadmapBody(CamelModel):
    steps: list[ResearchStep]


class ResearchRoadmapPayload(CamelModel):
    source: Literal["research"] = "research"
    roadmap: ResearchRoadmapBody


class BaselineRoadmapPayload(CamelModel):
    source: Literal["baseline"] = "baseline"
    roadmap: Roadmap


SourceRoadmapPayload = Annotated[
    ResearchRoadmapPayload | BaselineRoadmapPayload,
    Field(discriminator="source"),
]


def _step_day(raw_day: Any, position: int) -> int:
    """Day from the payload, or the 1-based list position when unusable.

    Only positive whole numbers count; booleans and fractional values such
    as ``2.7`` or ``"2.5"`` fall back to the position.
    """
    if raw_day is None or isinstance(raw_day, bool):
        return position
    if isinstance(raw_day, float):
        day = int(raw_day) if raw_day.is_integer() else 0
    else:
        try:
            day = int(raw_day)
        except (TypeError, ValueError):
            return position
    return day if day > 0 else position


def map_research_steps(steps: list[ResearchStep]) -> list[RoadmapStep]:
    """Map research steps onto canonical steps.

    Lesson ids are not part of the research shape, so mapped steps carry
    none.
    """
    mapped = []
    for position, step in enumerate(steps, start=1):
        day = _step_day(step.day, position)
        topic = step.title or step.topic or f"Day {day}"
        mapped.append(RoadmapStep(day=day, topic=str(topic), lesson_ids=[]))
    return mapped


def normalize_source_roadmap(
    payload: SourceRoadmapPayload,
    request: GenerationRequest,
) -> Roadmap:
    """Turn a source-specific payload into a canonical roadmap.

    Raises:
        MalformedResponse: If the payload holds no steps at all.
    """
    if payload.source == "baseline":
        return payload.roadmap

    steps = map_research_steps(payload.roadmap.steps)
    if not steps:
        raise MalformedResponse("Research roadmap contains no steps", {"source": "research"})

    return Roadmap(
        title=f"{request.target_skill} Roadmap",
        difficulty_level=request.difficulty_level,
        steps=steps,
        progress=RoadmapProgress(total_steps=len(steps)),
    )
