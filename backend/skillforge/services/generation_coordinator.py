"""Fallback generation coordinator.

Two-tier fallback, not a retry loop: the research agent is tried once and
any failure on that path (not operational, transport error, malformed
response) leads to exactly one baseline LLM generation. Only when the
baseline fails too does the caller see an error.
"""

from skillforge.core.config import Settings, get_settings
from skillforge.core.exceptions import (
    GenerationFailed,
    SkillForgeError,
    SourceUnavailable,
)
from skillforge.core.logging import get_logger
from skillforge.schemas.generation import ResearchRoadmapRequest, normalize_source_roadmap
from skillforge.schemas.roadmap import GenerationRequest, Roadmap
from skillforge.services.gateway import RoadmapGateway

logger = get_logger(__name__)


def daily_minutes_from_weekly_hours(weekly_hours: float) -> int:
    """Spread a weekly hour budget evenly across seven days."""
    return max(1, round(weekly_hours * 60 / 7))


class FallbackGenerationCoordinator:
    """Generate a roadmap from the best available source."""

    def __init__(self, gateway: RoadmapGateway, settings: Settings | None = None) -> None:
        self.gateway = gateway
        self.settings = settings or get_settings()

    def build_research_request(self, request: GenerationRequest) -> ResearchRoadmapRequest:
        """Enrich a generation request with the research agent's parameters."""
        settings = self.settings
        level = (
            request.difficulty_level.value.lower()
            if request.difficulty_level
            else settings.DEFAULT_LEVEL
        )
        weeks = request.timeframe_weeks or settings.DEFAULT_TIMEFRAME_WEEKS
        daily_minutes = (
            daily_minutes_from_weekly_hours(request.weekly_hours)
            if request.weekly_hours
            else settings.DEFAULT_DAILY_TIME_MINUTES
        )
        focus = ", ".join(request.focus_areas) if request.focus_areas else settings.DEFAULT_FOCUS

        return ResearchRoadmapRequest(
            topic=request.target_skill,
            level=level,
            timeframe=f"{weeks}-weeks",
            daily_time_minutes=daily_minutes,
            focus=focus,
            include_projects=True,
        )

    async def _generate_enhanced(self, request: GenerationRequest) -> Roadmap:
        status = await self.gateway.research_status()
        if not status.operational:
            raise SourceUnavailable("Research agent is not operational")

        payload = await self.gateway.research_roadmap(self.build_research_request(request))
        return normalize_source_roadmap(payload, request)

    async def _generate_baseline(self, request: GenerationRequest) -> Roadmap:
        try:
            payload = await self.gateway.generate_llm()
            return normalize_source_roadmap(payload, request)
        except SkillForgeError as e:
            logger.error(
                "All generation sources failed",
                target_skill=request.target_skill,
                error=str(e),
            )
            raise GenerationFailed(
                f"Could not generate a roadmap for {request.target_skill}",
                {"target_skill": request.target_skill, "cause": e.to_dict()},
            ) from e

    async def generate(self, request: GenerationRequest) -> Roadmap:
        """Generate a roadmap, degrading to the baseline source when needed.

        Raises:
            GenerationFailed: If the baseline source fails as well.
        """
        try:
            roadmap = await self._generate_enhanced(request)
        except SkillForgeError as e:
            logger.warning(
                "Enhanced generation unavailable, falling back to baseline",
                target_skill=request.target_skill,
                reason=type(e).__name__,
                error=str(e),
            )
        else:
            logger.info(
                "Roadmap generated",
                source="research",
                target_skill=request.target_skill,
                steps=len(roadmap.steps),
            )
            return roadmap

        roadmap = await self._generate_baseline(request)
        logger.info(
            "Roadmap generated",
            source="baseline",
            target_skill=request.target_skill,
            steps=len(roadmap.steps),
        )
        return roadmap
