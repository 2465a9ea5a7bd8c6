"""Roadmap resolution router.

Decides whether a selected roadmap item is already a roadmap the user owns
(load it) or has to be generated (generate and save). This is the
deduplication point: persisted references are always checked before any
generation, and the server's 409 is the final arbiter for the one-active-
roadmap-per-user rule.
"""

from skillforge.core.config import Settings, get_settings
from skillforge.core.exceptions import (
    GenerationFailed,
    RoadmapConflict,
    SkillForgeError,
    StatusCheckFailed,
)
from skillforge.core.logging import get_logger
from skillforge.schemas.roadmap import DifficultyLevel, GenerateAndSaveRequest, Roadmap
from skillforge.schemas.selection import (
    PersistedRoadmapRef,
    ResolutionOutcome,
    ResolutionResult,
    RoadmapSelection,
)
from skillforge.services.gateway import RoadmapGateway

logger = get_logger(__name__)


class RoadmapResolutionRouter:
    """Resolve a roadmap selection to a loaded or newly generated roadmap."""

    def __init__(self, gateway: RoadmapGateway, settings: Settings | None = None) -> None:
        self.gateway = gateway
        self.settings = settings or get_settings()

    async def resolve(self, selection: RoadmapSelection) -> ResolutionResult:
        """Load the user's existing roadmap or generate a new one.

        Raises:
            GenerationFailed: If generate-and-save fails for any reason other
                than a conflict.
        """
        ref = selection.ref
        if isinstance(ref, PersistedRoadmapRef):
            existing = await self._find_existing(ref)
            if existing is not None:
                logger.info("Loaded existing roadmap", roadmap_id=existing.id)
                return ResolutionResult(
                    outcome=ResolutionOutcome.LOADED,
                    roadmap=existing,
                    is_new=False,
                    message="Loaded your saved roadmap",
                )

        return await self._generate(selection)

    async def _check_saved(self, ref: PersistedRoadmapRef) -> str | None:
        """Id of the user's saved roadmap derived from ``ref``, if any.

        Raises:
            StatusCheckFailed: If the status endpoint errors.
        """
        try:
            status = await self.gateway.saved_status(ref.roadmap_id)
        except SkillForgeError as e:
            raise StatusCheckFailed(
                f"Could not check saved state of {ref.roadmap_id}",
                {"roadmap_id": ref.roadmap_id},
            ) from e
        if not status.is_saved:
            return None
        # A saved status without an id refers to the checked roadmap itself
        return status.roadmap_id or ref.roadmap_id

    async def _find_existing(self, ref: PersistedRoadmapRef) -> Roadmap | None:
        # Check failures count as "not found": availability over strictness,
        # a duplicate attempt is caught by the server's 409
        try:
            saved_id = await self._check_saved(ref)
        except StatusCheckFailed as e:
            logger.warning(
                "Saved-roadmap check failed, generating instead",
                roadmap_id=ref.roadmap_id,
                error=str(e.__cause__ or e),
            )
            return None

        if saved_id is None:
            return None

        try:
            return await self.gateway.get_roadmap(saved_id)
        except SkillForgeError as e:
            logger.warning(
                "Saved roadmap could not be loaded, generating instead",
                roadmap_id=saved_id,
                error=str(e),
            )
            return None

    def build_generate_request(self, selection: RoadmapSelection) -> GenerateAndSaveRequest:
        settings = self.settings
        return GenerateAndSaveRequest(
            title=selection.title,
            description=selection.description or selection.title,
            category=selection.category,
            difficulty_level=selection.difficulty_level or DifficultyLevel(settings.DEFAULT_LEVEL),
            enable_web_scraping=settings.ENABLE_WEB_SCRAPING,
            timeframe_weeks=selection.timeframe_weeks or settings.DEFAULT_TIMEFRAME_WEEKS,
            daily_time_minutes=selection.daily_time_minutes or settings.DEFAULT_DAILY_TIME_MINUTES,
        )

    async def _generate(self, selection: RoadmapSelection) -> ResolutionResult:
        request = self.build_generate_request(selection)
        try:
            response = await self.gateway.generate_and_save(request)
        except RoadmapConflict as e:
            logger.info("Roadmap generation conflicts with active roadmap", title=selection.title)
            return ResolutionResult(
                outcome=ResolutionOutcome.CONFLICT,
                roadmap=None,
                is_new=False,
                message=e.message,
            )
        except SkillForgeError as e:
            logger.error("Generate-and-save failed", title=selection.title, error=str(e))
            raise GenerationFailed(
                f"Could not generate a roadmap for {selection.title}",
                {"title": selection.title, "cause": e.to_dict()},
            ) from e

        logger.info(
            "Roadmap generated and saved",
            roadmap_id=response.roadmap.id,
            generated_with_ai=response.generated_with_ai,
            web_scraping_used=response.web_scraping_used,
        )
        return ResolutionResult(
            outcome=ResolutionOutcome.CREATED,
            roadmap=response.roadmap,
            is_new=True,
            message=response.message or "Roadmap created",
        )
