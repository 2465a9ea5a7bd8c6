"""Static catalog of template roadmaps.

Templates are generation seeds, never user-owned records, so they are
addressed by slug.
"""

import re

from skillforge.schemas.roadmap import CatalogRoadmap, CatalogStep, DifficultyLevel
from skillforge.schemas.selection import CatalogRoadmapRef, RoadmapSelection

_CATALOG: tuple[CatalogRoadmap, ...] = (
    CatalogRoadmap(
        id="js-beginner",
        title="JavaScript Beginner Path",
        description="Kickstart your JS journey with fundamentals and hands-on practice.",
        category="Web Development",
        estimated_duration="3 weeks",
        difficulty=DifficultyLevel.BEGINNER,
        steps=(
            CatalogStep(day=1, topic="Variables and Types", lesson_id="lesson-js-1"),
            CatalogStep(day=2, topic="Functions and Scope", lesson_id="lesson-js-2"),
            CatalogStep(day=3, topic="Arrays and Objects", lesson_id="lesson-js-3"),
        ),
    ),
    CatalogRoadmap(
        id="python-intermediate",
        title="Python Intermediate Path",
        description="Strengthen your Python skills with modules and projects.",
        category="Programming",
        estimated_duration="4 weeks",
        difficulty=DifficultyLevel.INTERMEDIATE,
        steps=(
            CatalogStep(day=1, topic="Modules and Packages", lesson_id="lesson-py-1"),
            CatalogStep(day=2, topic="File I/O", lesson_id="lesson-py-2"),
            CatalogStep(day=3, topic="Error Handling", lesson_id="lesson-py-3"),
        ),
    ),
    CatalogRoadmap(
        id="data-science",
        title="Data Science Roadmap",
        description="Intro to DS concepts, viz, and ML basics.",
        category="Data Science",
        estimated_duration="3 weeks",
        difficulty=DifficultyLevel.BEGINNER,
        steps=(
            CatalogStep(day=1, topic="Intro to Data Science"),
            CatalogStep(day=2, topic="Visualization Basics"),
            CatalogStep(day=3, topic="Intro to Machine Learning"),
        ),
    ),
    CatalogRoadmap(
        id="machine-learning",
        title="Machine Learning Roadmap",
        description="Core ML topics and applications.",
        category="Machine Learning",
        estimated_duration="4 weeks",
        difficulty=DifficultyLevel.INTERMEDIATE,
        steps=(
            CatalogStep(day=1, topic="Supervised Learning"),
            CatalogStep(day=2, topic="Model Evaluation"),
            CatalogStep(day=3, topic="Unsupervised Learning"),
        ),
    ),
    CatalogRoadmap(
        id="ai-engineering",
        title="AI Engineering Roadmap",
        description="Systems, deployment, and MLOps essentials.",
        category="AI Engineering",
        estimated_duration="4 weeks",
        difficulty=DifficultyLevel.INTERMEDIATE,
        steps=(
            CatalogStep(day=1, topic="Serving Models"),
            CatalogStep(day=2, topic="Pipelines"),
            CatalogStep(day=3, topic="Monitoring"),
        ),
    ),
)

_WEEKS_PATTERN = re.compile(r"(\d+)\s*weeks?", re.IGNORECASE)


def list_catalog() -> list[CatalogRoadmap]:
    return list(_CATALOG)


def get_catalog_roadmap(slug: str) -> CatalogRoadmap | None:
    return next((template for template in _CATALOG if template.id == slug), None)


def parse_duration_weeks(duration: str | None) -> int | None:
    """``"3 weeks"`` -> 3; anything unparseable -> None."""
    if not duration:
        return None
    match = _WEEKS_PATTERN.search(duration)
    return int(match.group(1)) if match else None


def selection_from_catalog(template: CatalogRoadmap) -> RoadmapSelection:
    """Selection that seeds generation from a catalog template."""
    return RoadmapSelection(
        ref=CatalogRoadmapRef(slug=template.id),
        title=template.title,
        description=template.description,
        category=template.category,
        difficulty_level=template.difficulty,
        timeframe_weeks=parse_duration_weeks(template.estimated_duration),
    )
