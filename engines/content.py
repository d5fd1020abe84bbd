"""Catalog filters and personalised module content."""

from __future__ import annotations

from typing import Iterable, List, Optional

from learning_catalog import LearningCatalog
from schemas import Assessment, LearningModule, ModuleContent, UserProfile

ALL_LEVELS = "all"
LEVEL_FILTERS = ("beginner", "intermediate", "advanced", ALL_LEVELS)

_STREAK_TIP_THRESHOLD = 7
_BASE_MINUTES = 20


def _matches(difficulty: str, wanted: Optional[str]) -> bool:
    # Exact match only; an unrecognised filter simply matches nothing.
    return not wanted or wanted == ALL_LEVELS or difficulty == wanted


def generate_modules(
    catalog: LearningCatalog,
    level: Optional[str] = None,
    completed: Iterable[str] = (),
) -> List[LearningModule]:
    done = set(completed)
    return [
        module.model_copy(update={"completed": module.id in done})
        for module in catalog.modules
        if _matches(module.difficulty, level)
    ]


def generate_assessments(catalog: LearningCatalog, difficulty: Optional[str] = None) -> List[Assessment]:
    return [item for item in catalog.assessments if _matches(item.difficulty, difficulty)]


def personalized_tips(profile: UserProfile) -> List[str]:
    tips = [
        f"Great job reaching Level {profile.level}! Keep up the momentum.",
        "Try applying these concepts to real NASA datasets for better retention.",
    ]
    if profile.streak_days > _STREAK_TIP_THRESHOLD:
        tips.append(f"Amazing {profile.streak_days}-day streak! You're on fire!")
    return tips


def recommended_next(profile: UserProfile) -> Optional[str]:
    completed = profile.completed_modules
    if not completed:
        return "nasa-data-intro"
    if "satellite-imagery" not in completed:
        return "satellite-imagery"
    return "ndvi-analysis"


def difficulty_for(profile: UserProfile) -> str:
    if profile.level >= 3:
        return "advanced"
    if profile.level >= 2:
        return "intermediate"
    return "beginner"


def estimated_time(profile: UserProfile) -> str:
    adjustment = -5 if profile.level > 2 else 5
    return f"{_BASE_MINUTES + adjustment} min"


def generate_module_content(profile: UserProfile) -> ModuleContent:
    """Personalised extras shown alongside a module; driven by the learner alone."""

    return ModuleContent(
        personalized_tips=personalized_tips(profile),
        recommended_next=recommended_next(profile),
        difficulty_adjustment=difficulty_for(profile),
        estimated_time=estimated_time(profile),
    )
