"""Pydantic schemas for learning hub payloads.

Field names are snake_case in Python; the wire format uses the camelCase
aliases the dashboard pages expect.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Difficulty",
    "WireModel",
    "LearningModule",
    "Assessment",
    "Achievement",
    "UserProfile",
    "LeaderboardEntry",
    "ModuleContent",
    "LearningHubPostRequest",
]

Difficulty = Literal["beginner", "intermediate", "advanced"]


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class LearningModule(WireModel):
    id: str
    title: str
    description: str
    duration: str = Field(description="Human-readable duration label, e.g. '20 min'.")
    xp: int = Field(ge=0)
    difficulty: Difficulty
    category: str
    completed: bool = False


class Assessment(WireModel):
    id: str
    title: str
    description: str
    questions: int = Field(ge=1)
    time_limit: int = Field(alias="timeLimit", ge=1, description="Time limit in minutes.")
    difficulty: Difficulty
    xp_reward: int = Field(alias="xpReward", ge=0)


class Achievement(WireModel):
    id: str
    title: str
    description: str
    date: str


class UserProfile(WireModel):
    user_id: str = Field(alias="userId")
    level: int = Field(ge=1, le=5)
    current_xp: int = Field(alias="currentXP", ge=0)
    total_xp: int = Field(alias="totalXP", ge=0)
    next_level: str = Field(alias="nextLevel")
    achievements: List[Achievement] = Field(default_factory=list)
    completed_modules: List[str] = Field(alias="completedModules", default_factory=list)
    streak_days: int = Field(alias="streakDays", ge=1)
    total_study_time: int = Field(alias="totalStudyTime", ge=0)


class LeaderboardEntry(WireModel):
    rank: int = Field(ge=1)
    name: str
    xp: int
    level: str


class ModuleContent(WireModel):
    personalized_tips: List[str] = Field(alias="personalizedTips")
    recommended_next: Optional[str] = Field(alias="recommendedNext", default=None)
    difficulty_adjustment: Difficulty = Field(alias="difficultyAdjustment")
    estimated_time: str = Field(alias="estimatedTime")


class LearningHubPostRequest(BaseModel):
    """Body of ``POST /learning-hub``; unknown keys are tolerated.

    Fields are left untyped: a non-string ``action`` is an invalid action and
    numeric ids are accepted, so type checks happen in ``LearningHub``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    action: Any = None
    module_id: Any = Field(alias="moduleId", default=None)
    assessment_id: Any = Field(alias="assessmentId", default=None)
    answers: Any = None
