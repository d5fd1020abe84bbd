import random
from dataclasses import dataclass
from typing import Optional

MIN_SCORE = 60
MAX_SCORE = 100
PASS_THRESHOLD = 70
PASS_XP = 200
FAIL_XP = 100


@dataclass(frozen=True)
class AssessmentOutcome:
    assessment_id: str
    score: int
    passed: bool
    xp_earned: int


class AssessmentScorer:
    """Simulated grading: answers are not checked, the score is drawn uniformly."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def xp_for(score: int) -> int:
        return PASS_XP if score >= PASS_THRESHOLD else FAIL_XP

    def score(self, assessment_id: str) -> AssessmentOutcome:
        value = self.rng.randint(MIN_SCORE, MAX_SCORE)
        return AssessmentOutcome(
            assessment_id=assessment_id,
            score=value,
            passed=value >= PASS_THRESHOLD,
            xp_earned=self.xp_for(value),
        )
