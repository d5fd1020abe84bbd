import random
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic-style clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def catalog(monkeypatch):
    monkeypatch.delenv("LEARNING_CATALOG_PATH", raising=False)
    from learning_catalog import LearningCatalog

    return LearningCatalog()


@pytest.fixture
def hub(catalog, fake_clock):
    from engines.caching import TTLCache
    from engines.profile import DerivedProfileRepository
    from engines.scoring import AssessmentScorer
    from learning_hub import LearningHub

    return LearningHub(
        catalog,
        cache=TTLCache(1800, clock=fake_clock),
        profiles=DerivedProfileRepository(catalog, today=lambda: date(2026, 3, 14)),
        scorer=AssessmentScorer(random.Random(1234)),
        now=lambda: FIXED_NOW,
    )
