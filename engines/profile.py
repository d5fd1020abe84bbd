"""Deterministic pseudo-profiles derived from a user identifier.

Nothing here is stored: every field is a pure function of ``user_id`` so the
same identifier always yields the same level, XP, streak and unlocks. The
hash is not security relevant; it only has to be stable and cheap.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from functools import lru_cache
from typing import Callable, List, Optional

from learning_catalog import LearningCatalog
from schemas import Achievement, UserProfile

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def _utf16_units(value: str) -> List[int]:
    data = value.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def string_hash(value: str) -> int:
    """Polynomial ``acc * 31 + unit`` hash over UTF-16 code units.

    The multiply is done as ``(acc << 5) - acc`` with the shift wrapped to a
    signed 32-bit integer, which keeps results identical to the JavaScript
    dashboard that first issued these profiles.
    """

    acc = 0
    for unit in _utf16_units(value):
        acc = _to_int32(_to_int32(acc) << 5) - acc + unit
    return acc


@lru_cache(maxsize=1)
def _default_catalog() -> LearningCatalog:
    return LearningCatalog()


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def derive_profile(
    user_id: str,
    catalog: Optional[LearningCatalog] = None,
    today: Optional[date] = None,
) -> UserProfile:
    catalog = catalog or _default_catalog()
    seed = abs(string_hash(user_id))
    level = min(max(seed % 5 + 1, 1), 5)
    stamp = (today or _utc_today()).isoformat()

    achievement_count = seed % 3 + 1
    achievements = [
        Achievement(id=item.id, title=item.title, description=item.description, date=stamp)
        for item in catalog.achievements[:achievement_count]
    ]
    completed = catalog.starter_modules[: seed % 3]

    return UserProfile(
        user_id=user_id,
        level=level,
        current_xp=seed % 1000 + 500,
        total_xp=level * 1000,
        next_level=catalog.level_name(level + 1),
        achievements=achievements,
        completed_modules=completed,
        streak_days=seed % 30 + 1,
        total_study_time=seed % 500 + 100,
    )


class ProfileRepository:
    """Lookup seam for learner profiles; swap in a real store behind ``get``."""

    def get(self, user_id: str) -> UserProfile:
        raise NotImplementedError


class DerivedProfileRepository(ProfileRepository):
    def __init__(
        self,
        catalog: Optional[LearningCatalog] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.catalog = catalog or _default_catalog()
        self._today = today or _utc_today

    def get(self, user_id: str) -> UserProfile:
        return derive_profile(user_id, self.catalog, today=self._today())
