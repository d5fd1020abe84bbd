"""Learning hub catalog loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from schemas import Assessment, LearningModule

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "learning_catalog.yaml"


class CatalogConfigError(ValueError):
    """Raised when ``learning_catalog.yaml`` contains invalid data."""


@dataclass(frozen=True)
class AchievementTemplate:
    id: str
    title: str
    description: str


@dataclass(frozen=True)
class LeaderboardSeed:
    name: str
    xp: int
    level: str


def _require_list(raw: Dict[str, Any], section: str) -> List[Any]:
    value = raw.get(section)
    if not isinstance(value, list) or not value:
        raise CatalogConfigError(f"Catalog section '{section}' must be a non-empty list")
    return value


def _check_unique(ids: Sequence[str], section: str) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise CatalogConfigError(f"Duplicate id in '{section}': {item_id}")
        seen.add(item_id)


class LearningCatalog:
    """Static modules, assessments and gamification tables for the learning hub."""

    def __init__(self, path: str | Path | None = None) -> None:
        env_path = os.getenv("LEARNING_CATALOG_PATH")
        if path is not None:
            self.path = Path(path)
        elif env_path:
            self.path = Path(env_path)
        else:
            self.path = DEFAULT_CATALOG_PATH
        self._modules: Tuple[LearningModule, ...] = ()
        self._assessments: Tuple[Assessment, ...] = ()
        self._achievements: Tuple[AchievementTemplate, ...] = ()
        self._levels: Tuple[str, ...] = ()
        self._starter_modules: Tuple[str, ...] = ()
        self._leaderboard: Tuple[LeaderboardSeed, ...] = ()
        self.total_users = 0
        self.user_rank = 1
        self.reload()

    # ------------------------------------------------------------------
    def reload(self) -> None:
        """Reload the catalog from disk and validate the structure."""

        if not self.path.exists():
            raise FileNotFoundError(f"Learning catalog file not found: {self.path}")

        with self.path.open("r", encoding="utf-8") as fh:
            try:
                raw = yaml.safe_load(fh)
            except yaml.YAMLError as exc:
                raise CatalogConfigError(f"Learning catalog is not valid YAML: {exc}") from exc

        if not isinstance(raw, dict):
            raise CatalogConfigError("Learning catalog must be a YAML mapping")

        try:
            modules = tuple(LearningModule.model_validate(entry) for entry in _require_list(raw, "modules"))
            assessments = tuple(
                Assessment.model_validate(entry) for entry in _require_list(raw, "assessments")
            )
        except ValidationError as exc:
            raise CatalogConfigError(f"Invalid catalog entry: {exc}") from exc
        _check_unique([module.id for module in modules], "modules")
        _check_unique([assessment.id for assessment in assessments], "assessments")

        achievements: List[AchievementTemplate] = []
        for idx, entry in enumerate(_require_list(raw, "achievements"), start=1):
            if not isinstance(entry, dict) or not str(entry.get("id", "")).strip():
                raise CatalogConfigError(f"Achievement #{idx} is missing a non-empty 'id'")
            achievements.append(
                AchievementTemplate(
                    id=str(entry["id"]).strip(),
                    title=str(entry.get("title", "")).strip(),
                    description=str(entry.get("description", "")).strip(),
                )
            )
        _check_unique([item.id for item in achievements], "achievements")

        levels = tuple(str(name).strip() for name in _require_list(raw, "levels"))
        if any(not name for name in levels):
            raise CatalogConfigError("Level names may not be empty")

        module_ids = {module.id for module in modules}
        starters = tuple(str(item) for item in _require_list(raw, "starter_modules"))
        unknown = [item for item in starters if item not in module_ids]
        if unknown:
            raise CatalogConfigError(f"Unknown starter modules: {', '.join(unknown)}")

        board = raw.get("leaderboard") or {}
        if not isinstance(board, dict):
            raise CatalogConfigError("Catalog section 'leaderboard' must be a mapping")
        seeds: List[LeaderboardSeed] = []
        for idx, entry in enumerate(board.get("entries") or [], start=1):
            try:
                seeds.append(LeaderboardSeed(str(entry["name"]), int(entry["xp"]), str(entry["level"])))
            except (KeyError, TypeError, ValueError) as exc:
                raise CatalogConfigError(f"Leaderboard entry #{idx} is malformed") from exc
        try:
            total_users = int(board.get("total_users", len(seeds) + 1))
            user_rank = int(board.get("user_rank", 1))
        except (TypeError, ValueError) as exc:
            raise CatalogConfigError("Leaderboard totals must be integers") from exc
        if not 1 <= user_rank <= len(seeds) + 1:
            raise CatalogConfigError("Leaderboard user_rank must fall within the seeded entries")

        self._modules = modules
        self._assessments = assessments
        self._achievements = tuple(achievements)
        self._levels = levels
        self._starter_modules = starters
        self._leaderboard = tuple(seeds)
        self.total_users = total_users
        self.user_rank = user_rank
        logger.info(
            "Loaded learning catalog from %s (%d modules, %d assessments)",
            self.path,
            len(modules),
            len(assessments),
        )

    # ------------------------------------------------------------------
    @property
    def modules(self) -> List[LearningModule]:
        return list(self._modules)

    @property
    def assessments(self) -> List[Assessment]:
        return list(self._assessments)

    @property
    def achievements(self) -> List[AchievementTemplate]:
        return list(self._achievements)

    @property
    def starter_modules(self) -> List[str]:
        return list(self._starter_modules)

    @property
    def leaderboard(self) -> List[LeaderboardSeed]:
        return list(self._leaderboard)

    def module(self, module_id: str) -> Optional[LearningModule]:
        for module in self._modules:
            if module.id == module_id:
                return module
        return None

    def categories(self) -> List[str]:
        """Module categories in first-seen order."""

        seen: Dict[str, None] = {}
        for module in self._modules:
            seen.setdefault(module.category, None)
        return list(seen)

    def level_name(self, level: int) -> str:
        """Title for ``level`` (1-based); out-of-range levels clamp to the ends."""

        index = min(max(int(level), 1), len(self._levels)) - 1
        return self._levels[index]
