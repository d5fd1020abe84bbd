"""Learning hub request handling.

``LearningHub`` maps an ``(action, parameters)`` pair onto the catalog,
profile and scoring engines. Reads go through the injected ``TTLCache``;
writes only invalidate cached state and log the XP they notionally award,
since profiles are re-derived from the user id rather than accumulated.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from engines.caching import TTLCache
from engines.content import LEVEL_FILTERS, generate_assessments, generate_module_content, generate_modules
from engines.profile import DerivedProfileRepository, ProfileRepository
from engines.scoring import AssessmentScorer
from learning_catalog import LearningCatalog
from schemas import LeaderboardEntry, LearningHubPostRequest, UserProfile

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "guest"
START_MODULE_XP = 50
COMPLETE_MODULE_XP = 150

GET_FAILURE_MESSAGE = "Failed to fetch learning data"
POST_FAILURE_MESSAGE = "Failed to process request"


class LearningHubError(Exception):
    """Base class for errors reported to learning hub callers."""

    status_code = 500
    kind = "internal_failure"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class InvalidAction(LearningHubError):
    status_code = 400
    kind = "invalid_action"


class MissingParameter(LearningHubError):
    status_code = 400
    kind = "missing_parameter"


class NotFound(LearningHubError):
    status_code = 404
    kind = "not_found"


class InternalFailure(LearningHubError):
    status_code = 500
    kind = "internal_failure"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["details"] = self.details
        return payload


Handler = Callable[[str, Mapping[str, Any]], Tuple[Dict[str, Any], Optional[bool]]]


class LearningHub:
    def __init__(
        self,
        catalog: LearningCatalog,
        *,
        cache: Optional[TTLCache] = None,
        profiles: Optional[ProfileRepository] = None,
        scorer: Optional[AssessmentScorer] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.catalog = catalog
        self.cache = cache if cache is not None else TTLCache()
        self.profiles = profiles if profiles is not None else DerivedProfileRepository(catalog)
        self.scorer = scorer if scorer is not None else AssessmentScorer()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._get_handlers: Dict[str, Handler] = {
            "modules": self._get_modules,
            "progress": self._get_progress,
            "module-content": self._get_module_content,
            "assessments": self._get_assessments,
            "leaderboard": self._get_leaderboard,
        }

    # ---------- Cache helpers ----------
    def _cached(self, key: str, fill: Callable[[], Any]) -> Tuple[Any, bool]:
        hit, value = self.cache.lookup(key)
        if hit:
            logger.debug("Cache hit for %s", key)
            return value, True
        value = fill()
        self.cache.set(key, value)
        logger.debug("Cached data for %s", key)
        return value, False

    @staticmethod
    def progress_key(user_id: str) -> str:
        return TTLCache.make_key("progress", user=user_id)

    @staticmethod
    def modules_key(user_id: str, level: str) -> str:
        return TTLCache.make_key("modules", level=level, user=user_id)

    @staticmethod
    def assessments_key(user_id: str) -> str:
        return TTLCache.make_key("assessments", user=user_id)

    def _cache_meta(self, hit: bool) -> Dict[str, Any]:
        return {"cached": hit, "timestamp": self._now().isoformat()}

    def _invalidate_user(self, user_id: str) -> None:
        self.cache.invalidate(self.progress_key(user_id))
        for level in LEVEL_FILTERS:
            self.cache.invalidate(self.modules_key(user_id, level))
        logger.debug("Invalidated cached progress for user %s", user_id)

    # ---------- Reads ----------
    def progress(self, user_id: str) -> Tuple[UserProfile, bool]:
        return self._cached(self.progress_key(user_id), lambda: self.profiles.get(user_id))

    def _get_modules(self, user_id: str, params: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[bool]]:
        level = params.get("level") or "all"

        def _fill() -> List[Any]:
            profile, _ = self.progress(user_id)
            return generate_modules(self.catalog, level, profile.completed_modules)

        modules, hit = self._cached(self.modules_key(user_id, level), _fill)
        data = {
            "modules": [module.to_wire() for module in modules],
            "totalModules": len(modules),
            "categories": self.catalog.categories(),
        }
        return data, hit

    def _get_progress(self, user_id: str, params: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[bool]]:
        profile, hit = self.progress(user_id)
        return profile.to_wire(), hit

    def _get_module_content(
        self, user_id: str, params: Mapping[str, Any]
    ) -> Tuple[Dict[str, Any], Optional[bool]]:
        module_id = params.get("moduleId")
        if not module_id:
            raise MissingParameter("Module ID required")
        if self.catalog.module(module_id) is None:
            raise NotFound("Module not found")
        modules, _ = self._get_modules(user_id, {"level": "all"})
        found = next(module for module in modules["modules"] if module["id"] == module_id)
        profile, _ = self.progress(user_id)
        data = {
            "module": found,
            "dynamic": generate_module_content(profile).to_wire(),
            "userProgress": profile.to_wire(),
        }
        return data, None

    def _get_assessments(self, user_id: str, params: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[bool]]:
        assessments, _ = self._cached(
            self.assessments_key(user_id), lambda: generate_assessments(self.catalog)
        )
        data = {
            "assessments": [item.to_wire() for item in assessments],
            "userCompletedAssessments": [],
        }
        return data, None

    def _get_leaderboard(self, user_id: str, params: Mapping[str, Any]) -> Tuple[Dict[str, Any], Optional[bool]]:
        profile, _ = self.progress(user_id)
        rows = [(seed.name, seed.xp, seed.level) for seed in self.catalog.leaderboard]
        rows.insert(
            self.catalog.user_rank - 1,
            ("You", profile.current_xp, self.catalog.level_name(profile.level)),
        )
        board = [
            LeaderboardEntry(rank=rank, name=name, xp=xp, level=level).to_wire()
            for rank, (name, xp, level) in enumerate(rows, start=1)
        ]
        data = {
            "leaderboard": board,
            "userRank": self.catalog.user_rank,
            "totalUsers": self.catalog.total_users,
        }
        return data, None

    def handle_get(self, action: Optional[str], params: Mapping[str, Any]) -> Dict[str, Any]:
        user_id = params.get("userId") or DEFAULT_USER_ID
        handler = self._get_handlers.get(action or "")
        if handler is None:
            raise InvalidAction("Invalid action")
        try:
            data, hit = handler(user_id, params)
        except LearningHubError:
            raise
        except Exception as exc:
            logger.error("Learning hub GET %s failed: %s", action, exc, exc_info=True)
            raise InternalFailure(GET_FAILURE_MESSAGE, details=str(exc)) from exc
        response: Dict[str, Any] = {"success": True, "data": data}
        if hit is not None:
            response["cache"] = self._cache_meta(hit)
        return response

    # ---------- Writes ----------
    def _award_xp(self, user_id: str, amount: int) -> None:
        logger.info("Awarded %s XP to user %s", amount, user_id)

    def _update_module_progress(self, user_id: str, module_id: str, completed: bool) -> None:
        logger.info(
            "Updated progress for user %s, module %s, completed: %s", user_id, module_id, completed
        )

    @staticmethod
    def _required_module_id(request: LearningHubPostRequest) -> str:
        if not request.module_id:
            raise MissingParameter("Module ID required")
        return str(request.module_id)

    def _start_module(self, user_id: str, request: LearningHubPostRequest) -> Dict[str, Any]:
        module_id = self._required_module_id(request)
        self._update_module_progress(user_id, module_id, completed=False)
        self._award_xp(user_id, START_MODULE_XP)
        self._invalidate_user(user_id)
        return {"message": "Module started successfully", "xpAwarded": START_MODULE_XP}

    def _complete_module(self, user_id: str, request: LearningHubPostRequest) -> Dict[str, Any]:
        module_id = self._required_module_id(request)
        self._update_module_progress(user_id, module_id, completed=True)
        self._award_xp(user_id, COMPLETE_MODULE_XP)
        self._invalidate_user(user_id)
        profile, _ = self.progress(user_id)
        return {
            "message": "Module completed successfully",
            "xpAwarded": COMPLETE_MODULE_XP,
            "newXP": profile.current_xp,
        }

    def _submit_assessment(self, user_id: str, request: LearningHubPostRequest) -> Dict[str, Any]:
        if not request.assessment_id or request.answers is None:
            raise MissingParameter("Assessment ID and answers required")
        outcome = self.scorer.score(str(request.assessment_id))
        self._award_xp(user_id, outcome.xp_earned)
        # modules are unaffected by assessments, only the XP total is stale
        self.cache.invalidate(self.progress_key(user_id))
        profile, _ = self.progress(user_id)
        return {
            "score": outcome.score,
            "xpEarned": outcome.xp_earned,
            "passed": outcome.passed,
            "newTotalXP": profile.current_xp,
        }

    def handle_post(self, user_id: Optional[str], body: Any) -> Dict[str, Any]:
        user_id = user_id or DEFAULT_USER_ID
        if not isinstance(body, Mapping):
            raise InternalFailure(POST_FAILURE_MESSAGE, details="request body must be a JSON object")
        try:
            request = LearningHubPostRequest.model_validate(body)
        except ValidationError as exc:
            raise InternalFailure(POST_FAILURE_MESSAGE, details=str(exc)) from exc

        handlers = {
            "start-module": self._start_module,
            "complete-module": self._complete_module,
            "submit-assessment": self._submit_assessment,
        }
        action = request.action if isinstance(request.action, str) else ""
        handler = handlers.get(action)
        if handler is None:
            raise InvalidAction("Invalid POST action")
        try:
            data = handler(user_id, request)
        except LearningHubError:
            raise
        except Exception as exc:
            logger.error("Learning hub POST %s failed: %s", action, exc, exc_info=True)
            raise InternalFailure(POST_FAILURE_MESSAGE, details=str(exc)) from exc
        return {"success": True, "data": data}

    # ---------- Dispatch ----------
    def _report(self, exc: LearningHubError) -> Tuple[int, Dict[str, Any]]:
        if exc.status_code >= 500:
            logger.error("Learning hub failure: %s (%s)", exc.message, getattr(exc, "details", None))
        else:
            logger.warning("Learning hub rejected request: %s", exc.message)
        return exc.status_code, exc.to_payload()

    def dispatch_get(self, action: Optional[str], params: Mapping[str, Any]) -> Tuple[int, Dict[str, Any]]:
        try:
            return 200, self.handle_get(action, params)
        except LearningHubError as exc:
            return self._report(exc)
        except Exception as exc:
            logger.error("Learning hub GET %s failed: %s", action, exc, exc_info=True)
            return self._report(InternalFailure(GET_FAILURE_MESSAGE, details=str(exc)))

    def dispatch_post(self, user_id: Optional[str], body: Any) -> Tuple[int, Dict[str, Any]]:
        try:
            return 200, self.handle_post(user_id, body)
        except LearningHubError as exc:
            return self._report(exc)
        except Exception as exc:
            logger.error("Learning hub POST failed: %s", exc, exc_info=True)
            return self._report(InternalFailure(POST_FAILURE_MESSAGE, details=str(exc)))
