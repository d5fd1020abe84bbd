# app.py - Terra Farm learning hub API
# - Cache-first learning hub reads, invalidating writes
# - Synthetic satellite imagery for the dashboard pages

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from engines.caching import TTLCache
from env_validation import HubSettings, validate_environment
from learning_catalog import LearningCatalog
from learning_hub import POST_FAILURE_MESSAGE, InternalFailure, LearningHub
from sample_imagery import SVG_MEDIA_TYPE, render_sample_image

logger = logging.getLogger(__name__)

_HUB_LOGGER = logging.getLogger("terra.hub")
if not _HUB_LOGGER.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    _HUB_LOGGER.addHandler(_handler)
_HUB_LOGGER.setLevel(logging.INFO)
_HUB_LOGGER.propagate = False


def build_learning_hub(settings: Optional[HubSettings] = None) -> LearningHub:
    settings = settings or HubSettings.from_env()
    cache = TTLCache(settings.cache_ttl_seconds, max_entries=settings.cache_max_entries)
    return LearningHub(LearningCatalog(), cache=cache)


@asynccontextmanager
async def _lifespan(app_: FastAPI):
    try:
        validate_environment()
        settings = HubSettings.from_env()
        app_.state.settings = settings
        if getattr(app_.state, "learning_hub", None) is None:
            app_.state.learning_hub = build_learning_hub(settings)
        logger.info(
            "Learning hub ready: cache ttl=%ss max_entries=%s",
            settings.cache_ttl_seconds,
            settings.cache_max_entries,
        )
        yield
    except Exception as e:
        logger.error("Failed to initialize application: %s", str(e), exc_info=True)
        raise


app = FastAPI(title="Terra Farm Learning Hub", version="0.3.0", lifespan=_lifespan)


# ---------- Helpers ----------
def _settings(request: Request) -> HubSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = HubSettings.from_env()
        request.app.state.settings = settings
    return settings


def _hub(request: Request) -> LearningHub:
    hub = getattr(request.app.state, "learning_hub", None)
    if hub is None:
        hub = build_learning_hub(_settings(request))
        request.app.state.learning_hub = hub
    return hub


def _log_request(request: Request, method: str, action: Optional[str], user_id: Optional[str]) -> None:
    if _settings(request).log_requests:
        _HUB_LOGGER.info("Learning Hub %s: %s (User: %s)", method, action, user_id or "guest")


# ---------- Learning hub ----------
@app.get("/learning-hub")
def learning_hub_get(request: Request):
    params: Dict[str, Any] = dict(request.query_params)
    action = params.get("action")
    _log_request(request, "GET", action, params.get("userId"))
    status, payload = _hub(request).dispatch_get(action, params)
    return JSONResponse(payload, status_code=status)


@app.post("/learning-hub")
async def learning_hub_post(request: Request):
    user_id = request.query_params.get("userId")
    try:
        body = await request.json()
    except ValueError as exc:
        logger.warning("Learning hub POST body is not JSON: %s", exc)
        failure = InternalFailure(POST_FAILURE_MESSAGE, details=str(exc))
        return JSONResponse(failure.to_payload(), status_code=failure.status_code)
    action = body.get("action") if isinstance(body, dict) else None
    _log_request(request, "POST", action, user_id)
    status, payload = _hub(request).dispatch_post(user_id, body)
    return JSONResponse(payload, status_code=status)


# ---------- Imagery ----------
@app.get("/nasa-sample-images")
def nasa_sample_images(request: Request):
    svg = render_sample_image(request.query_params.get("type"))
    max_age = _settings(request).sample_image_max_age
    return Response(
        content=svg,
        media_type=SVG_MEDIA_TYPE,
        headers={
            "Cache-Control": f"public, max-age={max_age}",
            "Access-Control-Allow-Origin": "*",
        },
    )


@app.get("/health")
def health(request: Request):
    return {"status": "ok", "cache": _hub(request).cache.stats()}
