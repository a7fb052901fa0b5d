from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi_cache import FastAPICache
from fastapi_cache.decorator import cache

from api.observability import reset_mutation_action, set_mutation_action
from api.ratelimit import limiter, mutation_rate_limit
from api.schemas import ERROR_RESPONSES, CalendarWeekOut, HealthOut, SeasonWeeksOut
from core.config import get_settings
from core.errors import NotFoundError
from core.models import Season
from core.services.draft_store import DraftStore, get_draft_store
from core.services.season_commands import action_name, apply_mutation, parse_mutation
from core.services.season_index import calendar, total_weeks

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter(prefix="/api/season", tags=["season"])

PUBLISHED_CACHE_NAMESPACE = "published-season"

Store = Annotated[DraftStore, Depends(get_draft_store)]


def _published_cache_key(func, namespace: str = "", **kwargs) -> str:
    # one published snapshot at a time, so the key ignores request arguments
    return f"{namespace}:current"


@router.get("/health", response_model=HealthOut)
def health(store: Store):
    return HealthOut(status="ok", draft_exists=store.draft_path.exists())


@router.get("/draft", response_model=Season, responses=ERROR_RESPONSES)
def get_draft(store: Store):
    return store.require_draft()


@router.get("/draft/weeks", response_model=SeasonWeeksOut, responses=ERROR_RESPONSES)
def get_draft_weeks(store: Store):
    draft = store.require_draft()
    return SeasonWeeksOut(
        season_id=draft.season_id,
        start_date=draft.start_date,
        total_weeks=total_weeks(draft),
        weeks=[CalendarWeekOut.model_validate(row) for row in calendar(draft)],
    )


@router.post("/draft/create", response_model=Season, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_draft(store: Store):
    if store.draft_path.exists() and store.load_draft() is None:
        logger.warning("season_draft_overwritten", extra={"reason": "unreadable draft replaced"})
    return store.create_draft()


@router.post("/draft/ensure", response_model=Season, responses=ERROR_RESPONSES)
def ensure_draft(response: Response, store: Store):
    draft, created = store.ensure_draft()
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return draft


@router.post("/draft/mutate", response_model=Season, responses=ERROR_RESPONSES)
@limiter.limit(mutation_rate_limit)
def mutate_draft(
    request: Request,
    response: Response,
    store: Store,
    body: dict[str, Any] = Body(...),
):
    del request, response
    # Unknown actions and malformed args fail here, before the draft is read.
    command = parse_mutation(body)
    token = set_mutation_action(action_name(command))
    try:
        draft = store.require_draft()
        candidate = apply_mutation(draft, command)
        return store.save_draft(candidate)
    finally:
        reset_mutation_action(token)


@router.post("/publish", response_model=Season, responses=ERROR_RESPONSES)
async def publish_draft(store: Store):
    published = await run_in_threadpool(store.publish_draft)
    await FastAPICache.clear(namespace=PUBLISHED_CACHE_NAMESPACE)
    return published


@router.get("/published", response_model=Season, responses=ERROR_RESPONSES)
@cache(namespace=PUBLISHED_CACHE_NAMESPACE, expire=settings.published_cache_ttl_seconds, key_builder=_published_cache_key)
def get_published(store: Store):
    published = store.load_published()
    if published is None:
        raise NotFoundError("Published season not found")
    return published.to_json_dict()
