from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend
from fastapi_cache.backends.redis import RedisBackend
from redis import asyncio as redis_async
from slowapi.errors import RateLimitExceeded

from api.observability import (
    configure_logging,
    monotonic_ms,
    new_request_id,
    request_log_fields,
    reset_request_id,
    set_request_id,
)
from api.ratelimit import limiter, rate_limit_exceeded_handler
from api.routes import router
from core.config import Settings, get_settings
from core.errors import NotFoundError, SeasonError, StorageError

logger = logging.getLogger(__name__)


def status_for_error(exc: SeasonError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StorageError):
        return 500
    return 400


def season_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_for_error(exc) if isinstance(exc, SeasonError) else 500
    log = logger.error if status_code >= 500 else logger.info
    log(
        "season_request_failed",
        extra={"path": request.url.path, "status_code": status_code, "error_type": type(exc).__name__, "reason": str(exc)},
    )
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc or 'body'}: {err.get('msg', 'invalid value')}")
    return JSONResponse(status_code=400, content={"error": "; ".join(parts) or "Invalid request body"})


async def _connect_published_cache(settings: Settings) -> Optional[redis_async.Redis]:
    """Point fastapi-cache at Redis when reachable; tests and Redis-less hosts get the in-memory backend."""
    if settings.app_env != "test":
        client = redis_async.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
        try:
            await client.ping()
        except Exception as exc:  # pragma: no cover - depends on runtime infra
            logger.warning("Redis unavailable, caching published season in memory: %s", exc)
            await client.aclose()
        else:
            FastAPICache.init(RedisBackend(client), prefix=settings.cache_prefix)
            logger.info("cache_backend_initialized", extra={"cache_backend": "redis", "redis_url": settings.redis_url})
            return client
    FastAPICache.init(InMemoryBackend(), prefix=settings.cache_prefix)
    logger.info("cache_backend_initialized", extra={"cache_backend": "memory"})
    return None


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    header_name = settings.request_id_header_name or "X-Request-ID"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.redis = await _connect_published_cache(settings)
        app.state.cache_backend = "redis" if app.state.redis is not None else "memory"
        logger.info("season_store_ready", extra={"seasons_root": str(settings.seasons_root), "app_env": settings.app_env})
        try:
            yield
        finally:
            if app.state.redis is not None:
                await app.state.redis.aclose()

    app = FastAPI(title="Season Planner API", version="1.0.0", lifespan=lifespan)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(SeasonError, season_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[header_name],
    )

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next: Callable) -> Response:
        request_id = (request.headers.get(header_name) or "").strip() or new_request_id()
        token = set_request_id(request_id)
        started_ms = monotonic_ms()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[header_name] = request_id
            return response
        except Exception:
            logger.exception("http_request_error", extra={"method": request.method, "path": request.url.path})
            raise
        finally:
            logger.info(
                "http_request",
                extra=request_log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=status_code,
                    duration_ms=monotonic_ms() - started_ms,
                    client_ip=getattr(request.client, "host", None),
                ),
            )
            reset_request_id(token)

    return app


app = create_app()
