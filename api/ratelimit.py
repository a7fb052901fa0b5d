from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()

# The test profile turns this off, so suites can mutate the draft in tight loops.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage_uri,
    enabled=_settings.rate_limit_enabled,
    headers_enabled=True,
)


def mutation_rate_limit() -> str:
    return get_settings().mutation_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    limit = getattr(exc, "limit", None) if isinstance(exc, RateLimitExceeded) else None
    logger.warning(
        "season_mutation_throttled",
        extra={
            "path": request.url.path,
            "client_ip": get_remote_address(request),
            "limit": str(getattr(limit, "limit", "")) or mutation_rate_limit(),
        },
    )
    return JSONResponse(status_code=429, content={"error": "Too many season mutations; retry shortly"})
