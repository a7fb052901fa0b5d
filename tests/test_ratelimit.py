from __future__ import annotations

import json

from fastapi import Request

from api.ratelimit import limiter, mutation_rate_limit, rate_limit_exceeded_handler


def _request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/season/draft/mutate",
            "query_string": b"",
            "headers": [],
            "client": ("10.0.0.7", 51000),
        }
    )


def test_limiter_disabled_in_test_profile():
    assert limiter.enabled is False


def test_mutation_limit_comes_from_settings():
    assert mutation_rate_limit().endswith("/minute")


def test_exceeded_handler_returns_error_body():
    res = rate_limit_exceeded_handler(_request(), Exception("limit hit"))
    assert res.status_code == 429
    assert json.loads(res.body) == {"error": "Too many season mutations; retry shortly"}
