"""Application configuration with environment-specific profiles.

Supports dev, staging, production and test environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    data_root: Path
    app_env: str = "dev"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])
    request_id_header_name: str = "X-Request-ID"

    # Rate limiting (slowapi)
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    mutation_rate_limit: str = "120/minute"

    # Published snapshot cache (fastapi-cache)
    redis_url: str = "redis://localhost:6379/0"
    cache_prefix: str = "season-planner"
    published_cache_ttl_seconds: int = 60

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def seasons_root(self) -> Path:
        return self.data_root / "seasons"

    @property
    def draft_path(self) -> Path:
        return self.seasons_root / "season.draft.json"

    @property
    def published_path(self) -> Path:
        return self.seasons_root / "season.published.json"

    @property
    def master_path(self) -> Path:
        return self.seasons_root / "seasons.master.json"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "mutation_rate_limit": "600/minute",
    },
    "staging": {
        "log_level": "INFO",
        "mutation_rate_limit": "120/minute",
    },
    "production": {
        "log_level": "WARNING",
        "mutation_rate_limit": "60/minute",
        "published_cache_ttl_seconds": 300,
    },
    "test": {
        "log_level": "WARNING",
        "rate_limit_enabled": False,
    },
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def get_data_root() -> Path:
    """Resolve the directory that holds the season JSON documents.

    Resolution order:
    1. SEASON_DATA_ROOT environment variable
    2. ./data relative to the working directory
    """
    env_root = os.getenv("SEASON_DATA_ROOT")
    if env_root:
        return Path(env_root).expanduser()
    return Path.cwd() / "data"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        data_root=get_data_root(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        cors_origins=_env_list("CORS_ORIGINS", ["http://localhost:5173"]),
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", profile.get("rate_limit_enabled", True)),
        rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        mutation_rate_limit=os.getenv("MUTATION_RATE_LIMIT", profile.get("mutation_rate_limit", "120/minute")),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        cache_prefix=os.getenv("CACHE_PREFIX", "season-planner"),
        published_cache_ttl_seconds=int(
            os.getenv("PUBLISHED_CACHE_TTL_SECONDS", str(profile.get("published_cache_ttl_seconds", 60)))
        ),
    )
