"""
Environment configuration.

All settings come from environment variables (optionally loaded from `.env`
by `main.py`). Routers and services read `get_settings()` instead of touching
`os.environ` directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_AGIFY_URL = "https://api.agify.io"
DEFAULT_GENDERIZE_URL = "https://api.genderize.io"
DEFAULT_NATIONALIZE_URL = "https://api.nationalize.io"


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    server_host: str
    server_port: int
    database_url: str
    db_host: str
    db_port: int
    db_user: str
    db_password: str
    db_name: str
    db_pool_min: int
    db_pool_max: int
    run_migrations: bool
    agify_url: str
    genderize_url: str
    nationalize_url: str
    enrichment_timeout_s: float
    log_level: str


@lru_cache
def get_settings() -> Settings:
    return Settings(
        server_host=_env_str("SERVER_HOST", "0.0.0.0"),
        server_port=_env_int("SERVER_PORT", 8080),
        database_url=_env_str("DATABASE_URL"),
        db_host=_env_str("DB_HOST", "localhost"),
        db_port=_env_int("DB_PORT", 5432),
        db_user=_env_str("DB_USER", "postgres"),
        db_password=_env_str("DB_PASSWORD"),
        db_name=_env_str("DB_NAME", "postgres"),
        db_pool_min=max(1, _env_int("DB_POOL_MIN", 1)),
        db_pool_max=max(1, _env_int("DB_POOL_MAX", 5)),
        run_migrations=_env_bool("RUN_MIGRATIONS", True),
        agify_url=_env_str("API_AGIFY_URL", DEFAULT_AGIFY_URL),
        genderize_url=_env_str("API_GENDERIZE_URL", DEFAULT_GENDERIZE_URL),
        nationalize_url=_env_str("API_NATIONALIZE_URL", DEFAULT_NATIONALIZE_URL),
        enrichment_timeout_s=_env_float("ENRICHMENT_TIMEOUT_S", 5.0),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )
