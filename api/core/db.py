"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import asyncpg

from core.config import Settings, get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"

_pool: asyncpg.Pool | None = None

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url(settings: Settings | None = None) -> str:
    """
    DATABASE_URL wins; otherwise the DSN is assembled from DB_HOST, DB_PORT,
    DB_USER, DB_PASSWORD and DB_NAME.
    """
    settings = settings or get_settings()
    if settings.database_url:
        return _sanitize_database_url(settings.database_url)

    auth = quote(settings.db_user, safe="")
    if settings.db_password:
        auth += ":" + quote(settings.db_password, safe="")
    return f"postgresql://{auth}@{settings.db_host}:{settings.db_port}/{settings.db_name}"


async def init_pool(settings: Settings | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    settings = settings or get_settings()
    _pool = await asyncpg.create_pool(
        dsn=database_url(settings),
        min_size=min(settings.db_pool_min, settings.db_pool_max),
        max_size=settings.db_pool_max,
        command_timeout=30,
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


def affected_rows(status: str) -> int:
    """
    Parse the row count out of an asyncpg command status ("UPDATE 3", "DELETE 0").
    """
    tail = (status or "").rsplit(" ", 1)[-1]
    return int(tail) if tail.isdigit() else 0


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    row = await pool().fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def fetch_val(sql: str, *args: Any) -> Any:
    return await pool().fetchval(sql, *args)


async def execute(sql: str, *args: Any) -> int:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return the affected row count.
    """
    status = await pool().execute(sql, *args)
    return affected_rows(status)


async def apply_migrations(directory: Path = MIGRATIONS_DIR) -> list[str]:
    """
    Run every `*.sql` file in `directory`, in name order.

    The files are written to be idempotent (IF NOT EXISTS), so this is safe
    to call on every startup.
    """
    applied: list[str] = []
    for path in sorted(directory.glob("*.sql")):
        # Multi-statement scripts need the simple query protocol: no args.
        await pool().execute(path.read_text(encoding="utf-8"))
        applied.append(path.name)
    logger.info("migrations_applied files=%s", applied)
    return applied
