"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings
from .errors import StatementExecutionError

_pool: asyncpg.Pool | None = None


@dataclass(frozen=True)
class StatementResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Decode `json`/`jsonb` into Python values and encode Python values back,
    instead of asyncpg's default text representation.
    """
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=settings.pool_min_size(),
        max_size=max(settings.pool_max_size(), settings.pool_min_size()),
        command_timeout=settings.command_timeout(),
        init=_init_connection,
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


def _row_count(status: str | None, fallback: int) -> int:
    """
    Parse the affected row count from a command tag such as `DELETE 3`,
    `UPDATE 0` or `INSERT 0 1`.
    """
    if not status:
        return fallback
    last = status.rsplit(" ", 1)[-1]
    try:
        return int(last)
    except ValueError:
        return fallback


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    rows = await pool().fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def run(sql: str, params: Sequence[Any] = ()) -> StatementResult:
    """
    Execute one statement on a pooled connection and return its rows and
    affected row count. The connection is released on every exit path.
    """
    try:
        async with pool().acquire() as conn:
            stmt = await conn.prepare(sql)
            rows = await stmt.fetch(*params)
            status = stmt.get_statusmsg()
    except (asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
        raise StatementExecutionError(f"{type(exc).__name__}: {exc}") from exc

    return StatementResult(
        rows=[_record_to_dict(r) for r in rows],
        row_count=_row_count(status, len(rows)),
    )
