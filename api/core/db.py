"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

Route handlers never touch the pool directly. They receive a `Database`
through the `get_db` dependency, which tests override with a fake.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
- request values are sent as text (`to_text_param`) and cast in SQL to the
  column type, so the store is the one that accepts or rejects them.
  NaN is sent as "NaN" (a valid numeric, an invalid integer).
"""

from __future__ import annotations

import json
import math
import os
from decimal import Decimal
from typing import Any
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

import asyncpg

from . import config

_pool: asyncpg.Pool | None = None


class StoreOperationFailed(RuntimeError):
    """Any failure raised while running a statement against the store."""


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _url_from_pg_env() -> str:
    host = os.environ.get("PG_HOST", "").strip() or "localhost"
    port = os.environ.get("PG_PORT", "").strip() or "5432"
    user = os.environ.get("PG_USER", "").strip()
    password = os.environ.get("PG_PASSWORD", "")
    database = os.environ.get("PG_DATABASE", "").strip()

    credentials = ""
    if user:
        credentials = quote(user, safe="")
        if password:
            credentials += ":" + quote(password, safe="")
        credentials += "@"
    return f"postgresql://{credentials}{host}:{port}/{quote(database, safe='')}"


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if url:
        return _sanitize_database_url(url)
    if not os.environ.get("PG_DATABASE", "").strip():
        raise RuntimeError("Neither DATABASE_URL nor PG_DATABASE is set.")
    return _url_from_pg_env()


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=config.pool_min_size(),
        max_size=config.pool_max_size(),
        command_timeout=config.command_timeout(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise StoreOperationFailed("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def _number_text(value: float) -> str:
    # Integral floats lose their ".0"; exponents only below 1e-6 or from 1e21.
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    magnitude = abs(value)
    if value.is_integer() and magnitude < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    if 1e-6 <= magnitude < 1e21:
        return format(Decimal(text), "f")
    mantissa, exponent = text.split("e")
    exp = int(exponent)
    return f"{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"


def _array_text(values: list[Any]) -> str:
    items = []
    for item in values:
        if item is None:
            items.append("NULL")
        elif isinstance(item, list):
            items.append(_array_text(item))
        else:
            text = to_text_param(item)
            items.append('"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"')
    return "{" + ",".join(items) + "}"


def to_text_param(value: Any) -> str | None:
    """
    Serialize a request value the way it travels to Postgres as text.

    None stays NULL, booleans become `true`/`false`, floats are written
    like JSON numbers (`2.0` -> `2`, `1e16` -> `10000000000000000`),
    lists become array literals (`{"1","2"}`), dicts are compact JSON and
    everything else goes through `str()`.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _number_text(value)
    if isinstance(value, list):
        return _array_text(value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _record_to_dict(record: Any) -> dict[str, Any]:
    return dict(record)


class Database:
    """
    Query capability handed to route handlers.

    Wraps anything exposing asyncpg's `fetchrow` / `fetch` / `execute`
    (a pool or a single connection). Every failure is re-raised as
    `StoreOperationFailed`.
    """

    def __init__(self, executor: Any) -> None:
        self._executor = executor

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self._executor.fetchrow(sql, *args)
        except Exception as exc:
            raise StoreOperationFailed(str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self._executor.fetch(sql, *args)
        except Exception as exc:
            raise StoreOperationFailed(str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return its status tag.
        """
        try:
            return await self._executor.execute(sql, *args)
        except Exception as exc:
            raise StoreOperationFailed(str(exc)) from exc


async def get_db() -> Database:
    """
    FastAPI dependency: the process-wide store handle.
    """
    return Database(pool())
