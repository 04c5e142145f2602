"""Async database connection pool for the vault_documents table.

Records are JSONB rows, so each pooled connection gets a json/jsonb codec
and callers exchange plain dicts with the driver.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

logger = logging.getLogger(__name__)

_DEFAULT_DB = "vault"

_pool: asyncpg.Pool | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Per-connection init: json/jsonb columns map to Python objects."""
    await conn.set_type_codec("json", encoder=json.dumps, decoder=json.loads, schema="pg_catalog")
    await conn.set_type_codec("jsonb", encoder=json.dumps, decoder=json.loads, schema="pg_catalog")


class DatabaseConfig:
    """Resolves the DSN from the environment the process runs in."""

    @staticmethod
    def _on_cloud_run() -> bool:
        return bool(os.environ.get("K_SERVICE") or os.environ.get("CLOUD_RUN_JOB"))

    @staticmethod
    def get_connection_string() -> str:
        env = os.environ
        if url := env.get("DATABASE_URL"):
            return url

        if DatabaseConfig._on_cloud_run():
            user = env.get("ALLOYDB_USER", _DEFAULT_DB)
            password = env.get("ALLOYDB_PASSWORD", "")
            host = env.get("ALLOYDB_HOST")
            name = env.get("ALLOYDB_DB", _DEFAULT_DB)
            return f"postgresql://{user}:{password}@{host}/{name}"

        user = env.get("DB_USER", _DEFAULT_DB)
        password = env.get("DB_PASSWORD", _DEFAULT_DB)
        host = env.get("DB_HOST", "localhost")
        port = env.get("DB_PORT", "5432")
        name = env.get("DB_NAME", _DEFAULT_DB)
        sslmode = env.get("DB_SSLMODE", "disable")
        return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


async def get_pool() -> asyncpg.Pool:
    """Lazily create the process-wide pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        return _pool
    logger.info("Opening database pool")
    _pool = await asyncpg.create_pool(
        dsn=DatabaseConfig.get_connection_string(),
        min_size=1,
        max_size=int(os.environ.get("DB_POOL_MAX", "5")),
        command_timeout=30,
        init=_init_connection,
    )
    return _pool


async def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is None:
        return
    pool, _pool = _pool, None
    await pool.close()
    logger.info("Database pool closed")


async def check_db_connection() -> bool:
    """Readiness check: True when `SELECT 1` round-trips."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError):
        logger.exception("Database health check failed")
        return False


@asynccontextmanager
async def connection() -> AsyncIterator[asyncpg.Connection]:
    """Pooled connection inside a transaction; commits on clean exit."""
    pool = await get_pool()
    async with pool.acquire() as conn, conn.transaction():
        yield conn
