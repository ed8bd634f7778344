"""Async database engine using asyncpg connection pool."""

import os

import asyncpg


async def create_pool(database_url: str | None = None) -> asyncpg.Pool:
    """Create the connection pool. Called once at app startup."""
    database_url = database_url or os.environ.get("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL environment variable is not set")
    return await asyncpg.create_pool(database_url, min_size=1, max_size=10)


async def close_pool(pool: asyncpg.Pool | None) -> None:
    """Close the connection pool. Called at app shutdown."""
    if pool is not None:
        await pool.close()
