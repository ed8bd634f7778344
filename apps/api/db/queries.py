"""Typed query functions for the images table."""

from __future__ import annotations

import asyncpg


async def insert_image(pool: asyncpg.Pool, *, url: str, public_id: str) -> dict:
    row = await pool.fetchrow(
        """
        INSERT INTO images (url, public_id)
        VALUES ($1, $2)
        RETURNING *
        """,
        url, public_id,
    )
    return dict(row)


async def list_images(pool: asyncpg.Pool) -> list[dict]:
    rows = await pool.fetch("SELECT * FROM images ORDER BY created_at, id")
    return [dict(r) for r in rows]
