"""Apply pending SQL migrations for the image record service."""

import asyncio
import os
import sys
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

_root = Path(__file__).resolve().parent.parent.parent.parent
load_dotenv(_root / ".env")

MIGRATIONS_DIR = Path(__file__).parent


async def apply_migrations(conn: asyncpg.Connection, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Run every *.sql file not yet recorded in _migrations, in name order."""
    await conn.execute("""
        CREATE TABLE IF NOT EXISTS _migrations (
            filename TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
        )
    """)

    applied = {row["filename"] for row in await conn.fetch("SELECT filename FROM _migrations")}

    newly_applied = []
    for sql_file in sorted(migrations_dir.glob("*.sql")):
        if sql_file.name in applied:
            print(f"  SKIP  {sql_file.name} (already applied)")
            continue

        print(f"  APPLY {sql_file.name}")
        async with conn.transaction():
            await conn.execute(sql_file.read_text(encoding="utf-8"))
            await conn.execute("INSERT INTO _migrations (filename) VALUES ($1)", sql_file.name)
        newly_applied.append(sql_file.name)
    return newly_applied


async def run_migrations():
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    conn = await asyncpg.connect(database_url)
    try:
        await apply_migrations(conn)
    finally:
        await conn.close()
    print("Migrations complete.")


if __name__ == "__main__":
    asyncio.run(run_migrations())
