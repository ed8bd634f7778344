"""
Image Record service: FastAPI backend.

Endpoints:
  POST /upload    Upload an image → cloud storage (PNG, file_<ms>) → DB record
  GET  /images    List all stored image records
  GET  /healthz   Liveness check
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import asyncpg
from dotenv import load_dotenv
from fastapi import FastAPI

# Load .env from repo root (two levels up from apps/api/)
_root = Path(__file__).resolve().parent.parent.parent
load_dotenv(_root / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from db.engine import close_pool, create_pool
from routers import images
from storage.cloud import DEFAULT_FOLDER, CloudImageStorage


def _build_cloud_storage() -> CloudImageStorage | None:
    cloud_name = os.environ.get("CLOUDINARY_CLOUD_NAME")
    api_key = os.environ.get("CLOUDINARY_API_KEY")
    api_secret = os.environ.get("CLOUDINARY_SECRET")
    if not (cloud_name and api_key and api_secret):
        logger.warning("Cloudinary credentials not set; /upload will not work")
        return None
    return CloudImageStorage(
        cloud_name=cloud_name,
        api_key=api_key,
        api_secret=api_secret,
        folder=os.environ.get("CLOUDINARY_FOLDER", DEFAULT_FOLDER),
    )


# ── Lifespan: init/close DB pool ──────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.cloud_storage = _build_cloud_storage()
    app.state.db_pool = None
    if os.environ.get("DATABASE_URL"):
        try:
            app.state.db_pool = await create_pool()
            logger.info("Database pool initialized")
        except (OSError, asyncpg.PostgresError) as exc:
            logger.error("There's an error while connecting to the database: %s", exc)
    else:
        logger.warning("DATABASE_URL not set; image endpoints will not work")
    yield
    await close_pool(app.state.db_pool)
    if app.state.db_pool is not None:
        logger.info("Database pool closed")


app = FastAPI(title="Image Record", lifespan=lifespan)

app.include_router(images.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))
