"""
Plant Report service: FastAPI backend.

Endpoints:
  POST /analyze    Upload a plant image → vision-model analysis + image data URI
  POST /download   Analysis text (+ optional data URI image) → PDF attachment
  GET  /healthz    Liveness check

Static front-end files in apps/api/public/ are served at / when present.
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

# Load .env from repo root (two levels up from apps/api/)
_root = Path(__file__).resolve().parent.parent.parent
load_dotenv(_root / ".env")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from report.analyzer import DEFAULT_MODEL, PlantAnalyzer
from report.renderer import ReportRenderer
from routers import analyze, reports
from storage.local import LocalStorage

PUBLIC_DIR = Path(__file__).resolve().parent / "public"


def _build_analyzer() -> PlantAnalyzer | None:
    api_key = os.environ.get("ANTHROPIC_API_KEY")
    if not api_key or api_key == "your-api-key-here":
        logger.warning("ANTHROPIC_API_KEY not set; /analyze will not work")
        return None
    return PlantAnalyzer.from_api_key(api_key, model=os.environ.get("ANALYSIS_MODEL", DEFAULT_MODEL))


# ── Lifespan: build collaborators, sweep transient files on exit ──────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    local_storage = LocalStorage()
    app.state.local_storage = local_storage
    app.state.renderer = ReportRenderer(local_storage)
    app.state.analyzer = _build_analyzer()
    logger.info("Transient files under %s", local_storage.base)
    yield
    removed = local_storage.purge()
    if removed:
        logger.info("Removed %d leftover transient files", removed)


app = FastAPI(title="Plant Report", lifespan=lifespan)

app.include_router(analyze.router)
app.include_router(reports.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


# Mounted last so API routes take precedence.
if PUBLIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True), name="public")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
