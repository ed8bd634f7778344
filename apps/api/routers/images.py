"""Image record endpoints: upload to cloud storage and list stored records."""

import logging

import asyncpg
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from db.queries import insert_image, list_images
from deps import get_cloud_storage, get_db_pool
from schemas.images import ImageList, ImageRecord, UploadResponse
from storage.cloud import CloudImageStorage, StorageUploadError
from storage.local import MAX_UPLOAD_SIZE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error_code": code, "error": message})


@router.post("/upload")
async def upload_image(
    file: UploadFile | None = File(None),
    cloud: CloudImageStorage | None = Depends(get_cloud_storage),
    pool: asyncpg.Pool | None = Depends(get_db_pool),
):
    """Upload an image to cloud storage and record its URL."""
    if file is None:
        return _error(400, "NO_FILE", "No file uploaded.")
    if not (file.content_type or "").startswith("image/"):
        return _error(400, "INVALID_MIME_TYPE", "Only image files are allowed!")
    if file.size is not None and file.size > MAX_UPLOAD_SIZE:
        return _error(413, "FILE_TOO_LARGE", f"File exceeds {MAX_UPLOAD_SIZE // (1024 * 1024)} MB.")
    if cloud is None:
        return _error(500, "MISSING_STORAGE_CONFIG", "Cloud storage credentials are not configured.")
    if pool is None:
        return _error(503, "DB_UNAVAILABLE", "Database is not configured.")

    try:
        stored = await cloud.upload(file.file)
    except StorageUploadError as exc:
        logger.exception("Upload of %s failed", file.filename)
        return _error(502, "STORAGE_FAILED", str(exc))
    except Exception as exc:
        logger.exception("Unexpected error uploading %s", file.filename)
        return _error(500, "UPLOAD_FAILED", str(exc))

    try:
        row = await insert_image(pool, url=stored.url, public_id=stored.public_id)
    except DB_ERRORS as exc:
        logger.exception("Could not record image %s", stored.public_id)
        return _error(500, "DB_ERROR", str(exc))
    except Exception as exc:
        logger.exception("Unexpected error recording image %s", stored.public_id)
        return _error(500, "INTERNAL_ERROR", str(exc))

    response = UploadResponse(msg="File Uploaded", uploaded=ImageRecord.from_row(row))
    return JSONResponse(content=response.model_dump())


@router.get("/images")
async def list_all_images(pool: asyncpg.Pool | None = Depends(get_db_pool)):
    """List every stored image record."""
    if pool is None:
        return _error(503, "DB_UNAVAILABLE", "Database is not configured.")

    try:
        rows = await list_images(pool)
    except DB_ERRORS as exc:
        logger.exception("Could not list images")
        return _error(500, "DB_ERROR", str(exc))
    except Exception as exc:
        logger.exception("Unexpected error listing images")
        return _error(500, "INTERNAL_ERROR", str(exc))

    return JSONResponse(content=ImageList(images=[ImageRecord.from_row(r) for r in rows]).model_dump())
