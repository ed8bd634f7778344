"""Plant image analysis endpoint."""

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from deps import get_analyzer, get_local_storage
from report.analyzer import PlantAnalyzer
from schemas.analysis import AnalyzeResponse
from storage.local import MAX_UPLOAD_SIZE, LocalStorage, UploadTooLarge

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error_code": code, "error": message})


@router.post("/analyze")
async def analyze_plant(
    image: UploadFile | None = File(None),
    storage: LocalStorage = Depends(get_local_storage),
    analyzer: PlantAnalyzer | None = Depends(get_analyzer),
):
    """Analyze an uploaded plant image with the vision model.

    The upload lives on disk only for the duration of this request.
    """
    if image is None:
        return _error(400, "NO_FILE", "No image uploaded.")
    if not (image.content_type or "").startswith("image/"):
        return _error(400, "INVALID_MIME_TYPE", "Only image files are allowed!")
    if analyzer is None:
        return _error(500, "MISSING_API_KEY", "ANTHROPIC_API_KEY is not configured.")

    try:
        upload_path = await storage.save_upload(image, MAX_UPLOAD_SIZE)
    except UploadTooLarge as exc:
        return _error(413, "FILE_TOO_LARGE", str(exc))

    with storage.transient(upload_path):
        try:
            analysis = await analyzer.analyze(upload_path, image.content_type)
        except Exception as exc:
            logger.exception("Analysis failed for %s", image.filename)
            return _error(500, "ANALYSIS_FAILED", str(exc))

    return JSONResponse(content=AnalyzeResponse(result=analysis.text, image=analysis.image).model_dump())
