"""PDF report download endpoint."""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from deps import get_local_storage, get_renderer
from report.renderer import InvalidImageError, ReportRenderError, ReportRenderer
from schemas.analysis import DownloadRequest
from storage.local import LocalStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


def _error(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error_code": code, "error": message})


@router.post("/download")
async def download_report(
    body: DownloadRequest,
    renderer: ReportRenderer = Depends(get_renderer),
    storage: LocalStorage = Depends(get_local_storage),
):
    """Render the analysis text (and optional image) to a PDF attachment.

    The PDF is removed from disk before the response is sent, so nothing
    outlives the request however the send ends.
    """
    try:
        report_path = await asyncio.to_thread(renderer.render, body.result, body.image)
    except InvalidImageError as exc:
        return _error(400, "INVALID_IMAGE", str(exc))
    except ReportRenderError as exc:
        logger.exception("Report rendering failed")
        return _error(500, "REPORT_FAILED", str(exc))

    with storage.transient(report_path):
        try:
            pdf = await asyncio.to_thread(report_path.read_bytes)
        except OSError as exc:
            logger.exception("Could not read report %s", report_path.name)
            return _error(500, "REPORT_FAILED", str(exc))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{report_path.name}"'},
    )
