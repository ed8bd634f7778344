"""PDF rendering of plant analysis reports.

Layout: page 1 holds a centred title, the generation date and the analysis
text; text overflow is paginated by ReportLab itself. An optional image gets
its own page, scaled to fit a 500x400 box and centred in the page frame.
"""

import logging
from contextlib import ExitStack
from datetime import date
from pathlib import Path
from xml.sax.saxutils import escape

import cv2
import numpy as np
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from report import datauri
from report.prompts import REPORT_TITLE
from storage.local import LocalStorage

logger = logging.getLogger(__name__)

IMAGE_FIT_WIDTH = 500
IMAGE_FIT_HEIGHT = 400

# Side margins leave exactly IMAGE_FIT_WIDTH inside the default frame padding.
FRAME_PADDING = 6
SIDE_MARGIN = 50
VERTICAL_MARGIN = 72


class ReportRenderError(Exception):
    """Raised when the PDF could not be written."""


class InvalidImageError(ReportRenderError):
    """Raised when the supplied image data cannot be decoded."""


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()["Normal"]
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base, fontName="Helvetica-Bold",
            fontSize=24, leading=29, alignment=TA_CENTER, spaceAfter=18,
        ),
        "date": ParagraphStyle(
            "ReportDate", parent=base, fontSize=16, leading=20, spaceAfter=14,
        ),
        "body": ParagraphStyle(
            "ReportBody", parent=base, fontSize=14, leading=18, alignment=TA_LEFT,
        ),
    }


def _format_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"


def fit_size(width: int, height: int) -> tuple[float, float]:
    """Scale (width, height) to fit the image box, preserving aspect ratio."""
    scale = min(IMAGE_FIT_WIDTH / width, IMAGE_FIT_HEIGHT / height)
    return width * scale, height * scale


class ReportRenderer:
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _new_document(self, path: Path) -> SimpleDocTemplate:
        return SimpleDocTemplate(
            str(path),
            pagesize=letter,
            leftMargin=SIDE_MARGIN,
            rightMargin=SIDE_MARGIN,
            topMargin=VERTICAL_MARGIN,
            bottomMargin=VERTICAL_MARGIN,
            title=REPORT_TITLE,
        )

    def _text_story(self, text: str) -> list:
        styles = _styles()
        body = escape(text).replace("\r\n", "\n").replace("\n", "<br/>")
        return [
            Paragraph(REPORT_TITLE, styles["title"]),
            Paragraph(f"Date: {_format_date(date.today())}", styles["date"]),
            Spacer(1, 6),
            Paragraph(body, styles["body"]),
        ]

    def _write_temp_png(self, image_uri: str, dest: Path) -> tuple[int, int]:
        """Decode a data URI and re-encode it as PNG at dest. Returns (width, height)."""
        try:
            raw = datauri.decode_image(image_uri)
        except ValueError as exc:
            raise InvalidImageError(str(exc)) from exc
        if not raw:
            raise InvalidImageError("Image data is empty.")

        img = cv2.imdecode(np.frombuffer(raw, dtype=np.uint8), cv2.IMREAD_COLOR)
        if img is None:
            raise InvalidImageError("Image data could not be decoded.")

        ok, png = cv2.imencode(".png", img)
        if not ok:
            raise InvalidImageError("Image could not be re-encoded as PNG.")
        try:
            dest.write_bytes(png.tobytes())
        except OSError as exc:
            raise ReportRenderError(f"Could not write temporary image: {exc}") from exc

        height, width = img.shape[:2]
        return width, height

    def _image_story(self, doc: SimpleDocTemplate, png_path: Path, width: int, height: int) -> list:
        draw_w, draw_h = fit_size(width, height)
        frame_w = doc.width - 2 * FRAME_PADDING
        frame_h = doc.height - 2 * FRAME_PADDING

        # One full-frame cell gives horizontal and vertical centring.
        cell = Table(
            [[Image(str(png_path), width=draw_w, height=draw_h)]],
            colWidths=[frame_w],
            rowHeights=[frame_h - 1],
        )
        cell.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
            ("RIGHTPADDING", (0, 0), (-1, -1), 0),
            ("TOPPADDING", (0, 0), (-1, -1), 0),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
        ]))
        return [PageBreak(), cell]

    def render(self, text: str, image: str | None = None) -> Path:
        """Build the report PDF and return its path once fully written.

        The temporary PNG (if any) is removed as soon as the build ends. On
        failure no partial PDF is left behind.
        """
        out_path = self.storage.report_path()
        doc = self._new_document(out_path)
        story = self._text_story(text)

        with ExitStack() as stack:
            if image:
                temp_png = stack.enter_context(self.storage.transient(self.storage.temp_image_path()))
                width, height = self._write_temp_png(image, temp_png)
                story.extend(self._image_story(doc, temp_png, width, height))

            try:
                doc.build(story)
            except Exception as exc:
                self.storage.discard(out_path)
                raise ReportRenderError(f"Could not write report: {exc}") from exc

        logger.info("Rendered report %s (%d pages)", out_path.name, doc.page)
        return out_path
