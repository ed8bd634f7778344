"""Plant image analysis via a vision-capable Claude model."""

import base64
import logging
from dataclasses import dataclass
from pathlib import Path

import anthropic
import cv2
import numpy as np

from report import datauri
from report.prompts import ANALYSIS_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-6"
MAX_TOKENS = 4096

# Provider limits for base64 image blocks.
MODEL_MEDIA_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
MAX_MODEL_IMAGE_BYTES = 5 * 1024 * 1024  # encoded payload
MIN_MODEL_IMAGE_SIDE = 64
JPEG_QUALITY = 85


class AnalysisError(Exception):
    """Raised when the vision model call fails or returns nothing usable."""


@dataclass(frozen=True)
class AnalysisResult:
    text: str
    image: str  # data URI of the analysed image


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("utf-8")


def prepare_model_image(data: bytes, media_type: str) -> tuple[str, str]:
    """Return (base64 payload, media type) the model accepts.

    Supported types under the size limit pass through untouched. Anything
    else is decoded with OpenCV and re-encoded as JPEG, shrinking by a
    quarter per step until the encoded payload fits.
    """
    encoded = _b64(data)
    if media_type in MODEL_MEDIA_TYPES and len(encoded) <= MAX_MODEL_IMAGE_BYTES:
        return encoded, media_type

    img = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise AnalysisError(f"Could not decode {media_type} image for analysis")

    scale = 1.0
    while True:
        resized = img if scale == 1.0 else cv2.resize(
            img, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA
        )
        ok, buf = cv2.imencode(".jpg", resized, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY])
        if not ok:
            raise AnalysisError("Could not re-encode image for analysis")
        encoded = _b64(buf.tobytes())
        if len(encoded) <= MAX_MODEL_IMAGE_BYTES or min(resized.shape[:2]) <= MIN_MODEL_IMAGE_SIDE:
            logger.info(
                "Re-encoded %s image (%d bytes) as JPEG %dx%d (%d bytes)",
                media_type, len(data), resized.shape[1], resized.shape[0], buf.size,
            )
            return encoded, "image/jpeg"
        scale *= 0.75


class PlantAnalyzer:
    def __init__(self, client: anthropic.AsyncAnthropic, model: str = DEFAULT_MODEL):
        self._client = client
        self.model = model

    @classmethod
    def from_api_key(cls, api_key: str, model: str = DEFAULT_MODEL) -> "PlantAnalyzer":
        return cls(anthropic.AsyncAnthropic(api_key=api_key), model=model)

    async def analyze(self, image_path: Path, mime_type: str | None) -> AnalysisResult:
        """Send the image plus the fixed instruction prompt in a single request.

        Returns the model's text verbatim and the original image bytes
        re-encoded as a data URI so the caller can resubmit both for a report.
        The model may see a converted copy; the data URI never does.
        """
        data = image_path.read_bytes()
        media_type = datauri.normalize_image_mime(mime_type)
        model_data, model_media_type = prepare_model_image(data, media_type)

        content = [
            {"type": "text", "text": ANALYSIS_PROMPT},
            {
                "type": "image",
                "source": {"type": "base64", "media_type": model_media_type, "data": model_data},
            },
        ]

        try:
            message = await self._client.messages.create(
                model=self.model,
                max_tokens=MAX_TOKENS,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.APIError as exc:
            raise AnalysisError(f"AI provider error: {exc}") from exc

        text = "".join(block.text for block in message.content if block.type == "text").strip()
        if not text:
            raise AnalysisError("AI returned an empty response")

        logger.info("Analyzed %s (%d bytes, %s) with %s", image_path.name, len(data), media_type, self.model)
        return AnalysisResult(text=text, image=f"data:{media_type};base64,{_b64(data)}")
