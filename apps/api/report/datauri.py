"""Data URI encoding helpers."""

import base64
import binascii
import re

DEFAULT_MIME_TYPE = "image/jpeg"

_IMAGE_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")


def normalize_image_mime(mime_type: str | None) -> str:
    """Return mime_type if it names an image, else the JPEG default."""
    if mime_type and mime_type.startswith("image/"):
        return mime_type
    return DEFAULT_MIME_TYPE


def decode_image(uri: str) -> bytes:
    """Strip a ``data:image/...;base64,`` prefix (if any) and decode the payload.

    Raises ValueError for payloads that are not valid base64.
    """
    payload = _IMAGE_PREFIX.sub("", uri.strip(), count=1)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 image payload: {exc}") from exc
