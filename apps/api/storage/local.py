"""Local disk storage for transient uploads and generated reports."""

import logging
import os
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

# Resolve data dir relative to repo root
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent.parent
DATA_DIR = Path(os.environ.get("DATA_DIR") or _REPO_ROOT / "data")

CHUNK_SIZE = 1024 * 1024  # 1 MB
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10 MB


class UploadTooLarge(Exception):
    """Raised when an upload exceeds the configured size cap."""


class LocalStorage:
    def __init__(self, base_dir: Path | None = None):
        self.base = base_dir or DATA_DIR
        self._ensure_dirs()

    def _ensure_dirs(self) -> None:
        for subdir in ("uploads", "reports"):
            (self.base / subdir).mkdir(parents=True, exist_ok=True)

    @property
    def uploads_dir(self) -> Path:
        return self.base / "uploads"

    @property
    def reports_dir(self) -> Path:
        return self.base / "reports"

    def upload_path(self, filename: str | None) -> Path:
        ext = Path(filename or "").suffix.lower()
        return self.uploads_dir / f"{uuid.uuid4().hex}{ext}"

    def report_path(self) -> Path:
        return self.reports_dir / f"Plant_Analysis_Report_{int(time.time() * 1000)}.pdf"

    def temp_image_path(self) -> Path:
        return self.reports_dir / f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.png"

    async def save_upload(self, upload, max_size: int) -> Path:
        """Stream an UploadFile to the uploads dir in chunks.

        Raises UploadTooLarge (after removing the partial file) when the
        stream exceeds max_size bytes.
        """
        dest = self.upload_path(upload.filename)
        size = 0
        try:
            with open(dest, "wb") as f:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > max_size:
                        raise UploadTooLarge(f"File exceeds {max_size // (1024 * 1024)} MB.")
                    f.write(chunk)
        except Exception:
            dest.unlink(missing_ok=True)
            raise
        return dest

    def discard(self, path: Path) -> None:
        """Delete a transient file. Failures are logged, never raised."""
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not delete %s: %s", path, exc)

    @contextmanager
    def transient(self, path: Path) -> Iterator[Path]:
        """Scope a file's lifetime: it is deleted when the block exits."""
        try:
            yield path
        finally:
            self.discard(path)

    def purge(self) -> int:
        """Remove every leftover transient file. Returns the count removed."""
        removed = 0
        for directory in (self.uploads_dir, self.reports_dir):
            for path in directory.iterdir():
                if path.is_file():
                    self.discard(path)
                    removed += 1
        return removed
