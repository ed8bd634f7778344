"""Cloudinary-backed image storage for the image record service."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import BinaryIO

import cloudinary.exceptions
import cloudinary.uploader

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "images-folder"


class StorageUploadError(Exception):
    """Raised when the storage provider rejects or fails an upload."""


@dataclass(frozen=True)
class StoredImage:
    url: str
    public_id: str


class CloudImageStorage:
    """Uploads images to one Cloudinary account.

    Credentials are passed per call rather than through the SDK's global
    ``cloudinary.config`` so several instances can coexist (and tests can
    construct one without touching process state).
    """

    def __init__(self, *, cloud_name: str, api_key: str, api_secret: str, folder: str = DEFAULT_FOLDER):
        self.cloud_name = cloud_name
        self.folder = folder
        self._credentials = {
            "cloud_name": cloud_name,
            "api_key": api_key,
            "api_secret": api_secret,
        }

    @staticmethod
    def new_public_id() -> str:
        return f"file_{int(time.time() * 1000)}"

    def _upload_sync(self, fileobj: BinaryIO, public_id: str) -> dict:
        return cloudinary.uploader.upload(
            fileobj,
            resource_type="image",
            format="png",
            public_id=public_id,
            asset_folder=self.folder,
            secure=True,
            **self._credentials,
        )

    async def upload(self, fileobj: BinaryIO) -> StoredImage:
        public_id = self.new_public_id()
        try:
            result = await asyncio.to_thread(self._upload_sync, fileobj, public_id)
        except cloudinary.exceptions.Error as exc:
            raise StorageUploadError(f"Storage provider error: {exc}") from exc
        except OSError as exc:
            raise StorageUploadError(f"Storage network error: {exc}") from exc

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise StorageUploadError("Storage provider returned no URL")
        stored = StoredImage(url=url, public_id=result.get("public_id", public_id))
        logger.info("Uploaded image %s to %s", stored.public_id, self.cloud_name)
        return stored
