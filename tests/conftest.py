from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

import images_main
import main
from deps import get_analyzer, get_cloud_storage, get_db_pool, get_local_storage, get_renderer
from report.analyzer import PlantAnalyzer
from report.renderer import ReportRenderer
from storage.cloud import StoredImage
from storage.local import LocalStorage


def _encode(ext: str, width: int = 96, height: int = 64) -> bytes:
    img = np.full((height, width, 3), (60, 160, 60), dtype=np.uint8)
    cv2.circle(img, (width // 2, height // 2), min(width, height) // 3, (40, 90, 200), -1)
    ok, buf = cv2.imencode(ext, img)
    assert ok
    return buf.tobytes()


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return _encode(".jpg")


@pytest.fixture()
def png_bytes() -> bytes:
    return _encode(".png", width=300, height=120)


@pytest.fixture()
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "data")


def make_message(*texts: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


@pytest.fixture()
def anthropic_client() -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=make_message("Species: Monstera deliciosa. Health: good.")
    )
    return client


@pytest.fixture()
def report_client(local_storage, anthropic_client):
    """TestClient for the plant report app with collaborators swapped for fakes."""
    analyzer = PlantAnalyzer(anthropic_client, model="test-model")
    main.app.dependency_overrides[get_local_storage] = lambda: local_storage
    main.app.dependency_overrides[get_renderer] = lambda: ReportRenderer(local_storage)
    main.app.dependency_overrides[get_analyzer] = lambda: analyzer
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


class FakeCloudStorage:
    cloud_name = "demo"

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.uploads: list[bytes] = []
        self._counter = 1700000000000

    async def upload(self, fileobj) -> StoredImage:
        if self.error is not None:
            raise self.error
        self.uploads.append(fileobj.read())
        self._counter += 1
        public_id = f"file_{self._counter}"
        return StoredImage(
            url=f"https://res.cloudinary.com/{self.cloud_name}/image/upload/v1/{public_id}.png",
            public_id=public_id,
        )


class FakePool:
    """In-memory stand-in for the two asyncpg pool calls the queries make."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.rows: list[dict] = []

    async def fetchrow(self, query: str, *args):
        if self.error is not None:
            raise self.error
        url, public_id = args
        row = {
            "id": len(self.rows) + 1,
            "url": url,
            "public_id": public_id,
            "created_at": datetime(2026, 10, 17, 12, 0, len(self.rows), tzinfo=timezone.utc),
        }
        self.rows.append(row)
        return row

    async def fetch(self, query: str, *args):
        if self.error is not None:
            raise self.error
        return list(self.rows)


@pytest.fixture()
def cloud_storage() -> FakeCloudStorage:
    return FakeCloudStorage()


@pytest.fixture()
def db_pool() -> FakePool:
    return FakePool()


@pytest.fixture()
def images_client(cloud_storage, db_pool):
    images_main.app.dependency_overrides[get_cloud_storage] = lambda: cloud_storage
    images_main.app.dependency_overrides[get_db_pool] = lambda: db_pool
    yield TestClient(images_main.app)
    images_main.app.dependency_overrides.clear()
