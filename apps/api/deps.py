"""FastAPI dependency providers.

Collaborators are built once in each app's lifespan and kept on ``app.state``;
handlers receive them through these functions so tests can swap in fakes via
``app.dependency_overrides``.
"""

import asyncpg
from fastapi import Request

from report.analyzer import PlantAnalyzer
from report.renderer import ReportRenderer
from storage.cloud import CloudImageStorage
from storage.local import LocalStorage


def get_local_storage(request: Request) -> LocalStorage:
    return request.app.state.local_storage


def get_analyzer(request: Request) -> PlantAnalyzer | None:
    return getattr(request.app.state, "analyzer", None)


def get_renderer(request: Request) -> ReportRenderer:
    return request.app.state.renderer


def get_cloud_storage(request: Request) -> CloudImageStorage | None:
    return getattr(request.app.state, "cloud_storage", None)


def get_db_pool(request: Request) -> asyncpg.Pool | None:
    return getattr(request.app.state, "db_pool", None)
