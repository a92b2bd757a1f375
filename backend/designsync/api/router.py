"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from designsync.api import download, files, health

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(download.router)
api_router.include_router(files.router)
