"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Request

from designsync.config import Settings
from designsync.engine.pipeline import BundlePipeline


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> BundlePipeline:
    return request.app.state.pipeline
