"""FastAPI app factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from designsync.config import Settings, settings
from designsync.engine.pipeline import BundlePipeline
from designsync.errors import DesignSyncError
from designsync.models.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def _design_sync_error(request: Request, exc: DesignSyncError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc) or type(exc).__name__).model_dump(),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.warning("%s %s rejected: %s", request.method, request.url.path, problems)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(message="; ".join(problems) or "Invalid request").model_dump(),
    )


def create_app(
    app_settings: Settings | None = None,
    pipeline: BundlePipeline | None = None,
) -> FastAPI:
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        cfg.ensure_dirs()
        logger.info("Serving output tree %s", cfg.output_dir.resolve())
        yield

    app = FastAPI(
        title="DesignSync",
        description="CRDesign bundle recomposition, compression and packaging service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["OPTIONS", "GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.state.settings = cfg
    app.state.pipeline = pipeline or BundlePipeline(cfg)
    app.add_exception_handler(DesignSyncError, _design_sync_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    from designsync.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve ``app`` with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
