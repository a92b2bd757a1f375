"""POST /download-image endpoint."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from designsync.api.files import FILES_PREFIX
from designsync.dependencies import get_pipeline
from designsync.engine.context import BundleRequest
from designsync.engine.pipeline import BundlePipeline
from designsync.errors import DesignSyncError
from designsync.models.requests import DownloadImageRequest
from designsync.models.responses import DownloadImageResponse, ErrorResponse

router = APIRouter()
logger = logging.getLogger(__name__)


def _public_url(path: Path, output_root: Path) -> str:
    return f"{FILES_PREFIX}/{path.relative_to(output_root).as_posix()}"


@router.post(
    "/download-image",
    response_model=DownloadImageResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def download_image(
    req: DownloadImageRequest | None = None,
    pipeline: BundlePipeline = Depends(get_pipeline),
):
    if req is None or not (req.link or "").strip():
        return JSONResponse(status_code=400, content=ErrorResponse(message="link is required").model_dump())

    try:
        result = await pipeline.run(BundleRequest(link=req.link, id=req.id, img_no=req.img_no))
    except DesignSyncError:
        raise
    except Exception as e:
        logger.exception("Processing error for %s", req.link)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=str(e) or "Processing failed").model_dump(),
        )

    output_root = pipeline.settings.output_dir
    return DownloadImageResponse(
        folder_name=result.folder_name,
        zip_path=str(result.zip_path),
        preview_path=str(result.preview_path),
        zip_url=_public_url(result.zip_path, output_root),
        preview_url=_public_url(result.preview_path, output_root) if result.has_preview else "",
        oversize_assets=[p.name for p in result.oversize_assets],
        processing_time_ms=result.elapsed_ms,
    )
