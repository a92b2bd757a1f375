"""GET /files/{path} — forced-download access to the public output tree."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from designsync.bundle.serving import content_type_for, resolve_public_path
from designsync.config import Settings
from designsync.dependencies import get_settings
from designsync.errors import PathTraversalError

router = APIRouter()
logger = logging.getLogger(__name__)

FILES_PREFIX = "/files"


@router.get(FILES_PREFIX + "/{file_path:path}")
async def serve_output_file(file_path: str, settings: Settings = Depends(get_settings)) -> FileResponse:
    try:
        path = resolve_public_path(settings.output_dir, file_path)
    except PathTraversalError:
        logger.warning("Rejected traversal attempt: %r", file_path)
        raise HTTPException(status_code=403, detail="Forbidden")

    if not path.is_file():
        raise HTTPException(status_code=404, detail="Not found")

    return FileResponse(
        path,
        media_type=content_type_for(path),
        filename=path.name,
        content_disposition_type="attachment",
    )
