"""Path resolution for the public file endpoint."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from designsync.errors import PathTraversalError

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}
DEFAULT_CONTENT_TYPE = "application/zip"

# Undo nested percent-encoding such as %252e%252e
_MAX_DECODE_ROUNDS = 4


def content_type_for(path: Path | str) -> str:
    return CONTENT_TYPES.get(PurePosixPath(str(path)).suffix.lower(), DEFAULT_CONTENT_TYPE)


def _decode(request_path: str) -> str:
    decoded = request_path
    for _ in range(_MAX_DECODE_ROUNDS):
        step = unquote(decoded)
        if step == decoded:
            break
        decoded = step
    return decoded


def resolve_public_path(root: Path, request_path: str) -> Path:
    """Map a request path onto a file path inside ``root``.

    Parent-directory segments, encoded or not, are rejected before any
    filesystem access. Symlinks resolving outside ``root`` are rejected too.
    Existence is not checked here.
    """
    decoded = _decode(request_path).replace("\\", "/")
    if "\x00" in decoded:
        raise PathTraversalError("Forbidden")

    parts = [p for p in PurePosixPath(decoded.lstrip("/")).parts if p not in ("", ".")]
    if ".." in parts:
        raise PathTraversalError("Forbidden")

    base = root.resolve()
    candidate = base.joinpath(*parts).resolve()
    if not candidate.is_relative_to(base):
        raise PathTraversalError("Forbidden")
    return candidate
