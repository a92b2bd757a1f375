"""Streaming bundle download via httpx."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import httpx

from designsync.errors import DownloadError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


async def fetch_archive(
    url: str,
    destination: Path,
    *,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> int:
    """Stream ``url`` into ``destination`` and return the byte count.

    Bytes land in a ``.part`` sibling first and are renamed into place only
    once the body is complete, so a failed download never leaves a file at
    ``destination``. No retries happen here.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    written = 0
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(partial, "wb") as fh:
                async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                    fh.write(chunk)
                    written += len(chunk)
        os.replace(partial, destination)
    except httpx.HTTPStatusError as e:
        raise DownloadError(f"Download failed: {url} returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise DownloadError(f"Download failed for {url}: {e}") from e
    finally:
        if partial.exists():
            partial.unlink()
        if owns_client:
            await client.aclose()

    logger.info("Downloaded %s (%.1f KB)", destination.name, written / 1024)
    return written
