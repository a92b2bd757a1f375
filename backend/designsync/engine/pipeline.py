"""Bundle pipeline orchestrator.

link → download → extract/rename → stage → layers → composite → rasterize
→ text roles → final document → compress → package → publish.

Every run works in private folders suffixed with a random token and only
swaps its result into the stable ``processed_dir/<name>`` on success, so
concurrent requests deriving the same name never share a working tree.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from pathlib import Path

import httpx

from designsync.bundle.extract import (
    StagedDesign,
    extract_archive,
    normalize_filenames,
    stage_design_files,
)
from designsync.bundle.fetch import fetch_archive
from designsync.bundle.links import bundle_file_name, canonicalize_link, sanitize_name
from designsync.bundle.packaging import package_folder, publish_folder
from designsync.config import Settings
from designsync.engine.compression import CompressionEngine
from designsync.engine.context import BundleRequest, BundleResult
from designsync.engine.rasterizer import Rasterizer, create_rasterizer
from designsync.errors import ClassificationError
from designsync.svg.assembler import BACKGROUND_HREF, assemble_final
from designsync.svg.compositor import compose_background
from designsync.svg.layers import classify_layers
from designsync.svg.text_roles import DEFAULT_REFERENCES, RoleReferences, substitute_text
from designsync.utils.files import remove_path

logger = logging.getLogger(__name__)

# Fallback folder names use the tail of the bundle name
_FALLBACK_NAME_CHARS = 4


class BundlePipeline:
    """Runs one bundle from link to published archive."""

    def __init__(
        self,
        settings: Settings,
        rasterizer: Rasterizer | None = None,
        compression: CompressionEngine | None = None,
        references: RoleReferences = DEFAULT_REFERENCES,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self.rasterizer = rasterizer or create_rasterizer(
            settings.rasterizer_command, settings.download_dir
        )
        self.compression = compression or CompressionEngine(target_bytes=settings.target_image_bytes)
        self.references = references
        self.http_client = http_client

    def canonical_link(self, link: str) -> str:
        return canonicalize_link(
            link,
            self.settings.canonical_host,
            self.settings.legacy_hosts,
            self.settings.bundle_extension,
        )

    async def run(self, request: BundleRequest) -> BundleResult:
        start = time.perf_counter()
        url = self.canonical_link(request.link)
        file_name = bundle_file_name(url)
        token = secrets.token_hex(4)
        scratch = self.settings.download_dir / f".{Path(file_name).stem}-{token}"
        archive = scratch / file_name

        logger.info("Processing %s", url)
        try:
            await fetch_archive(
                url,
                archive,
                timeout=self.settings.download_timeout,
                client=self.http_client,
            )
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self.process_archive, archive, request, token)
        finally:
            remove_path(scratch)

        result.elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info("Finished %s in %.0fms", result.folder_name, result.elapsed_ms)
        return result

    def process_archive(self, archive: Path, request: BundleRequest, token: str) -> BundleResult:
        """Synchronous part of the run: everything after the download."""
        extract_root = archive.parent / archive.stem
        extract_archive(archive, extract_root)
        normalize_filenames(extract_root)

        folder_name = sanitize_name(
            request.img_no or request.id or extract_root.name[-_FALLBACK_NAME_CHARS:]
        )
        staging = self.settings.processed_dir / f".{folder_name}-{token}"
        output_staging = self.settings.output_dir / f".{folder_name}-{token}"
        try:
            staged = stage_design_files(extract_root, staging)
            self.render_design(staged, extract_root)
            compression = self.compression.compress_tree(staging)
            packaged = package_folder(
                folder_name, staging, self.settings.output_dir, work_dir=output_staging
            )
            # Output goes public only after the processed folder is in place
            processed = publish_folder(staging, self.settings.processed_dir / folder_name)
            publish_folder(output_staging, self.settings.output_dir / folder_name)
        except BaseException:
            remove_path(staging)
            remove_path(output_staging)
            raise

        return BundleResult(
            folder_name=folder_name,
            processed_folder=processed,
            zip_path=packaged.zip_path,
            preview_path=packaged.preview_path,
            has_preview=packaged.has_preview,
            compression=compression,
        )

    def render_design(self, staged: StagedDesign, asset_root: Path) -> None:
        """Rasterize the background and rewrite the staged markup as the final document."""
        markup = staged.markup.read_bytes()

        classification = classify_layers(markup, asset_root)
        if not classification.has_canvas:
            raise ClassificationError(
                f"No background layer defines the canvas in {staged.source_markup.name}"
            )
        self.rasterizer.render(
            compose_background(classification),
            staged.markup.parent / BACKGROUND_HREF,
            classification.canvas_width,
            classification.canvas_height,
        )

        final = assemble_final(substitute_text(markup, self.references))
        staged.markup.write_text(final, encoding="utf-8")
