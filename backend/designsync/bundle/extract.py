"""Bundle extraction, proprietary-suffix normalization and staging.

A CRDesign bundle is a zip container. Inside it, raster and markup files
carry ``.dg``-prefixed suffixes (``.dgpng``, ``.dgjpg``, ``.dgsvg``...) and
the thumbnail is a ``.prib`` file. After extraction the suffixes are mapped
to their standard equivalents and the first markup/thumbnail pair is copied
into the staging folder under fixed names.
"""

from __future__ import annotations

import logging
import re
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path

from designsync.errors import ExtractionError
from designsync.utils.files import empty_dir, find_files, walk_files

logger = logging.getLogger(__name__)

# Applied in order; the last rule collapses any remaining ".dg" segment.
_SUFFIX_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.dgpng$", re.IGNORECASE), ".png"),
    (re.compile(r"\.dgjpg$", re.IGNORECASE), ".jpg"),
    (re.compile(r"\.dg", re.IGNORECASE), "."),
)

MARKUP_SUFFIX = ".svg"
PREVIEW_SUFFIX = ".prib"
CURRENT_MARKUP = "current.svg"
PREVIEW_IMAGE = "preview.png"


@dataclass(frozen=True)
class StagedDesign:
    """Markup/preview copies placed in the staging folder."""

    markup: Path
    preview: Path | None
    source_markup: Path
    markup_candidates: tuple[Path, ...] = ()
    preview_candidates: tuple[Path, ...] = ()


def extract_archive(archive: Path, destination: Path) -> int:
    """Extract every entry of ``archive`` into ``destination``.

    The file is opened as a zip whatever its extension. Entries whose
    resolved path would land outside ``destination`` abort the extraction.
    Returns the number of entries.
    """
    destination.mkdir(parents=True, exist_ok=True)
    root = destination.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            members = zf.infolist()
            for member in members:
                target = (root / member.filename).resolve()
                if target != root and not target.is_relative_to(root):
                    raise ExtractionError(f"Unsafe entry in bundle: {member.filename!r}")
            zf.extractall(root)
    except (zipfile.BadZipFile, EOFError, NotImplementedError) as e:
        raise ExtractionError(f"Corrupt bundle {archive.name}: {e}") from e

    logger.info("Extracted %d entries from %s", len(members), archive.name)
    return len(members)


def normalized_name(name: str) -> str:
    """Map a proprietary file name to its standard equivalent."""
    for pattern, replacement in _SUFFIX_RULES:
        name = pattern.sub(replacement, name)
    return name


def normalize_filenames(root: Path) -> list[tuple[Path, Path]]:
    """Rename proprietary-suffixed files under ``root``. Returns (old, new) pairs."""
    renamed: list[tuple[Path, Path]] = []
    for path in list(walk_files(root)):
        new_name = normalized_name(path.name)
        if new_name == path.name:
            continue
        target = path.with_name(new_name)
        path.replace(target)
        renamed.append((path, target))
        logger.debug("Renamed %s -> %s", path.name, new_name)
    return renamed


def stage_design_files(extract_root: Path, staging: Path) -> StagedDesign:
    """Copy the first markup and first thumbnail into an emptied ``staging``."""
    empty_dir(staging)

    found = find_files(extract_root, (MARKUP_SUFFIX, PREVIEW_SUFFIX))
    markups = tuple(p for p in found if p.suffix.lower() == MARKUP_SUFFIX)
    previews = tuple(p for p in found if p.suffix.lower() == PREVIEW_SUFFIX)

    if not markups:
        raise ExtractionError("Bundle contains no vector markup (.svg) file")
    if len(markups) > 1:
        logger.warning(
            "Bundle has %d markup files; using %s",
            len(markups),
            markups[0].relative_to(extract_root),
        )

    markup = staging / CURRENT_MARKUP
    shutil.copyfile(markups[0], markup)

    preview = None
    if previews:
        preview = staging / PREVIEW_IMAGE
        shutil.copyfile(previews[0], preview)
    else:
        logger.warning("Bundle has no %s thumbnail", PREVIEW_SUFFIX)

    return StagedDesign(
        markup=markup,
        preview=preview,
        source_markup=markups[0],
        markup_candidates=markups,
        preview_candidates=previews,
    )
