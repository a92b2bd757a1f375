"""Output packaging and publication.

The working folder is zipped flat into ``<output>/<name>/<name>.zip`` and
its preview is copied alongside. Writes go through temporary names and are
renamed into place, so readers only ever see complete files.
"""

from __future__ import annotations

import logging
import os
import secrets
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

from designsync.bundle.extract import PREVIEW_IMAGE
from designsync.utils.files import remove_path, walk_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackagedBundle:
    zip_path: Path
    preview_path: Path
    has_preview: bool
    members: tuple[str, ...] = ()


def zip_folder(source: Path, zip_path: Path) -> tuple[str, ...]:
    """Zip every file under ``source`` with paths relative to it (no top folder)."""
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=zip_path.parent, prefix=f".{zip_path.name}.", suffix=".tmp")
    os.close(fd)
    members: list[str] = []
    try:
        with zipfile.ZipFile(tmp, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for path in walk_files(source):
                arcname = path.relative_to(source).as_posix()
                zf.write(path, arcname)
                members.append(arcname)
        os.replace(tmp, zip_path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return tuple(members)


def package_folder(
    folder_name: str,
    source: Path,
    output_root: Path,
    work_dir: Path | None = None,
) -> PackagedBundle:
    """Package ``source`` as ``<output_root>/<folder_name>/<folder_name>.zip`` plus preview.

    With ``work_dir`` the files are written there instead, and the returned
    paths are where they land once ``work_dir`` is published to
    ``<output_root>/<folder_name>``.
    """
    target_dir = output_root / folder_name
    build_dir = work_dir or target_dir
    zip_name = f"{folder_name}.zip"
    members = zip_folder(source, build_dir / zip_name)

    preview_source = source / PREVIEW_IMAGE
    has_preview = preview_source.is_file()
    if has_preview:
        shutil.copyfile(preview_source, build_dir / PREVIEW_IMAGE)
    else:
        logger.warning("%s missing in %s, nothing to copy to output folder", PREVIEW_IMAGE, source)

    logger.info("Packaged %d files into %s", len(members), build_dir / zip_name)
    return PackagedBundle(target_dir / zip_name, target_dir / PREVIEW_IMAGE, has_preview, members)


def publish_folder(staging: Path, target: Path) -> Path:
    """Swap ``staging`` into ``target``, replacing any previous result."""
    retired = None
    if target.exists():
        retired = target.with_name(f".{target.name}-retired-{secrets.token_hex(4)}")
        os.replace(target, retired)
    os.replace(staging, target)
    if retired is not None:
        remove_path(retired)
    return target
