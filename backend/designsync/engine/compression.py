"""Per-asset lossy compression search.

Each raster asset walks a format-specific list of presets, most faithful
first. Every preset re-encodes the asset's original pixels; a result is
written back only when it is smaller than the best size so far, so the file
never grows. The walk stops at the first size within the byte budget.
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from designsync.utils.files import walk_files

logger = logging.getLogger(__name__)

TARGET_IMAGE_BYTES = 150 * 1024


@dataclass(frozen=True)
class QualityPreset:
    """Encoder quality for one step, 0-100."""

    quality: int

    @property
    def label(self) -> str:
        return f"q{self.quality}"


# PNG steps use the upper end of each quality band; the palette size is
# scaled from it
PNG_PRESETS: tuple[QualityPreset, ...] = tuple(QualityPreset(q) for q in (90, 75, 60, 45))
JPEG_PRESETS: tuple[QualityPreset, ...] = tuple(QualityPreset(q) for q in (95, 85, 75, 65, 55))

Encoder = Callable[[bytes, QualityPreset], bytes]


def encode_png(data: bytes, preset: QualityPreset) -> bytes:
    """Palette-quantize to a colour count scaled by the preset quality."""
    colors = max(2, min(256, round(256 * preset.quality / 100)))
    with Image.open(io.BytesIO(data)) as img:
        has_alpha = img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
        method = Image.Quantize.FASTOCTREE if has_alpha else Image.Quantize.MEDIANCUT
        quantized = img.quantize(colors=colors, method=method, dither=Image.Dither.FLOYDSTEINBERG)
    buf = io.BytesIO()
    quantized.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def encode_jpeg(data: bytes, preset: QualityPreset) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        buf = io.BytesIO()
        img.save(buf, format="JPEG", quality=preset.quality, optimize=True, progressive=True)
    return buf.getvalue()


@dataclass(frozen=True)
class CompressionAttempt:
    preset: QualityPreset
    size: int
    kept: bool


@dataclass(frozen=True)
class CompressionResult:
    path: Path
    original_size: int
    final_size: int
    attempts: tuple[CompressionAttempt, ...] = ()
    error: str | None = None
    target_bytes: int = TARGET_IMAGE_BYTES

    @property
    def within_budget(self) -> bool:
        return self.final_size <= self.target_bytes

    @property
    def saved_bytes(self) -> int:
        return self.original_size - self.final_size


@dataclass
class CompressionEngine:
    target_bytes: int = TARGET_IMAGE_BYTES
    presets: Mapping[str, tuple[QualityPreset, ...]] = field(
        default_factory=lambda: {".png": PNG_PRESETS, ".jpg": JPEG_PRESETS, ".jpeg": JPEG_PRESETS}
    )
    encoders: Mapping[str, Encoder] = field(
        default_factory=lambda: {".png": encode_png, ".jpg": encode_jpeg, ".jpeg": encode_jpeg}
    )

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in self.presets

    def compress_file(self, path: Path) -> CompressionResult | None:
        """Run the preset search on one file. Unsupported files return None."""
        ext = path.suffix.lower()
        if ext not in self.presets:
            return None

        original = path.read_bytes()
        best = len(original)
        attempts: list[CompressionAttempt] = []

        try:
            for preset in self.presets[ext]:
                encoded = self.encoders[ext](original, preset)
                kept = len(encoded) < best
                if kept:
                    _write_atomic(path, encoded)
                    best = len(encoded)
                attempts.append(CompressionAttempt(preset, len(encoded), kept))
                if best <= self.target_bytes:
                    break
        except Exception as e:
            logger.error("Error compressing %s: %s", path, e)
            return CompressionResult(
                path, len(original), best, tuple(attempts), str(e), self.target_bytes
            )

        result = CompressionResult(path, len(original), best, tuple(attempts), None, self.target_bytes)
        logger.info(
            "Compressed %s: %.1f KB -> %.1f KB (saved %.2f KB) in %d step(s)",
            path.name,
            result.original_size / 1024,
            result.final_size / 1024,
            result.saved_bytes / 1024,
            len(attempts),
        )
        if not result.within_budget:
            logger.warning(
                "%s remains %.1f KB even after max compression", path.name, best / 1024
            )
        return result

    def compress_tree(self, root: Path) -> list[CompressionResult]:
        """Compress every supported raster under ``root``; others are untouched."""
        files = list(walk_files(root))
        logger.info("Optimizing %d assets in %s", len(files), root.name)
        results = []
        for path in files:
            result = self.compress_file(path)
            if result is not None:
                results.append(result)
        return results


def _write_atomic(path: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
