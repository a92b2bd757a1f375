"""Request-scoped state for one bundle processing run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from designsync.engine.compression import CompressionResult


@dataclass(frozen=True)
class BundleRequest:
    """A remote bundle link plus caller metadata."""

    link: str
    id: str | None = None
    img_no: str | None = None


@dataclass
class BundleResult:
    folder_name: str
    processed_folder: Path
    zip_path: Path
    preview_path: Path
    has_preview: bool = False
    compression: list[CompressionResult] = field(default_factory=list)
    elapsed_ms: float = 0.0

    @property
    def oversize_assets(self) -> list[Path]:
        return [r.path for r in self.compression if not r.within_budget]
