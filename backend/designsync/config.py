"""Application configuration from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "development"
    log_level: str = "info"
    port: int = 4300

    # CORS
    cors_origins: list[str] = ["*"]

    # Working directories
    download_dir: Path = Path("downloads")
    processed_dir: Path = Path("downloads/processed_files")
    output_dir: Path = Path("downloads/processed_files/output")

    # Link canonicalization
    canonical_host: str = "https://design.instrasoftsolutions.in"
    legacy_hosts: list[str] = ["http://design.instrasoftsolutions.in"]
    bundle_extension: str = ".CRDesign"

    download_timeout: float = 60.0

    # Per-asset byte budget for the compression engine (150 KiB)
    target_image_bytes: int = 150 * 1024

    # Empty → in-process cairosvg. Otherwise an argv template, e.g.
    # "svgexport {input} {output} {width}:{height}"
    rasterizer_command: str = ""

    model_config = {
        "env_prefix": "DESIGNSYNC_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    def ensure_dirs(self) -> None:
        for path in (self.download_dir, self.processed_dir, self.output_dir):
            path.mkdir(parents=True, exist_ok=True)


settings = Settings()
