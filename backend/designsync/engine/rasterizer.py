"""Vector-to-raster backends for the composited background."""

from __future__ import annotations

import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from designsync.errors import RasterizationError

logger = logging.getLogger(__name__)


class Rasterizer(Protocol):
    def render(self, markup: str, output: Path, width: int, height: int) -> None: ...


class CairoRasterizer:
    """In-process rendering with cairosvg."""

    def render(self, markup: str, output: Path, width: int, height: int) -> None:
        import cairosvg

        output.parent.mkdir(parents=True, exist_ok=True)
        try:
            cairosvg.svg2png(
                bytestring=markup.encode("utf-8"),
                write_to=str(output),
                output_width=width,
                output_height=height,
            )
        except Exception as e:
            raise RasterizationError(f"cairosvg failed to render {output.name}: {e}") from e
        logger.info("Rasterized %s at %d×%d", output.name, width, height)


class CommandRasterizer:
    """External rasterizer, e.g. ``svgexport {input} {output} {width}:{height}``.

    The markup goes to a temporary file in ``work_dir``; the command must
    exit 0 and leave ``output`` behind.
    """

    def __init__(self, command: str, work_dir: Path, timeout: float | None = 300.0) -> None:
        self.argv = shlex.split(command)
        if not self.argv:
            raise ValueError("Rasterizer command is empty")
        self.work_dir = work_dir
        self.timeout = timeout

    def render(self, markup: str, output: Path, width: int, height: int) -> None:
        self.work_dir.mkdir(parents=True, exist_ok=True)
        output.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", suffix=".svg", dir=self.work_dir, encoding="utf-8", delete=False
        ) as fh:
            fh.write(markup)
            source = Path(fh.name)

        fields = {"input": str(source), "output": str(output), "width": width, "height": height}
        argv = [part.format(**fields) for part in self.argv]
        try:
            subprocess.run(argv, check=True, capture_output=True, timeout=self.timeout)
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", "replace").strip()
            raise RasterizationError(f"{argv[0]} exited {e.returncode}: {stderr}") from e
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RasterizationError(f"{argv[0]} failed: {e}") from e
        finally:
            source.unlink(missing_ok=True)

        if not output.is_file():
            raise RasterizationError(f"{argv[0]} produced no {output.name}")
        logger.info("Rasterized %s at %d×%d via %s", output.name, width, height, argv[0])


def create_rasterizer(command: str = "", work_dir: Path | None = None) -> Rasterizer:
    if command:
        return CommandRasterizer(command, work_dir or Path(tempfile.gettempdir()))
    return CairoRasterizer()
