"""Shared test fixtures."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import httpx
import pytest
from PIL import Image

from designsync.config import Settings

CANONICAL_HOST = "https://design.instrasoftsolutions.in"
BUNDLE_URL = f"{CANONICAL_HOST}/cards/design.CRDesign"
PREVIEW_LINK = f"{CANONICAL_HOST}/cards/design-p.jpg"

# Business card template in the CRDesign dialect
CARD_MARKUP = '''<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="1050" height="600">
  <image Dg_type="DgBackGround" x="0" y="0" width="1050" height="600" DgAngleZ="0" xlink:href="Images/bg.dgjpg"/>
  <image Dg_type="DgClipart" x="40" y="30" width="120" height="80" DgAngleZ="15" xlink:href="Clipart/Logos/brand.dgpng"/>
  <image Dg_type="DgClipart" x="900" y="500" width="50" height="50" DgAngleZ="0" xlink:href="Clipart/star.dgpng"/>
  <image Dg_type="DgPhoto" x="800" y="100" width="200" height="200" xlink:href="Photos/face.dgjpg"/>
  <text x="100" y="200" width="300" height="40" Text="Mina Desai" DgTitleFamily="Georgia" DgTitlePointSize="24" DgTitleBold="1" DgTitleItalic="0" DgTitleColor="#1A2B3C"/>
  <text x="100" y="260" width="300" height="30" Text="Manager"/>
  <text x="100" y="300" width="300" height="30" Text="+919876543210"/>
  <text x="100" y="340" width="300" height="30" Text="www.dgflick.com"/>
  <text x="100" y="400" width="400" height="60" Text="Warm wishes&#10;from all of us"/>
  <text x="-500" y="10" width="100" height="20" Text="hidden note"/>
  <text Dg_type="DgTitle" x="10" y="10" width="100" height="20" Text="Greetings"/>
</svg>'''

# Same template without a background layer
NO_BACKGROUND_MARKUP = '''<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="1050" height="600">
  <image Dg_type="DgClipart" x="900" y="500" width="50" height="50" xlink:href="Clipart/star.dgpng"/>
  <text x="100" y="260" width="300" height="30" Text="Manager"/>
</svg>'''


def image_bytes(fmt: str = "PNG", size: tuple[int, int] = (32, 32), color=(200, 40, 40)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def build_bundle(markup: str = CARD_MARKUP, *, with_preview: bool = True) -> bytes:
    """Zip bytes laid out like a CRDesign bundle."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("Design/card.dgsvg", markup)
        zf.writestr("Design/Images/bg.dgjpg", image_bytes("JPEG", (64, 36)))
        zf.writestr("Design/Clipart/Logos/brand.dgpng", image_bytes("PNG", (24, 16), (0, 0, 255)))
        zf.writestr("Design/Clipart/star.dgpng", image_bytes("PNG", (10, 10), (255, 255, 0)))
        if with_preview:
            zf.writestr("Design/thumb.prib", image_bytes("PNG", (40, 24)))
    return buf.getvalue()


def bundle_transport(payload: bytes, status_code: int = 200) -> httpx.MockTransport:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(status_code, content=payload)

    transport = httpx.MockTransport(handler)
    transport.requested = requested
    return transport


class FakeRasterizer:
    """Records render calls and writes a flat PNG of the requested size."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Path, int, int]] = []

    def render(self, markup: str, output: Path, width: int, height: int) -> None:
        self.calls.append((markup, output, width, height))
        Image.new("RGB", (width, height), (250, 250, 250)).save(output, format="PNG")


@pytest.fixture
def card_markup() -> str:
    return CARD_MARKUP


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        download_dir=tmp_path / "downloads",
        processed_dir=tmp_path / "processed",
        output_dir=tmp_path / "output",
        canonical_host=CANONICAL_HOST,
        legacy_hosts=["http://design.instrasoftsolutions.in"],
        _env_file=None,
    )


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def extracted_bundle(tmp_path: Path) -> Path:
    """The sample bundle extracted with standard suffixes, as the pipeline sees it."""
    from designsync.bundle.extract import extract_archive, normalize_filenames

    archive = tmp_path / "design.CRDesign"
    archive.write_bytes(build_bundle())
    root = tmp_path / "design"
    extract_archive(archive, root)
    normalize_filenames(root)
    return root
