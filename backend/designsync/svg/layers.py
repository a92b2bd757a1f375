"""Design-layer classification for CRDesign ``<image>`` elements.

Only background and clipart layers are composited into the background
raster. The background layer also defines the canvas size.
"""

from __future__ import annotations

import base64
import enum
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path, PurePosixPath

from lxml import etree

from designsync.bundle.extract import normalized_name
from designsync.svg.markup import href_of, iter_elements, layer_type_of, parse_markup
from designsync.utils.files import find_file_by_name
from designsync.utils.geometry import box_center, parse_number

logger = logging.getLogger(__name__)

CLIPART_MARKER = "Clipart/"

# Every embedded raster is labelled photographic whatever its real format;
# renderers sniff the payload.
EMBED_MIME = "image/jpeg"


class LayerType(str, enum.Enum):
    BACKGROUND = "DgBackGround"
    CLIPART = "DgClipart"
    PHOTO = "DgPhoto"
    TITLE = "DgTitle"
    UNTYPED = ""

    @classmethod
    def parse(cls, value: str) -> LayerType:
        try:
            return cls(value)
        except ValueError:
            return cls.UNTYPED


COMPOSITED_TYPES = frozenset({LayerType.BACKGROUND, LayerType.CLIPART})


@dataclass(frozen=True)
class DesignLayer:
    """One ``<image>`` element of the design."""

    type: LayerType
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    angle: float = 0.0
    href: str = ""
    asset: Path | None = None

    @property
    def center(self) -> tuple[float, float]:
        return box_center(self.x, self.y, self.width, self.height)

    @property
    def is_embedded(self) -> bool:
        return self.href.startswith("data:")

    @property
    def is_logo(self) -> bool:
        """Clipart referencing a file in a subfolder of the clip-art folder."""
        if self.type is not LayerType.CLIPART:
            return False
        idx = self.href.find(CLIPART_MARKER)
        if idx == -1:
            return False
        return "/" in self.href[idx + len(CLIPART_MARKER):]

    @classmethod
    def from_element(cls, el: etree._Element) -> DesignLayer:
        return cls(
            type=LayerType.parse(layer_type_of(el)),
            x=parse_number(el.get("x")),
            y=parse_number(el.get("y")),
            width=parse_number(el.get("width")),
            height=parse_number(el.get("height")),
            angle=parse_number(el.get("DgAngleZ")),
            href=href_of(el),
        )


@dataclass(frozen=True)
class LayerClassification:
    """Accepted layers in document order plus the canvas they define."""

    layers: tuple[DesignLayer, ...] = ()
    canvas_width: int = 0
    canvas_height: int = 0
    unresolved: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_canvas(self) -> bool:
        return self.canvas_width > 0 and self.canvas_height > 0


def read_layers(root: etree._Element) -> list[DesignLayer]:
    """Every ``<image>`` element as a DesignLayer, untyped ones included."""
    return [DesignLayer.from_element(el) for el in iter_elements(root, "image")]


def classify_layers(markup: str | bytes, asset_root: Path) -> LayerClassification:
    """Pick composited layers and resolve their assets under ``asset_root``.

    A missing background leaves the canvas at 0×0; callers treat that as a
    classification failure.
    """
    root = parse_markup(markup)
    accepted: list[DesignLayer] = []
    unresolved: list[str] = []
    canvas_w = canvas_h = 0

    for layer in read_layers(root):
        if layer.type not in COMPOSITED_TYPES:
            continue
        if layer.type is LayerType.BACKGROUND:
            canvas_w, canvas_h = int(layer.width), int(layer.height)
        if not layer.href:
            continue

        if layer.is_embedded:
            accepted.append(layer)
            continue

        name = PurePosixPath(layer.href.replace("\\", "/")).name
        asset = _resolve_asset(asset_root, name)
        if asset is None:
            logger.warning("Asset %r for %s layer not found in bundle", name, layer.type.name)
            unresolved.append(layer.href)
            continue
        accepted.append(replace(layer, asset=asset))

    logger.info(
        "Classified %d composited layers (%d unresolved), canvas %d×%d",
        len(accepted),
        len(unresolved),
        canvas_w,
        canvas_h,
    )
    return LayerClassification(
        layers=tuple(accepted),
        canvas_width=canvas_w,
        canvas_height=canvas_h,
        unresolved=tuple(unresolved),
    )


def embed_asset(path: Path) -> str:
    """Inline ``path`` as a base64 data URI."""
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{EMBED_MIME};base64,{encoded}"


def _resolve_asset(asset_root: Path, name: str) -> Path | None:
    # Markup may still use the proprietary suffix of a since-renamed file
    for candidate in dict.fromkeys((name, normalized_name(name))):
        if candidate:
            found = find_file_by_name(asset_root, candidate)
            if found is not None:
                return found
    return None
