"""Final-document assembly.

The published document layers, bottom to top: the rasterized background,
the logo, a circular mask over the profile photo, and the surviving text
fields. Logo and profile images are referenced by fixed file names that the
consuming editor fills in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from designsync.svg.layers import DesignLayer, LayerType, read_layers
from designsync.svg.markup import iter_elements, parse_markup, to_plain_markup
from designsync.svg.serializer import serialize_svg

logger = logging.getLogger(__name__)

BACKGROUND_HREF = "background.png"
LOGO_HREF = "logo.png"
PROFILE_HREF = "profile.png"
PROFILE_MASK_ID = "profileMask"


@dataclass(frozen=True)
class FinalLayout:
    canvas_width: str
    canvas_height: str
    logo: DesignLayer | None
    profile: DesignLayer | None
    texts: tuple[str, ...]


def locate_layout(markup: str | bytes) -> FinalLayout:
    """Canvas, logo, profile photo and serialized texts of substituted markup.

    When several candidates exist the last one in document order is used.
    """
    root = parse_markup(markup)

    logo = profile = None
    for layer in read_layers(root):
        if layer.type is LayerType.PHOTO:
            profile = layer
        elif layer.is_logo:
            logo = layer

    texts = tuple(to_plain_markup(el) for el in iter_elements(root, "text"))
    return FinalLayout(
        canvas_width=root.get("width") or "0",
        canvas_height=root.get("height") or "0",
        logo=logo,
        profile=profile,
        texts=texts,
    )


def _box(layer: DesignLayer | None) -> dict[str, float]:
    if layer is None:
        return {"x": 0.0, "y": 0.0, "width": 0.0, "height": 0.0}
    return {"x": layer.x, "y": layer.y, "width": layer.width, "height": layer.height}


def assemble_final(markup: str | bytes) -> str:
    """Build the final overlay document from text-substituted markup."""
    layout = locate_layout(markup)

    profile = layout.profile
    cx = cy = r = 0.0
    if profile is not None:
        cx, cy = profile.center
        r = profile.width / 2

    elements: list[dict[str, Any]] = [
        {
            "tag": "image",
            "href": BACKGROUND_HREF,
            "x": "0",
            "y": "0",
            "width": layout.canvas_width,
            "height": layout.canvas_height,
        },
        {"tag": "image", **_box(layout.logo), "href": LOGO_HREF},
        {
            "tag": "defs",
            "children": [
                {
                    "tag": "mask",
                    "id": PROFILE_MASK_ID,
                    "children": [{"tag": "circle", "cx": cx, "cy": cy, "r": r, "fill": "white"}],
                }
            ],
        },
        {
            "tag": "image",
            "href": PROFILE_HREF,
            **_box(profile),
            "mask": f"url(#{PROFILE_MASK_ID})",
        },
    ]

    logger.info(
        "Assembled final document: logo=%s profile=%s texts=%d",
        layout.logo is not None,
        profile is not None,
        len(layout.texts),
    )
    return serialize_svg(elements, layout.canvas_width, layout.canvas_height, layout.texts)
