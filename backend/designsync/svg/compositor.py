"""Background compositor: re-serializes composited layers for rasterization."""

from __future__ import annotations

from typing import Any

from designsync.svg.layers import DesignLayer, LayerClassification, embed_asset
from designsync.svg.serializer import serialize_svg
from designsync.utils.geometry import format_number


def layer_element(layer: DesignLayer) -> dict[str, Any]:
    """Image element dict with inline data, explicit geometry and a centred rotation."""
    href = layer.href if layer.is_embedded or layer.asset is None else embed_asset(layer.asset)
    cx, cy = layer.center
    return {
        "tag": "image",
        "href": href,
        "x": layer.x,
        "y": layer.y,
        "width": layer.width,
        "height": layer.height,
        "transform": (
            f"rotate({format_number(layer.angle)}, {format_number(cx)}, {format_number(cy)})"
        ),
    }


def compose_background(classification: LayerClassification) -> str:
    """Standalone SVG holding only the background and clipart layers."""
    elements = [layer_element(layer) for layer in classification.layers]
    return serialize_svg(elements, classification.canvas_width, classification.canvas_height)
