"""Write standalone SVG documents from element definitions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from xml.sax.saxutils import escape

from designsync.utils.geometry import format_number

_ATTR_ENTITIES = {'"': "&quot;", "\n": "&#10;"}


def _attr_value(value: Any) -> str:
    if isinstance(value, float):
        value = format_number(value)
    return escape(str(value), _ATTR_ENTITIES)


def serialize_element(elem: dict[str, Any], depth: int = 1) -> list[str]:
    """Render one element dict (``tag`` plus attributes, optional ``children``)."""
    pad = "  " * depth
    tag = elem.get("tag", "path")
    attrs = {k: v for k, v in elem.items() if k not in ("tag", "children")}
    attr_str = " ".join(f'{k}="{_attr_value(v)}"' for k, v in attrs.items())
    opening = f"<{tag} {attr_str}" if attr_str else f"<{tag}"

    children = elem.get("children") or []
    if not children:
        return [f"{pad}{opening} />"]

    lines = [f"{pad}{opening}>"]
    for child in children:
        lines.extend(serialize_element(child, depth + 1))
    lines.append(f"{pad}</{tag}>")
    return lines


def serialize_svg(
    elements: list[dict[str, Any]],
    canvas_w: float | str,
    canvas_h: float | str,
    fragments: Iterable[str] = (),
) -> str:
    """Generate SVG markup from element definitions.

    ``fragments`` are already-serialized elements appended after ``elements``.
    """
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg"'
        f' width="{_attr_value(canvas_w)}" height="{_attr_value(canvas_h)}">',
    ]

    for elem in elements:
        lines.extend(serialize_element(elem))

    for fragment in fragments:
        lines.append(f"  {fragment}")

    lines.append("</svg>")
    return "\n".join(lines)
