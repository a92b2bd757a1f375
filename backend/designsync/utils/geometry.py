"""Numeric helpers for markup attributes."""

from __future__ import annotations

import math


def parse_number(value: str | None, default: float = 0.0) -> float:
    """Parse an SVG numeric attribute, tolerating ``px``/``pt`` units."""
    if value is None:
        return default
    text = value.strip().removesuffix("px").removesuffix("pt").strip()
    if not text:
        return default
    try:
        number = float(text)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def format_number(value: float) -> str:
    """Render a float the way markup expects: ``150.0`` → ``"150"``."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(round(value, 6))


def box_center(x: float, y: float, width: float, height: float) -> tuple[float, float]:
    """Geometric center of an axis-aligned box."""
    return x + width / 2, y + height / 2
