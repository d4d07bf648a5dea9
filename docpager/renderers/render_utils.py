"""Utility helpers shared across renderer components."""

from __future__ import annotations

from typing import Optional

from reportlab.lib.colors import Color

from ..engine.layout_primitives import Color as RGB

BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)
PANEL_FILL: RGB = (245, 247, 250)
DEGRADED_TEXT: RGB = (185, 28, 28)

# Baseline of a text line sits this far down its line box
BASELINE_RATIO = 0.75


def to_color(value: Optional[RGB], default: RGB = BLACK) -> Color:
    red, green, blue = value if value is not None else default
    return Color(red / 255.0, green / 255.0, blue / 255.0)


def baseline(line_top: float, line_height: float) -> float:
    return line_top + line_height * BASELINE_RATIO


def ellipsize(text: str, max_width: float, width_of) -> str:
    """Trim text until width_of(text) fits max_width, marking the cut with '...'."""
    if width_of(text) <= max_width:
        return text
    trimmed = text
    while trimmed and width_of(trimmed + "...") > max_width:
        trimmed = trimmed[:-1]
    return trimmed.rstrip() + "..." if trimmed else ""
