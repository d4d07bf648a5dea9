"""Geometry primitives and helpers for layout calculations."""

from __future__ import annotations

import math
from dataclasses import dataclass

from reportlab.lib.pagesizes import A4, LETTER

from ..exceptions import GeometryError


MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

PAGE_SIZES = {
    "A4": A4,
    "LETTER": LETTER,
}


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned box in top-down page coordinates (y grows downwards)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def intersects(self, other: "Rect") -> bool:
        """Check whether two boxes share any interior area.

        Touching edges do not count as an intersection, so stacked blocks
        placed back to back are reported as disjoint.
        """
        return not (
            self.right <= other.x
            or self.x >= other.right
            or self.bottom <= other.y
            or self.y >= other.bottom
        )


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Physical page size and margins, all in points."""

    width: float
    height: float
    margin_left: float = 0.0
    margin_right: float = 0.0
    margin_top: float = 0.0
    margin_bottom: float = 0.0

    @classmethod
    def from_preset(cls, name: str, margin: float = 42.5) -> "PageGeometry":
        preset = PAGE_SIZES.get(name.upper())
        if preset is None:
            raise GeometryError("Unsupported page size preset", details=name)
        width, height = preset
        return cls(
            width=float(width),
            height=float(height),
            margin_left=margin,
            margin_right=margin,
            margin_top=margin,
            margin_bottom=margin,
        )

    @classmethod
    def a4(cls, margin: float = 42.5) -> "PageGeometry":
        # 42.5pt ~ 15mm, the margin the contract documents were designed for
        return cls.from_preset("A4", margin)

    @classmethod
    def letter(cls, margin: float = 36.0) -> "PageGeometry":
        return cls.from_preset("LETTER", margin)

    @property
    def content_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return self.height - self.margin_top - self.margin_bottom

    @property
    def content_top(self) -> float:
        return self.margin_top

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin_bottom

    def validate(self) -> "PageGeometry":
        """Raise GeometryError unless the geometry leaves a usable content area."""
        values = {
            "width": self.width,
            "height": self.height,
            "margin_left": self.margin_left,
            "margin_right": self.margin_right,
            "margin_top": self.margin_top,
            "margin_bottom": self.margin_bottom,
        }
        for name, value in values.items():
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise GeometryError("Page geometry values must be finite numbers", details=f"{name}={value!r}")
            if value < 0:
                raise GeometryError("Page geometry values must not be negative", details=f"{name}={value}")

        if self.margin_left + self.margin_right >= self.width:
            raise GeometryError(
                "Horizontal margins leave no content width",
                details=f"{self.margin_left} + {self.margin_right} >= {self.width}",
            )
        if self.margin_top + self.margin_bottom >= self.height:
            raise GeometryError(
                "Vertical margins leave no content height",
                details=f"{self.margin_top} + {self.margin_bottom} >= {self.height}",
            )
        return self


def mm_to_points(value: float | None) -> float:
    if value is None:
        return 0.0
    return float(value) * POINTS_PER_INCH / MM_PER_INCH
