"""Drawing surfaces: the only capabilities a renderer needs from its output."""

from __future__ import annotations

from abc import ABC, abstractmethod
from io import BytesIO
from typing import BinaryIO, Optional, Union

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas as pdf_canvas

from ..engine.geometry import PageGeometry
from ..engine.layout_primitives import Color
from ..engine.text_metrics import BOLD_FONT, REGULAR_FONT
from .render_utils import ellipsize, to_color


CanvasTarget = Union[str, BinaryIO]


class DrawingSurface(ABC):
    """

    Output surface in top-down page coordinates (y grows downwards from the
    top edge of the page). Text y is the baseline.

    """

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float, color: Optional[Color]) -> None:
        """Draw a filled rectangle whose top-left corner is (x, y)."""

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, color: Optional[Color], width: float = 0.5) -> None:
        """Draw a straight line."""

    @abstractmethod
    def text(
        self,
        x: float,
        y: float,
        text: str,
        font_size: float,
        bold: bool = False,
        color: Optional[Color] = None,
        max_width: Optional[float] = None,
    ) -> None:
        """Draw left-aligned text."""

    @abstractmethod
    def new_page(self) -> None:
        """Finish the current physical page and start the next one."""

    def finish(self) -> None:
        """Flush the surface. Surfaces without buffered output need not override."""


class ReportLabSurface(DrawingSurface):
    """DrawingSurface backed by a ReportLab canvas."""

    def __init__(self, output: CanvasTarget, geometry: PageGeometry, title: Optional[str] = None):
        self.page_width = geometry.width
        self.page_height = geometry.height
        target = output if hasattr(output, "write") else str(output)
        self.canvas = pdf_canvas.Canvas(target, pagesize=(geometry.width, geometry.height))
        if title:
            self.canvas.setTitle(title)

    def _pdf_y(self, y: float) -> float:
        return self.page_height - y

    def fill_rect(self, x, y, width, height, color) -> None:
        self.canvas.setFillColor(to_color(color))
        self.canvas.rect(x, self._pdf_y(y + height), width, height, stroke=0, fill=1)

    def line(self, x1, y1, x2, y2, color, width=0.5) -> None:
        self.canvas.setStrokeColor(to_color(color))
        self.canvas.setLineWidth(width)
        self.canvas.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))

    def text(self, x, y, text, font_size, bold=False, color=None, max_width=None) -> None:
        font_name = BOLD_FONT if bold else REGULAR_FONT
        if max_width is not None:
            text = ellipsize(text, max_width, lambda value: pdfmetrics.stringWidth(value, font_name, font_size))
        self.canvas.setFont(font_name, font_size)
        self.canvas.setFillColor(to_color(color))
        self.canvas.drawString(x, self._pdf_y(y), text)

    def new_page(self) -> None:
        self.canvas.showPage()

    def finish(self) -> None:
        self.canvas.save()


def memory_surface(geometry: PageGeometry, title: Optional[str] = None) -> tuple[ReportLabSurface, BytesIO]:
    buffer = BytesIO()
    return ReportLabSurface(buffer, geometry, title=title), buffer
