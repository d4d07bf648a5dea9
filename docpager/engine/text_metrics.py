"""

Text measurement - wrapped line counts and rendered widths.

Two measurers share one greedy word wrapper:
- ReportLabTextMeasurer uses real base-14 font metrics
- MonospaceTextMeasurer uses a fixed advance per character

The layout engine only depends on the TextMeasurer protocol, so either one
(or a test double) can be injected.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Tuple

from reportlab.pdfbase import pdfmetrics


REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"


@dataclass(frozen=True, slots=True)
class TextMeasurement:
    """Result of measuring one string against a maximum width."""

    line_count: int
    rendered_width: float
    lines: Tuple[str, ...] = ()


class TextMeasurer(Protocol):
    def measure(
        self,
        text: str,
        font_size: float,
        max_width: float,
        bold: bool = False,
    ) -> TextMeasurement:
        ...


class BaseTextMeasurer:
    """Greedy word wrapper on top of a width function supplied by subclasses."""

    def string_width(self, text: str, font_size: float, bold: bool = False) -> float:
        raise NotImplementedError

    def measure(
        self,
        text: str,
        font_size: float,
        max_width: float,
        bold: bool = False,
    ) -> TextMeasurement:
        """

        Measures text wrapped at word boundaries within max_width.

        Args:
        text: Text to measure (may contain explicit newlines)
        font_size: Font size in points
        max_width: Maximum line width in points
        bold: Whether the bold face is used

        Returns:
        TextMeasurement with line count, unwrapped width and the wrapped lines

        """
        if not text or not text.strip():
            return TextMeasurement(line_count=0, rendered_width=0.0)

        lines: List[str] = []
        for paragraph in text.splitlines():
            lines.extend(self.wrap(paragraph, font_size, max_width, bold))

        width = max(self.string_width(line, font_size, bold) for line in text.splitlines())
        return TextMeasurement(line_count=len(lines), rendered_width=width, lines=tuple(lines))

    def wrap(self, text: str, font_size: float, max_width: float, bold: bool = False) -> List[str]:
        """Break a single paragraph into lines; blank paragraphs keep one empty line."""
        words = text.split()
        if not words:
            return [""]

        lines: List[str] = []
        current_line = ""
        for word in words:
            candidate = f"{current_line} {word}" if current_line else word
            if self.string_width(candidate, font_size, bold) <= max_width:
                current_line = candidate
                continue

            if current_line:
                lines.append(current_line)
            # A word wider than the line still gets a line of its own
            current_line = word

        if current_line:
            lines.append(current_line)
        return lines


class ReportLabTextMeasurer(BaseTextMeasurer):
    """Measures text with ReportLab's metrics for the Helvetica family."""

    def __init__(self, regular_font: str = REGULAR_FONT, bold_font: str = BOLD_FONT):
        registered = set(pdfmetrics.getRegisteredFontNames()) | set(pdfmetrics.standardFonts)
        for font_name in (regular_font, bold_font):
            if font_name not in registered:
                raise ValueError(f"Font is not registered with ReportLab: {font_name}")
        self.regular_font = regular_font
        self.bold_font = bold_font

    def font_name(self, bold: bool = False) -> str:
        return self.bold_font if bold else self.regular_font

    def string_width(self, text: str, font_size: float, bold: bool = False) -> float:
        return pdfmetrics.stringWidth(text, self.font_name(bold), font_size)


class MonospaceTextMeasurer(BaseTextMeasurer):
    """Approximates every glyph with the same advance width."""

    def __init__(self, char_width_ratio: float = 0.6, bold_ratio: float = 0.65):
        if char_width_ratio <= 0 or bold_ratio <= 0:
            raise ValueError("Character width ratios must be positive")
        self.char_width_ratio = char_width_ratio
        self.bold_ratio = bold_ratio

    def string_width(self, text: str, font_size: float, bold: bool = False) -> float:
        ratio = self.bold_ratio if bold else self.char_width_ratio
        return len(text) * font_size * ratio
