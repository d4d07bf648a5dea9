"""
PDF renderer - draws laid-out pages on a DrawingSurface.

The renderer never wraps or measures for layout purposes: every block comes
with its lines already broken by the LayoutEngine. Measuring here is only
used to right-align numbers inside their column.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence, Union

from ..engine.geometry import PageGeometry
from ..engine.layout_config import LayoutConfig
from ..engine.layout_primitives import (
    BlockKind,
    FooterContent,
    HeadingContent,
    KeyValueContent,
    ParagraphContent,
    PartiesContent,
    PartyColumn,
    RuleContent,
    TableHeaderContent,
    TableRowContent,
    TextStyle,
    TotalsContent,
)
from ..engine.text_metrics import ReportLabTextMeasurer, TextMeasurer
from ..engine.unified_layout import Page, Placement
from ..exceptions import RenderingError
from .base_renderer import DrawingSurface, ReportLabSurface, memory_surface
from .render_utils import DEGRADED_TEXT, PANEL_FILL, WHITE, baseline

logger = logging.getLogger(__name__)


class PDFRenderer:
    """Draws LayoutEngine pages block by block."""

    def __init__(
        self,
        surface: DrawingSurface,
        geometry: PageGeometry,
        config: Optional[LayoutConfig] = None,
        measurer: Optional[TextMeasurer] = None,
    ):
        self.surface = surface
        self.geometry = geometry
        self.config = config if config is not None else LayoutConfig()
        self.measurer = measurer if measurer is not None else ReportLabTextMeasurer()
        self._handlers: Dict[BlockKind, Callable[[Placement], None]] = {
            BlockKind.HEADING: self._draw_heading,
            BlockKind.KEY_VALUE_ROW: self._draw_key_value,
            BlockKind.PARAGRAPH: self._draw_paragraph,
            BlockKind.TABLE_HEADER: self._draw_table_header,
            BlockKind.TABLE_ROW: self._draw_table_row,
            BlockKind.TOTALS_BOX: self._draw_totals,
            BlockKind.SEPARATOR: self._draw_separator,
            BlockKind.PARTIES: self._draw_parties,
            BlockKind.FOOTER: self._draw_footer,
        }

    def render(self, pages: Sequence[Page]) -> None:
        """Draw every page in order, then finish the surface.

        Raises:
            RenderingError: the surface failed while drawing
        """
        try:
            for number, page in enumerate(pages):
                if number:
                    self.surface.new_page()
                for placement in page.placements:
                    handler = self._handlers.get(placement.block.kind)
                    if handler is not None:
                        handler(placement)
            self.surface.finish()
        except RenderingError:
            raise
        except Exception as exc:
            raise RenderingError("Failed to draw document", details=str(exc)) from exc
        logger.info("Rendered %d page(s)", len(pages))

    # ------------------------------------------------------------------
    # Text helpers
    # ------------------------------------------------------------------
    @property
    def left(self) -> float:
        return self.geometry.margin_left

    def _text_width(self, text: str, style: TextStyle) -> float:
        return self.measurer.measure(text, style.font_size, float("inf"), style.bold).rendered_width

    def _lines(self, x: float, top: float, lines: Sequence[str], style: TextStyle, max_width: float, color=None) -> float:
        """Draw stacked lines starting at top; returns the y below the last line."""
        for line in lines:
            self.surface.text(
                x,
                baseline(top, style.line_height),
                line,
                style.font_size,
                bold=style.bold,
                color=color if color is not None else style.color,
                max_width=max_width,
            )
            top += style.line_height
        return top

    def _aligned(self, x: float, width: float, top: float, text: str, style: TextStyle, align: str, padding: float, color=None) -> None:
        inner = width - 2 * padding
        if align == "right":
            text_x = x + width - padding - min(self._text_width(text, style), inner)
        else:
            text_x = x + padding
        self.surface.text(
            text_x,
            baseline(top, style.line_height),
            text,
            style.font_size,
            bold=style.bold,
            color=color if color is not None else style.color,
            max_width=inner,
        )

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------
    def _draw_heading(self, placement: Placement) -> None:
        content: HeadingContent = placement.block.content
        width = self.geometry.content_width
        top = self._lines(self.left, placement.y, (content.title,), content.title_style, width)
        self._lines(self.left, top, content.meta_lines, content.meta_style, width)

    def _draw_key_value(self, placement: Placement) -> None:
        content: KeyValueContent = placement.block.content
        self._lines(self.left, placement.y, content.lines, content.style, self.geometry.content_width)

    def _draw_paragraph(self, placement: Placement) -> None:
        content: ParagraphContent = placement.block.content
        width = self.geometry.content_width
        top = placement.y
        if content.title and content.title_style is not None:
            top = self._lines(self.left, top, (content.title,), content.title_style, width)
        self._lines(self.left, top, content.lines, content.style, width)

    def _draw_separator(self, placement: Placement) -> None:
        rule: RuleContent = placement.block.content or RuleContent(color=self.config.rule_color)
        y = placement.y + placement.block.height / 2
        self.surface.line(self.left, y, self.left + self.geometry.content_width, y, rule.color, rule.thickness)

    def _draw_parties(self, placement: Placement) -> None:
        content: PartiesContent = placement.block.content
        for column in (content.issuer, content.counterparty):
            self._draw_party_column(column, placement.y, placement.block.height)

    def _draw_party_column(self, column: PartyColumn, top: float, height: float) -> None:
        x = self.left + column.x_offset
        padding = self.config.cell_padding
        inner = column.width - 2 * padding
        self.surface.fill_rect(x, top, column.width, height, PANEL_FILL)
        y = self._lines(x + padding, top + padding, (column.title,), column.title_style, inner)
        for row in column.rows:
            color = self.config.muted_color if row.is_placeholder else row.style.color
            y = self._lines(x + padding, y, row.lines, row.style, inner, color=color)

    def _draw_table_header(self, placement: Placement) -> None:
        content: TableHeaderContent = placement.block.content
        height = placement.block.height
        self.surface.fill_rect(self.left, placement.y, self.geometry.content_width, height, self.config.accent_color)
        top = placement.y + (height - content.style.line_height) / 2
        for column in content.columns:
            self._aligned(
                self.left + column.x_offset,
                column.width,
                top,
                column.label,
                content.style,
                column.align,
                content.padding,
                color=WHITE,
            )

    def _draw_table_row(self, placement: Placement) -> None:
        content: TableRowContent = placement.block.content
        padding = content.padding
        top = placement.y + padding
        description, quantity, unit_price, line_total = content.columns

        y = self._lines(
            self.left + description.x_offset + padding,
            top,
            content.description_lines,
            content.style,
            description.width - 2 * padding,
        )
        self._lines(
            self.left + description.x_offset + padding,
            y,
            content.notes_lines,
            content.notes_style,
            description.width - 2 * padding,
        )

        value_color = DEGRADED_TEXT if content.degraded else None
        for column, text in (
            (quantity, content.quantity_text),
            (unit_price, content.unit_price_text),
            (line_total, content.line_total_text),
        ):
            self._aligned(
                self.left + column.x_offset,
                column.width,
                top,
                text,
                content.style,
                column.align,
                padding,
                color=value_color,
            )

        bottom = placement.bottom
        self.surface.line(
            self.left, bottom, self.left + self.geometry.content_width, bottom, self.config.rule_color, 0.5
        )

    def _draw_totals(self, placement: Placement) -> None:
        content: TotalsContent = placement.block.content
        x = self.left + content.x_offset
        self.surface.fill_rect(x, placement.y, content.width, placement.block.height, PANEL_FILL)
        top = placement.y + content.padding
        half = content.width / 2
        for row in content.rows:
            color = None
            if row.highlight:
                self.surface.fill_rect(x, top, content.width, content.row_height, self.config.accent_color)
                color = WHITE
            text_top = top + (content.row_height - content.style.line_height) / 2
            self._aligned(x, half, text_top, row.label, content.style, "left", content.padding, color=color)
            self._aligned(x + half, half, text_top, row.value, content.style, "right", content.padding, color=color)
            top += content.row_height

    def _draw_footer(self, placement: Placement) -> None:
        content: FooterContent = placement.block.content
        config = self.config
        width = self.geometry.content_width
        top = placement.y
        self.surface.line(self.left, top, self.left + width, top, config.rule_color, 0.5)
        top += config.cell_padding

        if content.signatures:
            top = self._draw_signatures(content, top, width)

        text_width = width - (content.qr_size + config.cell_padding if content.qr_matrix else 0)
        self._lines(self.left, top, content.info_lines, content.style, text_width)

        if content.qr_matrix:
            self._draw_qr(content, placement.y + config.cell_padding)

    def _draw_signatures(self, content: FooterContent, top: float, width: float) -> float:
        config = self.config
        slot_width = (width - config.party_gap) / 2
        style = content.style
        bold = TextStyle(style.font_size, style.line_height, bold=True)
        line_gap = 3 * style.line_height
        for number, slot in enumerate(content.signatures[:2]):
            x = self.left + number * (slot_width + config.party_gap)
            y = self._lines(x, top, (slot.role,), bold, slot_width)
            y += line_gap
            self.surface.line(x, y, x + slot_width * 0.8, y, None, 0.5)
            self._lines(x, y + 2, (slot.name, f"Tax ID: {slot.tax_id}"), style, slot_width)
        return top + bold.line_height + line_gap + 2 + 2 * style.line_height + config.cell_padding

    def _draw_qr(self, content: FooterContent, top: float) -> None:
        modules = len(content.qr_matrix)
        if not modules:
            return
        module_size = content.qr_size / modules
        x0 = self.left + self.geometry.content_width - content.qr_size
        for row_number, row in enumerate(content.qr_matrix):
            for column_number, dark in enumerate(row):
                if dark:
                    self.surface.fill_rect(
                        x0 + column_number * module_size,
                        top + row_number * module_size,
                        module_size,
                        module_size,
                        None,
                    )


def render_pdf_bytes(
    pages: Sequence[Page],
    geometry: PageGeometry,
    config: Optional[LayoutConfig] = None,
    measurer: Optional[TextMeasurer] = None,
    title: Optional[str] = None,
) -> bytes:
    """Render pages into an in-memory PDF document."""
    surface, buffer = memory_surface(geometry, title=title)
    PDFRenderer(surface, geometry, config=config, measurer=measurer).render(pages)
    return buffer.getvalue()


def render_pdf_file(
    pages: Sequence[Page],
    geometry: PageGeometry,
    path: Union[str, Path],
    config: Optional[LayoutConfig] = None,
    measurer: Optional[TextMeasurer] = None,
    title: Optional[str] = None,
) -> Path:
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    surface = ReportLabSurface(str(output), geometry, title=title)
    PDFRenderer(surface, geometry, config=config, measurer=measurer).render(pages)
    logger.info("PDF written to %s", output)
    return output
