"""
Plain-text exporter for laid-out pages.

Writes the same wrapped lines the PDF renderer draws, one page after another,
so contract bodies can be stored or sent as text and layouts can be diffed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Union

from ..engine.layout_primitives import (
    BlockKind,
    FooterContent,
    HeadingContent,
    KeyValueContent,
    ParagraphContent,
    PartiesContent,
    TableHeaderContent,
    TableRowContent,
    TotalsContent,
)
from ..engine.unified_layout import Page, Placement
from ..exceptions import RenderingError

logger = logging.getLogger(__name__)


class TextExporter:
    """
    Exports pages to plain text.

    Table cells are padded to fixed character widths; the description column
    keeps the engine's wrapped lines.
    """

    def __init__(self, line_width: int = 80, page_separator: str = "--- Page {number} ---"):
        """
        Args:
            line_width: Width of separator rules and the line-items table
            page_separator: Format string for page headers; receives ``number``
        """
        self.line_width = line_width
        self.page_separator = page_separator
        self.value_width = max(10, line_width // 6)

    def export_text(self, pages: Sequence[Page]) -> str:
        """Return the whole document as one string."""
        chunks: List[str] = []
        for page in pages:
            chunks.append(self.page_separator.format(number=page.index + 1))
            for placement in page.placements:
                chunks.extend(self._block_lines(placement))
            chunks.append("")
        return "\n".join(chunks).rstrip("\n") + "\n"

    def export(self, pages: Sequence[Page], output_path: Union[str, Path]) -> Path:
        """
        Write the text export to output_path.

        Raises:
            RenderingError: the file could not be written
        """
        output = Path(output_path)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(self.export_text(pages), encoding="utf-8")
        except OSError as exc:
            raise RenderingError(f"Cannot write text export to {output}", details=str(exc)) from exc
        logger.info("Text export written to %s", output)
        return output

    def _block_lines(self, placement: Placement) -> List[str]:
        block = placement.block
        content = block.content
        kind = block.kind

        if kind == BlockKind.HEADING:
            heading: HeadingContent = content
            return [heading.title, *heading.meta_lines]
        if kind == BlockKind.SEPARATOR:
            return ["=" * self.line_width]
        if kind == BlockKind.SPACER:
            return [""]
        if kind == BlockKind.KEY_VALUE_ROW:
            row: KeyValueContent = content
            return list(row.lines)
        if kind == BlockKind.PARAGRAPH:
            paragraph: ParagraphContent = content
            lines = [paragraph.title] if paragraph.title else []
            return lines + list(paragraph.lines)
        if kind == BlockKind.PARTIES:
            return self._parties_lines(content)
        if kind == BlockKind.TABLE_HEADER:
            header: TableHeaderContent = content
            labels = [column.label for column in header.columns]
            return [self._table_line(*labels), "-" * self.line_width]
        if kind == BlockKind.TABLE_ROW:
            return self._row_lines(content)
        if kind == BlockKind.TOTALS_BOX:
            totals: TotalsContent = content
            width = self.line_width - self.value_width
            return [f"{row.label:>{width}}{row.value:>{self.value_width}}" for row in totals.rows]
        if kind == BlockKind.FOOTER:
            return self._footer_lines(content)
        return []

    def _parties_lines(self, content: PartiesContent) -> List[str]:
        lines: List[str] = []
        for column in (content.issuer, content.counterparty):
            lines.append(column.title)
            for row in column.rows:
                lines.extend(row.lines)
            lines.append("")
        return lines[:-1]

    def _table_line(self, description: str, *values: str) -> str:
        description_width = self.line_width - len(values) * self.value_width
        cells = "".join(f"{value:>{self.value_width}}" for value in values)
        return f"{description[:description_width]:<{description_width}}{cells}"

    def _row_lines(self, content: TableRowContent) -> List[str]:
        first = content.description_lines[0] if content.description_lines else ""
        lines = [
            self._table_line(first, content.quantity_text, content.unit_price_text, content.line_total_text)
        ]
        lines.extend(content.description_lines[1:])
        lines.extend(f"  {note}" for note in content.notes_lines)
        return lines

    def _footer_lines(self, content: FooterContent) -> List[str]:
        lines = ["-" * self.line_width]
        for slot in content.signatures:
            lines.extend([slot.role, "", "_" * 30, slot.name, f"Tax ID: {slot.tax_id}", ""])
        lines.extend(content.info_lines)
        return lines
