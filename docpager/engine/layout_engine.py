"""

LayoutEngine - turns a DocumentModel into positioned blocks on pages.

Single forward pass, section by section:
header, parties, details, title/description, line items, totals,
contract body / notes / terms, footer.

Every block goes through PageCursor.place, so page breaks only ever happen
between blocks. Table rows, the parties section, the totals box and the
footer are single blocks and therefore never split.

"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from ..exceptions import LayoutConfigurationError
from ..models.document import DocumentModel, LineItem, Party
from ..models.verification import fiscal_qr_payload, qr_matrix, verification_code
from .formatting import CURRENCY_SYMBOLS, MoneyFormatter, format_date, format_percent, is_finite_number, to_decimal
from .geometry import PageGeometry
from .layout_config import LayoutConfig
from .layout_primitives import (
    Block,
    BlockKind,
    FooterContent,
    HeadingContent,
    KeyValueContent,
    ParagraphContent,
    PartiesContent,
    PartyColumn,
    RuleContent,
    SignatureSlot,
    TableColumn,
    TableHeaderContent,
    TableRowContent,
    TextStyle,
    TotalsContent,
    TotalsRow,
)
from .page_cursor import PageCursor
from .text_metrics import ReportLabTextMeasurer, TextMeasurer
from .unified_layout import LayoutResult, Page

logger = logging.getLogger(__name__)

TABLE_COLUMNS: Tuple[Tuple[str, str, str], ...] = (
    ("description", "Description", "left"),
    ("quantity", "Qty", "right"),
    ("unit_price", "Unit price", "right"),
    ("line_total", "Total", "right"),
)

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


class LayoutEngine:
    """

    Stateless layout engine.

    All per-document state lives in a _LayoutPass created for each call, so
    one engine can serve concurrent layout() calls with distinct inputs.

    """

    def __init__(self, measurer: Optional[TextMeasurer] = None, config: Optional[LayoutConfig] = None):
        self.measurer = measurer if measurer is not None else ReportLabTextMeasurer()
        self.config = config if config is not None else LayoutConfig()

    def layout(self, model: DocumentModel, geometry: PageGeometry) -> List[Page]:
        """Lay out model and return the ordered list of pages."""
        return self.build(model, geometry).pages

    def build(self, model: DocumentModel, geometry: PageGeometry) -> LayoutResult:
        """Lay out model and return pages together with degraded-layout warnings.

        Raises:
            GeometryError: margins leave no content area
            LayoutConfigurationError: a fixed-height section cannot fit on an empty page
        """
        geometry.validate()
        self.check_fixed_sections(model, geometry)
        result = _LayoutPass(self.measurer, self.config, model, geometry).run()
        logger.info(
            "Laid out %s %r on %d page(s)",
            model.document_kind,
            model.header.reference_number,
            result.page_count,
        )
        return result

    def check_fixed_sections(self, model: DocumentModel, geometry: PageGeometry) -> None:
        config = self.config
        footer_height = config.signature_footer_height if model.wants_signature else config.footer_height
        fixed_sections = {
            "header": config.header_height + config.separator_height,
            "table header": config.table_header_height,
            "table row": config.min_row_height,
            "totals": config.totals_height,
            "footer": footer_height,
        }
        for name, height in fixed_sections.items():
            if height > geometry.content_height:
                raise LayoutConfigurationError(
                    f"The {name} section does not fit on an empty page",
                    details=f"height {height:.1f} > usable {geometry.content_height:.1f}",
                )

        description_width = geometry.content_width * config.column_ratios[0] - 2 * config.cell_padding
        party_width = (geometry.content_width - config.party_gap) / 2 - 2 * config.cell_padding
        if description_width <= 0 or party_width <= 0:
            raise LayoutConfigurationError(
                "Page is too narrow for the table and parties columns",
                details=f"content width {geometry.content_width:.1f}",
            )


class _LayoutPass:
    """One layout run over one document; discarded afterwards."""

    def __init__(self, measurer: TextMeasurer, config: LayoutConfig, model: DocumentModel, geometry: PageGeometry):
        self.measurer = measurer
        self.config = config
        self.model = model
        self.geometry = geometry
        self.cursor = PageCursor(geometry)
        self.formatter = MoneyFormatter(model.locale or config.default_locale)
        self.currency = (model.currency or config.default_currency).upper()
        self.content_width = geometry.content_width

        lh = config.line_height
        self.base_style = TextStyle(config.base_font_size, lh(config.base_font_size))
        self.bold_style = TextStyle(config.base_font_size, lh(config.base_font_size), bold=True)
        self.small_style = TextStyle(
            config.small_font_size, lh(config.small_font_size), color=config.muted_color
        )
        self.section_style = TextStyle(
            config.section_title_font_size,
            lh(config.section_title_font_size),
            bold=True,
            color=config.accent_color,
        )

    def run(self) -> LayoutResult:
        self._header_section()
        self._parties_section()
        self._details_section()
        self._title_section()
        self._line_items_section()
        self._totals_section()
        self._text_sections()
        self._footer_section()
        self.cursor.trim_trailing_page()
        return LayoutResult(
            pages=self.cursor.pages,
            geometry=self.geometry,
            warnings=list(self.cursor.warnings),
            history=list(self.cursor.history),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _wrap(self, text: Optional[str], style: TextStyle, width: float) -> Tuple[str, ...]:
        if not text:
            return ()
        return self.measurer.measure(text, style.font_size, width, style.bold).lines

    def _money(self, amount) -> str:
        return self.formatter.format(amount, self.currency)

    def _space(self, height: float) -> None:
        if self.cursor.at_page_top:
            return
        if not self.cursor.fits(height):
            self.cursor.new_page()
            return
        self.cursor.place(Block(kind=BlockKind.SPACER, height=height))

    def _paragraph_block(self, text: str, style: TextStyle, title: Optional[str] = None) -> Optional[Block]:
        lines = self._wrap(text, style, self.content_width)
        if not lines and not title:
            return None
        height = len(lines) * style.line_height + self.config.cell_padding
        if title:
            height += self.section_style.line_height
        content = ParagraphContent(
            lines=lines,
            style=style,
            title=title,
            title_style=self.section_style if title else None,
        )
        return Block(kind=BlockKind.PARAGRAPH, height=height, content=content)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------
    def _header_section(self) -> None:
        config = self.config
        header = self.model.header
        content = HeadingContent(
            title=config.kind_label(self.model.document_kind),
            title_style=TextStyle(
                config.heading_font_size,
                config.line_height(config.heading_font_size),
                bold=True,
                color=config.accent_color,
            ),
            meta_lines=(
                f"Reference: {header.reference_number or '—'}",
                f"Status: {header.status or '—'}",
            ),
            meta_style=TextStyle(config.meta_font_size, config.line_height(config.meta_font_size)),
        )
        self.cursor.place(Block(kind=BlockKind.HEADING, height=config.header_height, content=content))
        self.cursor.place(
            Block(
                kind=BlockKind.SEPARATOR,
                height=config.separator_height,
                content=RuleContent(color=config.accent_color, thickness=1.0),
            )
        )
        logger.debug("Header placed")

    def _party_column(
        self,
        title: str,
        party: Party,
        field_names: Sequence[str],
        x_offset: float,
        width: float,
    ) -> PartyColumn:
        config = self.config
        text_width = width - 2 * config.cell_padding
        rows: List[KeyValueContent] = [
            KeyValueContent(
                label="Name",
                value=party.display_name,
                lines=self._wrap(party.display_name, self.bold_style, text_width),
                style=self.bold_style,
            )
        ]
        for name in field_names:
            raw = getattr(party, name)
            value = str(raw).strip() if raw is not None else ""
            is_placeholder = not value
            if is_placeholder:
                value = config.placeholder(name)
            label = name.replace("_", " ").title().replace("Id", "ID")
            rows.append(
                KeyValueContent(
                    label=label,
                    value=value,
                    lines=self._wrap(f"{label}: {value}", self.base_style, text_width),
                    style=self.base_style,
                    is_placeholder=is_placeholder,
                )
            )

        height = (
            self.section_style.line_height
            + sum(len(row.lines) * row.style.line_height for row in rows)
            + 2 * config.cell_padding
        )
        return PartyColumn(
            title=title,
            title_style=self.section_style,
            rows=tuple(rows),
            x_offset=x_offset,
            width=width,
            height=height,
        )

    def _parties_section(self) -> None:
        config = self.config
        width = (self.content_width - config.party_gap) / 2
        if self.model.document_kind == "contract":
            titles = ("SERVICE PROVIDER", "CLIENT")
        else:
            titles = ("FROM", "BILL TO")

        issuer = self._party_column(
            titles[0], self.model.issuer, ("tax_id", "address", "email", "phone"), 0.0, width
        )
        counterparty = self._party_column(
            titles[1],
            self.model.counterparty,
            ("company", "tax_id", "address", "email", "phone"),
            width + config.party_gap,
            width,
        )
        height = max(issuer.height, counterparty.height)
        self._space(config.section_spacing)
        self.cursor.place(
            Block(
                kind=BlockKind.PARTIES,
                height=height,
                content=PartiesContent(issuer=issuer, counterparty=counterparty),
            )
        )
        logger.debug("Parties placed (height %.1f)", height)

    def _details_section(self) -> None:
        header = self.model.header
        details = [("Issue date", format_date(header.issue_date))]
        if header.due_date:
            details.append(("Due date", format_date(header.due_date)))

        self._space(self.config.section_spacing)
        for label, value in details:
            lines = self._wrap(f"{label}: {value}", self.base_style, self.content_width)
            self.cursor.place(
                Block(
                    kind=BlockKind.KEY_VALUE_ROW,
                    height=len(lines) * self.base_style.line_height,
                    content=KeyValueContent(label=label, value=value, lines=lines, style=self.base_style),
                )
            )

    def _title_section(self) -> None:
        # title and description are separate rows and may land on different pages
        title_style = TextStyle(
            self.config.section_title_font_size,
            self.config.line_height(self.config.section_title_font_size),
            bold=True,
        )
        for text, style in ((self.model.title_line, title_style), (self.model.description_line, self.base_style)):
            block = self._paragraph_block(text or "", style)
            if block is not None:
                self.cursor.place(block)

    def _table_columns(self) -> Tuple[TableColumn, ...]:
        columns: List[TableColumn] = []
        x_offset = 0.0
        for (key, label, align), ratio in zip(TABLE_COLUMNS, self.config.column_ratios):
            width = self.content_width * ratio
            columns.append(TableColumn(key=key, label=label, x_offset=x_offset, width=width, align=align))
            x_offset += width
        return tuple(columns)

    def _line_items_section(self) -> None:
        config = self.config
        columns = self._table_columns()
        self._space(config.section_spacing)
        # Header is reserved once and not repeated after a page break
        self.cursor.place(
            Block(
                kind=BlockKind.TABLE_HEADER,
                height=config.table_header_height,
                content=TableHeaderContent(columns=columns, style=self.bold_style, padding=config.cell_padding),
            )
        )

        for index, item in enumerate(self.model.line_items):
            self.cursor.place(self._row_block(index, item, columns))
        logger.debug("Placed %d table row(s)", len(self.model.line_items))

    def _row_block(self, index: int, item: LineItem, columns: Tuple[TableColumn, ...]) -> Block:
        config = self.config
        text_width = columns[0].width - 2 * config.cell_padding
        description_lines = self._wrap(item.description, self.base_style, text_width)
        notes_lines = self._wrap(item.notes, self.small_style, text_width)
        row_height = max(
            config.min_row_height,
            len(description_lines) * self.base_style.line_height
            + len(notes_lines) * self.small_style.line_height
            + 2 * config.cell_padding,
        )
        content = TableRowContent(
            row_index=index,
            columns=columns,
            description_lines=description_lines,
            notes_lines=notes_lines,
            quantity_text=_format_quantity(item.quantity),
            unit_price_text=self._raw_money(item.unit_price),
            line_total_text=self._money(item.line_total),
            style=self.base_style,
            notes_style=self.small_style,
            padding=config.cell_padding,
            degraded=item.is_degraded,
        )
        return Block(kind=BlockKind.TABLE_ROW, height=row_height, content=content, row_key=f"item-{index}")

    def _raw_money(self, value) -> str:
        # the row shows what was entered, even when it is not billable
        if is_finite_number(value):
            return self._money(to_decimal(value))
        return str(value)

    def _totals_section(self) -> None:
        config = self.config
        totals = self.model.totals
        shown = totals.display()
        rows = (
            TotalsRow(label="Subtotal", value=self._money(shown.subtotal)),
            TotalsRow(label=f"Tax ({format_percent(totals.tax_rate_percent)})", value=self._money(shown.tax_amount)),
            TotalsRow(label="Total", value=self._money(shown.total), highlight=True),
        )
        width = self.content_width * config.totals_width_ratio
        content = TotalsContent(
            rows=rows,
            style=self.bold_style,
            row_height=config.totals_row_height,
            padding=config.totals_padding,
            x_offset=self.content_width - width,
            width=width,
        )
        self._space(config.section_spacing)
        if not self.cursor.fits(config.totals_height):
            self.cursor.new_page()
        self.cursor.place(Block(kind=BlockKind.TOTALS_BOX, height=config.totals_height, content=content))
        logger.debug("Totals placed: %s", shown)

    def _text_sections(self) -> None:
        model = self.model
        if model.contract_body and model.contract_body.strip():
            paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT.split(model.contract_body.strip()) if p.strip()]
            self._space(self.config.section_spacing)
            for number, paragraph in enumerate(paragraphs):
                block = self._paragraph_block(
                    paragraph, self.base_style, title="CONTRACT CONTENT" if number == 0 else None
                )
                if block is not None:
                    self.cursor.place(block)

        for title, text in (("Notes", model.notes), ("Terms and conditions", model.terms_and_conditions)):
            if not text or not text.strip():
                continue
            self._space(self.config.section_spacing)
            block = self._paragraph_block(text.strip(), self.base_style, title=title)
            if block is not None:
                self.cursor.place(block)

    def _footer_section(self) -> None:
        config = self.config
        model = self.model
        header = model.header
        shown = model.totals.display()

        info_lines: List[str] = [f"{config.kind_label(model.document_kind)} {header.reference_number or '—'}"]
        signatures: Tuple[SignatureSlot, ...] = ()
        matrix: Tuple[Tuple[bool, ...], ...] = ()

        if model.wants_signature:
            height = config.signature_footer_height
            signatures = (
                SignatureSlot(
                    role="SERVICE PROVIDER",
                    name=model.issuer.display_name,
                    tax_id=model.issuer.tax_id or config.placeholder("tax_id"),
                ),
                SignatureSlot(
                    role="CLIENT",
                    name=model.counterparty.display_name,
                    tax_id=model.counterparty.tax_id or config.placeholder("tax_id"),
                ),
            )
        else:
            height = config.footer_height

        if model.document_kind == "invoice":
            code = verification_code(model.issuer.tax_id, header.reference_number, header.issue_date, shown.total)
            info_lines.append(f"Verification code: {code}")
            symbol = CURRENCY_SYMBOLS.get(self.currency, self.currency)
            matrix = qr_matrix(
                fiscal_qr_payload(header.reference_number, model.issuer.display_name, shown.total, symbol)
            )

        content = FooterContent(
            info_lines=tuple(info_lines),
            style=self.small_style,
            signatures=signatures,
            qr_matrix=matrix,
            qr_size=config.qr_size if matrix else 0.0,
        )
        # Look ahead so the footer is never stranded against the bottom margin
        self.cursor.page_break_if_below(config.footer_min_space)
        self._space(config.section_spacing)
        self.cursor.place(Block(kind=BlockKind.FOOTER, height=height, content=content))
        logger.debug("Footer placed on page %d", self.cursor.current_page_index)


def _format_quantity(value) -> str:
    if not is_finite_number(value):
        return str(value)
    number = to_decimal(value).normalize()
    # plain notation only while it stays readable
    if abs(number.adjusted()) > 20:
        return f"{number:E}"
    return f"{number:f}"
