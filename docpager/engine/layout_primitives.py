"""

Standardized data structures describing LayoutEngine output.

Every Block carries a payload with its text already wrapped into lines, so
renderers (PDF/text/debug) draw what the engine measured and never re-wrap.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


###############################################################################
# Common abstractions
###############################################################################


class BlockKind(str, Enum):
    HEADING = "heading"
    KEY_VALUE_ROW = "keyValueRow"
    PARAGRAPH = "paragraph"
    TABLE_HEADER = "tableHeader"
    TABLE_ROW = "tableRow"
    TOTALS_BOX = "totalsBox"
    SEPARATOR = "separator"
    SPACER = "spacer"
    PARTIES = "parties"
    FOOTER = "footer"


Color = Tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class TextStyle:
    font_size: float
    line_height: float
    bold: bool = False
    color: Optional[Color] = None


###############################################################################
# Text payloads
###############################################################################


@dataclass(frozen=True, slots=True)
class HeadingContent:
    """Document title plus its fixed meta lines (reference, dates, status)."""

    title: str
    title_style: TextStyle
    meta_lines: Tuple[str, ...]
    meta_style: TextStyle


@dataclass(frozen=True, slots=True)
class KeyValueContent:
    label: str
    value: str
    lines: Tuple[str, ...]
    style: TextStyle
    is_placeholder: bool = False


@dataclass(frozen=True, slots=True)
class ParagraphContent:
    lines: Tuple[str, ...]
    style: TextStyle
    title: Optional[str] = None
    title_style: Optional[TextStyle] = None


###############################################################################
# Parties
###############################################################################


@dataclass(frozen=True, slots=True)
class PartyColumn:
    """One side of the parties section; its rows are stacked KeyValueContent."""

    title: str
    title_style: TextStyle
    rows: Tuple[KeyValueContent, ...]
    x_offset: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class PartiesContent:
    issuer: PartyColumn
    counterparty: PartyColumn


###############################################################################
# Line-items table
###############################################################################


@dataclass(frozen=True, slots=True)
class TableColumn:
    key: str
    label: str
    x_offset: float
    width: float
    align: str = "left"


@dataclass(frozen=True, slots=True)
class TableHeaderContent:
    columns: Tuple[TableColumn, ...]
    style: TextStyle
    padding: float


@dataclass(frozen=True, slots=True)
class TableRowContent:
    row_index: int
    columns: Tuple[TableColumn, ...]
    description_lines: Tuple[str, ...]
    notes_lines: Tuple[str, ...]
    quantity_text: str
    unit_price_text: str
    line_total_text: str
    style: TextStyle
    notes_style: TextStyle
    padding: float
    degraded: bool = False


###############################################################################
# Totals and footer
###############################################################################


@dataclass(frozen=True, slots=True)
class TotalsRow:
    label: str
    value: str
    highlight: bool = False


@dataclass(frozen=True, slots=True)
class TotalsContent:
    rows: Tuple[TotalsRow, ...]
    style: TextStyle
    row_height: float
    padding: float
    x_offset: float
    width: float


@dataclass(frozen=True, slots=True)
class SignatureSlot:
    role: str
    name: str
    tax_id: str


@dataclass(frozen=True, slots=True)
class FooterContent:
    info_lines: Tuple[str, ...]
    style: TextStyle
    signatures: Tuple[SignatureSlot, ...] = ()
    qr_matrix: Tuple[Tuple[bool, ...], ...] = ()
    qr_size: float = 0.0


@dataclass(frozen=True, slots=True)
class RuleContent:
    """Separator line; spacers carry no payload at all."""

    color: Optional[Color] = None
    thickness: float = 0.5


BlockPayload = Union[
    HeadingContent,
    KeyValueContent,
    ParagraphContent,
    PartiesContent,
    TableHeaderContent,
    TableRowContent,
    TotalsContent,
    FooterContent,
    RuleContent,
    None,
]


@dataclass(frozen=True, slots=True)
class Block:
    """A typed, sized unit of content waiting to be placed on a page."""

    kind: BlockKind
    height: float
    content: BlockPayload = None
    row_key: Optional[str] = None
