"""Layout engine: measurement, money formatting, pagination and validation."""

from .formatting import MoneyFormatter, format_date, format_percent, round2
from .geometry import PageGeometry, Rect
from .layout_config import LayoutConfig
from .layout_engine import LayoutEngine
from .layout_primitives import Block, BlockKind, TextStyle
from .layout_validator import LayoutValidator
from .page_cursor import PageCursor
from .text_metrics import MonospaceTextMeasurer, ReportLabTextMeasurer, TextMeasurement, TextMeasurer
from .unified_layout import LayoutResult, Page, Placement

__all__ = [
    "Block",
    "BlockKind",
    "LayoutConfig",
    "LayoutEngine",
    "LayoutResult",
    "LayoutValidator",
    "MoneyFormatter",
    "MonospaceTextMeasurer",
    "Page",
    "PageCursor",
    "PageGeometry",
    "Placement",
    "Rect",
    "ReportLabTextMeasurer",
    "TextMeasurement",
    "TextMeasurer",
    "TextStyle",
    "format_date",
    "format_percent",
    "round2",
]
