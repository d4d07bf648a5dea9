"""
docpager - paginated layout for invoices, budgets and contracts.

Given a DocumentModel and a PageGeometry the LayoutEngine produces pages of
placed, non-overlapping blocks; renderers turn those pages into PDF or text.

Quick Start:
    from docpager import DocumentModel, LayoutEngine, PageGeometry, render_pdf_bytes

    model = DocumentModel.from_dict(record)
    geometry = PageGeometry.a4()
    pages = LayoutEngine().layout(model, geometry)
    pdf = render_pdf_bytes(pages, geometry)
"""

from .version import __version__, __version_info__

from .exceptions import (
    ConfigurationError,
    DocPagerError,
    GeometryError,
    LayoutConfigurationError,
    ModelError,
    RenderingError,
)
from .engine import (
    Block,
    BlockKind,
    LayoutConfig,
    LayoutEngine,
    LayoutResult,
    LayoutValidator,
    MoneyFormatter,
    MonospaceTextMeasurer,
    Page,
    PageCursor,
    PageGeometry,
    Placement,
    ReportLabTextMeasurer,
    TextMeasurement,
)
from .models import DocumentHeader, DocumentModel, LineItem, Party, Totals, verification_code
from .renderers import DrawingSurface, PDFRenderer, ReportLabSurface, render_pdf_bytes, render_pdf_file
from .export import TextExporter
from .templates import ContentTemplateProvider, detect_service_category, with_contract_body

__all__ = [
    "__version__",
    "__version_info__",
    "Block",
    "BlockKind",
    "ConfigurationError",
    "ContentTemplateProvider",
    "DocPagerError",
    "DocumentHeader",
    "DocumentModel",
    "DrawingSurface",
    "GeometryError",
    "LayoutConfig",
    "LayoutConfigurationError",
    "LayoutEngine",
    "LayoutResult",
    "LayoutValidator",
    "LineItem",
    "ModelError",
    "MoneyFormatter",
    "MonospaceTextMeasurer",
    "Page",
    "PageCursor",
    "PageGeometry",
    "Party",
    "PDFRenderer",
    "Placement",
    "RenderingError",
    "ReportLabSurface",
    "ReportLabTextMeasurer",
    "TextExporter",
    "TextMeasurement",
    "Totals",
    "detect_service_category",
    "render_pdf_bytes",
    "render_pdf_file",
    "verification_code",
    "with_contract_body",
]
