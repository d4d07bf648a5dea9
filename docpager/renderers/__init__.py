"""Rendering package providing PDF output for laid-out pages."""

from .base_renderer import DrawingSurface, ReportLabSurface
from .pdf_renderer import PDFRenderer, render_pdf_bytes, render_pdf_file

__all__ = ["DrawingSurface", "PDFRenderer", "ReportLabSurface", "render_pdf_bytes", "render_pdf_file"]
