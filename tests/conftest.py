"""
Pytest configuration for docpager
"""

import logging
import sys
from datetime import date

import pytest

from docpager.engine.geometry import PageGeometry
from docpager.engine.layout_engine import LayoutEngine
from docpager.engine.text_metrics import MonospaceTextMeasurer
from docpager.models.document import DocumentHeader, DocumentModel, LineItem, Party


@pytest.fixture(autouse=True)
def configure_logging():
    """Keep test output to warnings and errors on stdout."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def compact_geometry():
    """400 x 500 pt page with 20 pt margins: 360 x 460 content area."""
    return PageGeometry(
        width=400.0,
        height=500.0,
        margin_left=20.0,
        margin_right=20.0,
        margin_top=20.0,
        margin_bottom=20.0,
    )


@pytest.fixture
def narrow_measurer():
    """One point per character at 10 pt, so short texts never wrap."""
    return MonospaceTextMeasurer(char_width_ratio=0.1, bold_ratio=0.1)


@pytest.fixture
def engine(narrow_measurer):
    return LayoutEngine(measurer=narrow_measurer)


@pytest.fixture
def issuer():
    return Party(
        display_name="Studio Norte S.L.",
        tax_id="B12345678",
        address="Calle Mayor 1, Madrid",
        email="billing@studionorte.es",
        phone="+34 600 000 000",
    )


@pytest.fixture
def client_party():
    return Party(
        display_name="ACME Corp",
        tax_id="A87654321",
        address="Gran Via 10, Madrid",
        email="ap@acme.example",
        phone="+34 911 111 111",
        company="ACME Holdings",
    )


@pytest.fixture
def make_model(issuer, client_party):
    """Factory for invoice models; keyword arguments override any field."""

    def factory(**overrides):
        values = dict(
            issuer=issuer,
            counterparty=client_party,
            header=DocumentHeader(
                document_kind="invoice",
                reference_number="F-2024-001",
                issue_date=date(2024, 3, 5),
                status="sent",
            ),
            line_items=(),
        )
        values.update(overrides)
        return DocumentModel(**values)

    return factory


@pytest.fixture
def scenario_b_items():
    return (
        LineItem(description="Landing page", quantity=2, unit_price=100),
        LineItem(description="Hosting", quantity=1, unit_price=50),
        LineItem(description="Support hours", quantity=5, unit_price=10),
    )
