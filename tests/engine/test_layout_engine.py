"""Tests for LayoutEngine."""

from decimal import Decimal

import pytest

from docpager.engine.geometry import PageGeometry
from docpager.engine.layout_config import LayoutConfig
from docpager.engine.layout_engine import LayoutEngine
from docpager.engine.layout_primitives import BlockKind
from docpager.engine.layout_validator import LayoutValidator
from docpager.engine.text_metrics import MonospaceTextMeasurer
from docpager.exceptions import GeometryError, LayoutConfigurationError
from docpager.models.document import DocumentHeader, LineItem, Party


def _rows(pages):
    return [
        (page.index, placement)
        for page in pages
        for placement in page.placements
        if placement.block.kind == BlockKind.TABLE_ROW
    ]


def _only(pages, kind):
    found = [(page.index, placement) for page in pages for placement in page.placements if placement.block.kind == kind]
    assert len(found) == 1, f"expected exactly one {kind.value} block, got {len(found)}"
    return found[0]


class TestLayoutEngineScenarios:
    """End-to-end layout scenarios."""

    def test_zero_items_gives_zero_totals_on_first_page(self, engine, make_model):
        geometry = PageGeometry.a4()

        pages = engine.layout(make_model(), geometry)

        assert len(pages) == 1
        assert _rows(pages) == []
        _only(pages, BlockKind.TABLE_HEADER)
        page_index, totals = _only(pages, BlockKind.TOTALS_BOX)
        assert page_index == 0
        assert [row.value for row in totals.block.content.rows] == ["0,00 €", "0,00 €", "0,00 €"]

    def test_three_items_totals(self, engine, make_model, scenario_b_items):
        model = make_model(line_items=scenario_b_items)

        pages = engine.layout(model, PageGeometry.a4())

        assert model.totals.subtotal == Decimal("300")
        _, totals = _only(pages, BlockKind.TOTALS_BOX)
        rows = totals.block.content.rows
        assert [row.label for row in rows] == ["Subtotal", "Tax (21%)", "Total"]
        assert [row.value for row in rows] == ["300,00 €", "63,00 €", "363,00 €"]
        assert rows[2].highlight
        assert [row.block.content.line_total_text for _, row in _rows(pages)] == [
            "200,00 €",
            "50,00 €",
            "50,00 €",
        ]

    def test_english_locale_totals(self, engine, make_model, scenario_b_items):
        model = make_model(line_items=scenario_b_items, locale="en_US", currency="usd")

        pages = engine.layout(model, PageGeometry.letter())

        _, totals = _only(pages, BlockKind.TOTALS_BOX)
        assert totals.block.content.rows[2].value == "$363.00"

    def test_huge_amounts_still_lay_out(self, engine, make_model):
        items = (
            LineItem(description="Big", quantity=1e13, unit_price=1e13),
            LineItem(description="Absurd", quantity="1e600000", unit_price="1e600000"),
        )

        pages = engine.layout(make_model(line_items=items), PageGeometry.a4())

        rows = [placement.block.content for _, placement in _rows(pages)]
        assert rows[0].line_total_text == "100" + ".000" * 8 + ",00 €"
        assert rows[1].line_total_text == "0,00 €"
        assert rows[1].degraded
        assert rows[1].quantity_text == "1E+600000"
        _, totals = _only(pages, BlockKind.TOTALS_BOX)
        assert totals.block.content.rows[0].value == rows[0].line_total_text

    def test_tall_row_breaks_once_before_the_row(self, engine, make_model, compact_geometry):
        filler = tuple(LineItem(description=f"Item {n}", quantity=1, unit_price=10) for n in range(10))
        tall = LineItem(description="one\ntwo\nthree\nfour", quantity=1, unit_price=10)
        model = make_model(line_items=filler + (tall,))

        result = engine.build(model, compact_geometry)
        pages = result.pages

        header_page, _ = _only(pages, BlockKind.TABLE_HEADER)
        rows = _rows(pages)
        assert header_page == 0
        assert [page for page, _ in rows[:-1]] == [0] * 10

        tall_page, tall_row = rows[-1]
        config = LayoutConfig()
        line_height = config.line_height(config.base_font_size)
        assert tall_row.block.height == pytest.approx(4 * line_height + 2 * config.cell_padding)
        assert tall_page == 1
        assert tall_row.y == compact_geometry.margin_top

        # it really did not fit after the last filler row
        last_filler = rows[-2][1]
        assert last_filler.bottom + tall_row.block.height > compact_geometry.content_bottom

        # table header is not repeated on the continuation page
        assert pages[1].blocks_of_kind(BlockKind.TABLE_HEADER) == []

    def test_wrapped_description_breaks_once_before_the_row(self, narrow_measurer, make_model, compact_geometry):
        # 49.6 pt of description text: five nine-letter words per line
        config = LayoutConfig(column_ratios=(0.16, 0.28, 0.28, 0.28))
        words = (
            "implement migration dashboard analytics reporting templates invoicing customers scheduled "
            "databases workflows providers platforms pipelines frontends exporting automates streaming "
            "licensing marketing"
        )
        filler = tuple(LineItem(description=f"Item {n}", quantity=1, unit_price=10) for n in range(10))
        tall = LineItem(description=words, quantity=1, unit_price=10)
        model = make_model(line_items=filler + (tall,))

        pages = LayoutEngine(config=config, measurer=narrow_measurer).layout(model, compact_geometry)

        rows = _rows(pages)
        assert [page for page, _ in rows[:-1]] == [0] * 10
        tall_page, tall_row = rows[-1]
        assert "\n" not in words
        assert len(tall_row.block.content.description_lines) == 4
        assert tall_row.block.content.description_lines[0] == "implement migration dashboard analytics reporting"
        assert tall_row.block.height == pytest.approx(4 * config.line_height(config.base_font_size) + 2 * config.cell_padding)
        assert tall_page == 1
        assert tall_row.y == compact_geometry.margin_top
        assert rows[-2][1].bottom + tall_row.block.height > compact_geometry.content_bottom
        assert pages[1].placements[0] is tall_row
        assert _only(pages, BlockKind.TABLE_HEADER)[0] == 0

    def test_margins_taller_than_page_raise_before_layout(self, engine, make_model):
        geometry = PageGeometry(width=595, height=842, margin_top=500, margin_bottom=400)

        with pytest.raises(GeometryError):
            engine.layout(make_model(), geometry)


class TestLayoutEngineInvariants:
    """Properties every layout must satisfy."""

    @pytest.fixture
    def long_model(self, make_model):
        items = tuple(
            LineItem(
                description=" ".join(["Consulting session on integration work"] * (1 + n % 4)),
                quantity=n + 1,
                unit_price="12.5",
                notes="Remote" if n % 3 == 0 else None,
            )
            for n in range(60)
        )
        return make_model(
            line_items=items,
            notes="Payment by bank transfer within 30 days.",
            terms_and_conditions="All prices exclude travel expenses.\nWork starts on receipt of the signed budget.",
        )

    def test_no_block_runs_past_bottom_margin(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        result = engine.build(long_model, compact_geometry)

        assert result.page_count > 1
        for _, placement in result.iter_placements():
            assert placement.bottom <= compact_geometry.content_bottom + 1e-9
            assert placement.y >= compact_geometry.margin_top

    def test_rows_are_atomic_and_in_order(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        pages = engine.layout(long_model, compact_geometry)

        rows = _rows(pages)
        assert [placement.block.content.row_index for _, placement in rows] == list(range(60))
        keys = [placement.block.row_key for _, placement in rows]
        assert len(keys) == len(set(keys))

    def test_cursor_history_is_monotonic(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        result = engine.build(long_model, compact_geometry)

        assert result.history == sorted(result.history)

    def test_validator_accepts_engine_output(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        is_valid, errors, warnings = LayoutValidator(engine.build(long_model, compact_geometry)).validate()

        assert is_valid, errors
        assert warnings == []

    def test_layout_is_deterministic(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        first = engine.layout(long_model, compact_geometry)
        second = engine.layout(long_model, compact_geometry)

        assert first == second

    def test_footer_is_last_block(self, long_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())

        pages = engine.layout(long_model, compact_geometry)

        assert pages[-1].placements[-1].block.kind == BlockKind.FOOTER
        _only(pages, BlockKind.FOOTER)


class TestLayoutEngineSections:
    """Section content produced by the engine."""

    def test_missing_party_fields_show_placeholders(self, engine, make_model, compact_geometry):
        model = make_model(counterparty=Party(display_name=""))

        pages = engine.layout(model, compact_geometry)

        _, parties = _only(pages, BlockKind.PARTIES)
        column = parties.block.content.counterparty
        assert column.rows[0].value == "[Client name unavailable]"
        values = {row.label: row for row in column.rows}
        assert values["Tax ID"].value == "[Tax ID unavailable]"
        assert values["Address"].value == "[Address unavailable]"
        assert values["Address"].is_placeholder
        assert not any(row.is_placeholder for row in parties.block.content.issuer.rows)

    def test_party_column_height_follows_wrapped_rows(self, make_model, compact_geometry):
        engine = LayoutEngine(measurer=MonospaceTextMeasurer())
        short = engine.layout(make_model(), compact_geometry)
        long_address = Party(display_name="ACME Corp", address="Avenida de la Constitucion 1234, " * 4)
        tall = engine.layout(make_model(counterparty=long_address), compact_geometry)

        _, short_parties = _only(short, BlockKind.PARTIES)
        _, tall_parties = _only(tall, BlockKind.PARTIES)
        assert tall_parties.block.height > short_parties.block.height

    def test_header_and_details(self, engine, make_model, compact_geometry):
        header = DocumentHeader(
            document_kind="budget",
            reference_number="P-7",
            issue_date="2024-01-31",
            due_date="2024-02-29",
            status="draft",
        )

        pages = engine.layout(make_model(header=header), compact_geometry)

        first = pages[0].placements
        assert first[0].block.kind == BlockKind.HEADING
        assert first[0].block.content.title == "BUDGET"
        assert "Reference: P-7" in first[0].block.content.meta_lines
        assert first[1].block.kind == BlockKind.SEPARATOR
        details = [p.block.content.value for p in pages[0].blocks_of_kind(BlockKind.KEY_VALUE_ROW)]
        assert details == ["31/01/2024", "29/02/2024"]

    def test_degraded_item_keeps_raw_value_and_bills_zero(self, engine, make_model, compact_geometry):
        model = make_model(
            line_items=(
                LineItem(description="Refund?", quantity=-2, unit_price=100),
                LineItem(description="Normal", quantity=1, unit_price=100),
            )
        )

        pages = engine.layout(model, compact_geometry)

        first_row = _rows(pages)[0][1].block.content
        assert first_row.degraded
        assert first_row.quantity_text == "-2"
        assert first_row.line_total_text == "0,00 €"
        assert model.totals.subtotal == Decimal("100")

    def test_invoice_footer_carries_verification_code_and_qr(self, engine, make_model, scenario_b_items):
        pages = engine.layout(make_model(line_items=scenario_b_items), PageGeometry.a4())

        _, footer = _only(pages, BlockKind.FOOTER)
        content = footer.block.content
        assert content.info_lines[0] == "INVOICE F-2024-001"
        assert content.info_lines[1].startswith("Verification code: VF-")
        assert content.qr_matrix
        assert content.signatures == ()

    def test_contract_has_signatures_and_body_paragraphs(self, engine, make_model, compact_geometry):
        model = make_model(
            header=DocumentHeader(document_kind="contract", reference_number="C-1"),
            contract_body="FIRST. PURPOSE\nWebsite.\n\nSECOND. TERM\nThree months.\n\nTHIRD. PRICE\n1.000 EUR.",
        )

        pages = engine.layout(model, compact_geometry)

        paragraphs = [p for page in pages for p in page.blocks_of_kind(BlockKind.PARAGRAPH)]
        assert len(paragraphs) == 3
        assert paragraphs[0].block.content.title == "CONTRACT CONTENT"
        assert paragraphs[1].block.content.title is None

        _, footer = _only(pages, BlockKind.FOOTER)
        content = footer.block.content
        assert [slot.role for slot in content.signatures] == ["SERVICE PROVIDER", "CLIENT"]
        assert content.qr_matrix == ()
        assert footer.block.height == LayoutConfig().signature_footer_height

        _, parties = _only(pages, BlockKind.PARTIES)
        assert parties.block.content.issuer.title == "SERVICE PROVIDER"

    def test_oversized_paragraph_is_placed_alone(self, engine, make_model, compact_geometry):
        body = "\n".join(f"Clause line {n}" for n in range(80))
        model = make_model(notes=body)

        result = engine.build(model, compact_geometry)

        oversized = [(page, p) for page, p in result.iter_placements() if p.oversized]
        assert len(oversized) == 1
        page, placement = oversized[0]
        assert placement.y == compact_geometry.margin_top
        assert [p.block.kind for p in page.placements] == [BlockKind.PARAGRAPH]
        assert result.warnings

        is_valid, errors, warnings = LayoutValidator(result).validate()
        assert is_valid, errors
        assert warnings

    def test_footer_moves_to_new_page_when_space_is_short(self, engine, make_model, compact_geometry):
        # four rows leave room for the totals box but less than footer_min_space below it
        items = tuple(LineItem(description=f"Row {n}", quantity=1, unit_price=1) for n in range(4))

        result = engine.build(make_model(line_items=items), compact_geometry)

        totals_page, totals = _only(result.pages, BlockKind.TOTALS_BOX)
        footer_page, footer = _only(result.pages, BlockKind.FOOTER)
        assert totals_page == 0
        assert compact_geometry.content_bottom - totals.bottom < LayoutConfig().footer_min_space
        assert footer_page == 1
        assert footer.y == compact_geometry.margin_top

    def test_totals_box_is_not_split_from_itself(self, engine, make_model, compact_geometry):
        items = tuple(LineItem(description=f"Row {n}", quantity=1, unit_price=1) for n in range(8))

        result = engine.build(make_model(line_items=items), compact_geometry)

        rows = _rows(result.pages)
        totals_page, totals = _only(result.pages, BlockKind.TOTALS_BOX)
        assert {page for page, _ in rows} == {0}
        assert totals_page == 1
        assert totals.y == compact_geometry.margin_top


class TestLayoutEngineConfiguration:
    """Fixed-section checks."""

    def test_header_taller_than_page_raises(self, engine, make_model):
        geometry = PageGeometry(width=400, height=60, margin_top=10, margin_bottom=10, margin_left=10, margin_right=10)

        with pytest.raises(LayoutConfigurationError):
            engine.layout(make_model(), geometry)

    def test_signature_footer_checked_for_contracts(self, narrow_measurer, make_model):
        geometry = PageGeometry(width=400, height=130, margin_top=10, margin_bottom=10, margin_left=10, margin_right=10)
        engine = LayoutEngine(measurer=narrow_measurer)

        engine.check_fixed_sections(make_model(), geometry)
        with pytest.raises(LayoutConfigurationError):
            engine.check_fixed_sections(make_model(signature=True), geometry)

    def test_config_from_mapping(self):
        config = LayoutConfig.from_mapping(
            {"base_font_size": "12", "column_ratios": [0.4, 0.2, 0.2, 0.2], "placeholders": {"tax_id": "[NIF]"}, "bogus": 1}
        )

        assert config.base_font_size == 12.0
        assert config.column_ratios == (0.4, 0.2, 0.2, 0.2)
        assert config.placeholder("tax_id") == "[NIF]"
        assert config.placeholder("address") == "[Address unavailable]"

    def test_custom_labels_reach_the_heading(self, narrow_measurer, make_model, compact_geometry):
        config = LayoutConfig.from_mapping({"kind_labels": {"invoice": "FACTURA"}})
        engine = LayoutEngine(measurer=narrow_measurer, config=config)

        pages = engine.layout(make_model(), compact_geometry)

        assert pages[0].placements[0].block.content.title == "FACTURA"
