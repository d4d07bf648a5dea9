"""Tests for LayoutValidator."""

from docpager.engine.geometry import PageGeometry
from docpager.engine.layout_primitives import Block, BlockKind
from docpager.engine.layout_validator import LayoutValidator
from docpager.engine.unified_layout import LayoutResult, Page, Placement


GEOMETRY = PageGeometry(width=300, height=200, margin_left=10, margin_right=10, margin_top=10, margin_bottom=10)


def _placement(y, height, kind=BlockKind.PARAGRAPH, row_key=None, oversized=False):
    return Placement(block=Block(kind=kind, height=height, row_key=row_key), y=y, oversized=oversized)


def _result(*pages, history=None):
    return LayoutResult(pages=list(pages), geometry=GEOMETRY, history=history or [])


class TestLayoutValidator:
    """Test suite for LayoutValidator."""

    def test_valid_layout(self):
        result = _result(
            Page(0, [_placement(10, 50), _placement(60, 40, BlockKind.TABLE_ROW, "item-0")]),
            Page(1, [_placement(10, 30, BlockKind.TABLE_ROW, "item-1")]),
            history=[(0, 10), (0, 60), (1, 10)],
        )

        is_valid, errors, warnings = LayoutValidator(result).validate()

        assert is_valid
        assert errors == []
        assert warnings == []

    def test_no_pages_is_an_error(self):
        is_valid, errors, _ = LayoutValidator(_result()).validate()

        assert not is_valid
        assert "no pages" in errors[0]

    def test_overflow_is_an_error(self):
        result = _result(Page(0, [_placement(150, 60)]))

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert not is_valid
        assert "bottom margin" in errors[0]

    def test_oversized_overflow_is_a_warning(self):
        result = _result(Page(0, [_placement(10, 400, oversized=True)]))

        is_valid, errors, warnings = LayoutValidator(result).validate()

        assert is_valid
        assert any("bottom margin" in warning for warning in warnings)

    def test_overlap_is_an_error(self):
        result = _result(Page(0, [_placement(10, 50), _placement(40, 20)]))

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert not is_valid
        assert any("overlap" in error for error in errors)

    def test_touching_blocks_do_not_overlap(self):
        result = _result(Page(0, [_placement(10, 50), _placement(60, 20), _placement(80, 0, BlockKind.SPACER)]))

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert is_valid
        assert errors == []

    def test_split_row_is_an_error(self):
        result = _result(
            Page(0, [_placement(10, 20, BlockKind.TABLE_ROW, "item-3")]),
            Page(1, [_placement(10, 20, BlockKind.TABLE_ROW, "item-3")]),
        )

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert not is_valid
        assert any("item-3" in error for error in errors)

    def test_backwards_cursor_is_an_error(self):
        result = _result(Page(0, [_placement(10, 20)]), history=[(0, 10), (0, 60), (0, 30)])

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert not is_valid
        assert any("backwards" in error for error in errors)

    def test_bad_page_numbering(self):
        result = _result(Page(0, [_placement(10, 20)]), Page(2, [_placement(10, 20)]))

        is_valid, errors, _ = LayoutValidator(result).validate()

        assert not is_valid
        assert any("page numbering" in error for error in errors)

    def test_spacer_only_page_is_a_warning(self):
        result = _result(Page(0, [_placement(10, 20)]), Page(1, [_placement(10, 14, BlockKind.SPACER)]))

        is_valid, _, warnings = LayoutValidator(result).validate()

        assert is_valid
        assert any("Page 1" in warning for warning in warnings)

    def test_summary(self):
        result = _result(Page(0, [_placement(10, 20), _placement(30, 20)]))
        result.warnings.append("degraded row")

        summary = LayoutValidator(result).get_summary()

        assert summary["is_valid"]
        assert summary["total_pages"] == 1
        assert summary["total_blocks"] == 2
        assert summary["warnings"] == ["degraded row"]
