"""

Layout Validator - checks a finished LayoutResult.

Checks:
- no block runs past the bottom margin (oversized blocks are warnings)
- blocks on a page do not overlap
- cursor positions never move backwards
- every table row lives on exactly one page
- page indices are consecutive and no page is empty

"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .layout_primitives import BlockKind
from .unified_layout import LayoutResult


class LayoutValidator:
    """Layout validator - checks LayoutResult integrity."""

    def __init__(self, result: LayoutResult):
        """
        Args:
            result: LayoutResult to validate
        """
        self.result = result
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate(self) -> Tuple[bool, List[str], List[str]]:
        """

        Performs full layout validation.

        Returns:
        Tuple (is_valid, errors, warnings)

        """
        self.errors.clear()
        self.warnings.clear()

        self._validate_pages_exist()
        self._validate_page_consistency()
        self._validate_block_overflow()
        self._validate_overlaps()
        self._validate_monotonic_cursor()
        self._validate_row_atomicity()
        self._validate_empty_pages()

        is_valid = len(self.errors) == 0
        return is_valid, self.errors.copy(), self.warnings.copy()

    def _validate_pages_exist(self) -> None:
        if not self.result.pages:
            self.errors.append("Layout contains no pages")

    def _validate_page_consistency(self) -> None:
        """Checks page numbering consistency."""
        for expected, page in enumerate(self.result.pages):
            if page.index != expected:
                self.errors.append(f"Invalid page numbering: expected {expected}, got {page.index}")

    def _validate_block_overflow(self) -> None:
        """Checks that blocks stay between the top and bottom margins."""
        geometry = self.result.geometry
        limit = geometry.height - geometry.margin_bottom
        for page in self.result.pages:
            for placement in page.placements:
                kind = placement.block.kind.value
                if placement.y < geometry.margin_top:
                    self.errors.append(
                        f"{kind} block on page {page.index} starts above the top margin (y={placement.y})"
                    )
                if placement.bottom <= limit:
                    continue
                message = (
                    f"{kind} block on page {page.index} runs past the bottom margin "
                    f"(bottom={placement.bottom:.1f}, limit={limit:.1f})"
                )
                if placement.oversized:
                    self.warnings.append(message)
                else:
                    self.errors.append(message)

    def _validate_overlaps(self) -> None:
        geometry = self.result.geometry
        for page in self.result.pages:
            ordered = sorted(page.placements, key=lambda placement: placement.y)
            for previous, current in zip(ordered, ordered[1:]):
                if previous.rect(geometry).intersects(current.rect(geometry)):
                    self.errors.append(
                        f"Blocks on page {page.index} overlap: "
                        f"{previous.block.kind.value} and {current.block.kind.value}"
                    )

    def _validate_monotonic_cursor(self) -> None:
        history = self.result.history
        for previous, current in zip(history, history[1:]):
            if current < previous:
                self.errors.append(f"Cursor moved backwards from {previous} to {current}")

    def _validate_row_atomicity(self) -> None:
        seen: Dict[str, int] = {}
        for page, placement in self.result.iter_placements():
            row_key = placement.block.row_key
            if row_key is None:
                continue
            if row_key in seen and seen[row_key] != page.index:
                self.errors.append(f"Row {row_key} appears on pages {seen[row_key]} and {page.index}")
            seen.setdefault(row_key, page.index)

    def _validate_empty_pages(self) -> None:
        for page in self.result.pages:
            content = [p for p in page.placements if p.block.kind != BlockKind.SPACER]
            if not content:
                self.warnings.append(f"Page {page.index} has no content blocks")

    def get_summary(self) -> Dict[str, Any]:
        """
        Returns validation summary.

        Returns:
            Dict with validation information
        """
        is_valid, errors, warnings = self.validate()

        return {
            "is_valid": is_valid,
            "total_errors": len(errors),
            "total_warnings": len(warnings) + len(self.result.warnings),
            "total_pages": len(self.result.pages),
            "total_blocks": sum(len(page.placements) for page in self.result.pages),
            "errors": errors,
            "warnings": warnings + list(self.result.warnings),
        }
