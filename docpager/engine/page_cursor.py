"""Page cursor - the single piece of state of a layout pass.

The cursor owns the page list being built and the current write position.
It only moves forward: (page index, y) pairs handed out never decrease.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .geometry import PageGeometry
from .layout_primitives import Block
from .unified_layout import Page, Placement

logger = logging.getLogger(__name__)


class PageCursor:
    """Tracks the current page and vertical write position."""

    def __init__(self, geometry: PageGeometry):
        """Initialize cursor at the top margin of page 0.

        Args:
            geometry: Validated page geometry
        """
        self.geometry = geometry
        self.pages: List[Page] = [Page(index=0)]
        self.current_page_index = 0
        self.y = geometry.margin_top
        self.history: List[Tuple[int, float]] = []
        self.warnings: List[str] = []

    @property
    def current_page(self) -> Page:
        return self.pages[-1]

    @property
    def usable_height(self) -> float:
        return self.geometry.content_height

    @property
    def at_page_top(self) -> bool:
        return self.current_page.is_empty and self.y == self.geometry.margin_top

    def remaining_height(self) -> float:
        return self.geometry.height - self.geometry.margin_bottom - self.y

    def fits(self, height: float) -> bool:
        return height <= self.remaining_height()

    def new_page(self) -> Page:
        page = Page(index=self.current_page_index + 1)
        self.pages.append(page)
        self.current_page_index = page.index
        self.y = self.geometry.margin_top
        logger.debug("Page break: now on page %d", page.index)
        return page

    def page_break_if_below(self, min_space: float) -> bool:
        """Start a new page when less than min_space is left on a non-empty page."""
        if self.remaining_height() < min_space and not self.at_page_top:
            self.new_page()
            return True
        return False

    def reserve(self, height: float, label: str = "block") -> float:
        """Reserve height and return the y at which it starts.

        Breaks to a new page first when the height does not fit in what is
        left of the current one. A height taller than a whole usable page
        goes alone onto a fresh page, is logged as degraded, and the cursor
        moves past that page afterwards.
        """
        if height > self.usable_height:
            return self._reserve_oversized(height, label)
        if height > self.remaining_height():
            self.new_page()
        start = self.y
        self.history.append((self.current_page_index, start))
        self.y += height
        return start

    def place(self, block: Block) -> Placement:
        """Reserve room for block and record it on the page it landed on."""
        oversized = block.height > self.usable_height
        y = self.reserve(block.height, f"{block.kind.value} block")
        page_index, _ = self.history[-1]
        placement = Placement(block=block, y=y, oversized=oversized)
        self.pages[page_index].add(placement)
        return placement

    def _reserve_oversized(self, height: float, label: str) -> float:
        if not self.at_page_top:
            self.new_page()
        message = (
            f"{label} of height {height:.1f} exceeds usable page "
            f"height {self.usable_height:.1f}; placed alone on page {self.current_page_index}"
        )
        logger.warning("Degraded layout: %s", message)
        self.warnings.append(message)

        start = self.y
        self.history.append((self.current_page_index, start))
        self.new_page()
        return start

    def trim_trailing_page(self) -> None:
        """Drop a trailing empty page left behind by an oversized block."""
        if len(self.pages) > 1 and self.current_page.is_empty:
            self.pages.pop()
            self.current_page_index = self.pages[-1].index
            self.y = self.geometry.height - self.geometry.margin_bottom
