"""

Unified layout model - final document representation ready for rendering.

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .geometry import PageGeometry, Rect
from .layout_primitives import Block, BlockKind


@dataclass(frozen=True, slots=True)
class Placement:
    """A block pinned at a y position (top edge, top-down coordinates)."""

    block: Block
    y: float
    oversized: bool = False

    @property
    def bottom(self) -> float:
        return self.y + self.block.height

    def rect(self, geometry: PageGeometry) -> Rect:
        """Box the block occupies across the content width."""
        return Rect(geometry.margin_left, self.y, geometry.content_width, self.block.height)


@dataclass(slots=True)
class Page:
    """Page with its placed blocks, in placement order."""

    index: int
    placements: List[Placement] = field(default_factory=list)

    def add(self, placement: Placement) -> None:
        self.placements.append(placement)

    def blocks_of_kind(self, kind: BlockKind) -> List[Placement]:
        return [placement for placement in self.placements if placement.block.kind == kind]

    @property
    def is_empty(self) -> bool:
        return not self.placements


@dataclass
class LayoutResult:
    """Pages of one layout pass plus what the pass had to degrade."""

    pages: List[Page]
    geometry: PageGeometry
    warnings: List[str] = field(default_factory=list)
    history: List[Tuple[int, float]] = field(default_factory=list)

    def iter_placements(self) -> Iterator[Tuple[Page, Placement]]:
        for page in self.pages:
            for placement in page.placements:
                yield page, placement

    def find_page(self, row_key: str) -> Optional[int]:
        for page, placement in self.iter_placements():
            if placement.block.row_key == row_key:
                return page.index
        return None

    @property
    def page_count(self) -> int:
        return len(self.pages)
