"""Layout configuration: font sizes, spacing, fixed section heights and labels."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Tuple

from .layout_primitives import Color

logger = logging.getLogger(__name__)


DEFAULT_PLACEHOLDERS: Dict[str, str] = {
    "tax_id": "[Tax ID unavailable]",
    "address": "[Address unavailable]",
    "email": "[Email unavailable]",
    "phone": "[Phone unavailable]",
    "company": "[Company unavailable]",
}

DEFAULT_KIND_LABELS: Dict[str, str] = {
    "invoice": "INVOICE",
    "budget": "BUDGET",
    "contract": "PROFESSIONAL SERVICES CONTRACT",
}


@dataclass
class LayoutConfig:
    """Configuration for a layout pass; passed explicitly, never global."""

    base_font_size: float = 10.0
    small_font_size: float = 8.0
    heading_font_size: float = 18.0
    meta_font_size: float = 10.0
    section_title_font_size: float = 12.0
    line_height_factor: float = 1.3

    cell_padding: float = 4.0
    section_spacing: float = 14.0
    min_row_height: float = 20.0
    table_header_height: float = 20.0
    totals_row_height: float = 16.0
    totals_padding: float = 8.0
    totals_width_ratio: float = 0.45
    party_gap: float = 20.0
    separator_height: float = 6.0

    footer_height: float = 72.0
    signature_footer_height: float = 120.0
    footer_min_space: float = 140.0
    qr_size: float = 56.0

    # description, quantity, unit price, line total
    column_ratios: Tuple[float, float, float, float] = (0.52, 0.12, 0.18, 0.18)

    default_currency: str = "EUR"
    default_locale: str = "es_ES"

    placeholders: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PLACEHOLDERS))
    kind_labels: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_KIND_LABELS))

    accent_color: Color = (37, 99, 235)
    muted_color: Color = (100, 100, 100)
    rule_color: Color = (200, 200, 200)

    def line_height(self, font_size: float) -> float:
        return font_size * self.line_height_factor

    @property
    def header_height(self) -> float:
        """Heading block: title line plus two meta lines."""
        return (
            self.line_height(self.heading_font_size)
            + 2 * self.line_height(self.meta_font_size)
            + self.cell_padding
        )

    @property
    def totals_height(self) -> float:
        return 3 * self.totals_row_height + 2 * self.totals_padding

    def kind_label(self, document_kind: str) -> str:
        return self.kind_labels.get(document_kind, document_kind.upper() or "DOCUMENT")

    def placeholder(self, field_name: str) -> str:
        return self.placeholders.get(field_name, f"[{field_name.replace('_', ' ').capitalize()} unavailable]")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LayoutConfig":
        """Build a config from plain settings, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        defaults = cls()
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.debug("Ignoring unknown layout setting %r", key)
                continue
            default = getattr(defaults, key)
            if isinstance(default, float):
                kwargs[key] = float(value)
            elif isinstance(default, tuple):
                kwargs[key] = tuple(value)
            elif isinstance(default, dict):
                merged = dict(default)
                merged.update(value)
                kwargs[key] = merged
            else:
                kwargs[key] = value
        return cls(**kwargs)
