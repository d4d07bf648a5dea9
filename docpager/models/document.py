"""
Document model for business documents (invoices, budgets, contracts).

A DocumentModel is built once per layout request and never mutated during
layout. Aggregates are computed in __post_init__ with Decimal arithmetic and
are only rounded when displayed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal, localcontext
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from ..engine.formatting import MONEY_CONTEXT, ZERO, is_finite_number, money_product, round2, to_decimal
from ..exceptions import ModelError

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("21")
ISSUER_NAME_PLACEHOLDER = "[Issuer name unavailable]"
CLIENT_NAME_PLACEHOLDER = "[Client name unavailable]"

DateLike = Union[date, str, None]


@dataclass(frozen=True)
class Party:
    """Issuer or counterparty of a document. Only display_name is required."""

    display_name: str = ""
    tax_id: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None

    def with_name_fallback(self, placeholder: str) -> "Party":
        if self.display_name and self.display_name.strip():
            return self
        return replace(self, display_name=placeholder)


@dataclass(frozen=True)
class DocumentHeader:
    document_kind: str = "invoice"
    reference_number: str = ""
    issue_date: DateLike = None
    status: str = "draft"
    due_date: DateLike = None


@dataclass(frozen=True)
class LineItem:
    """

    One billed or quoted row.

    quantity and unit_price keep whatever the caller supplied so odd input
    stays visible on the rendered row. Aggregation only ever uses the
    billable_* values, where negative or non-finite input counts as 0.

    """

    description: str
    quantity: Any = 1
    unit_price: Any = 0
    notes: Optional[str] = None

    @property
    def billable_quantity(self) -> Decimal:
        return _non_negative(self.quantity)

    @property
    def billable_unit_price(self) -> Decimal:
        return _non_negative(self.unit_price)

    @property
    def line_total(self) -> Decimal:
        total = money_product(self.billable_quantity, self.billable_unit_price)
        return total if total.is_finite() else ZERO

    @property
    def is_degraded(self) -> bool:
        """True when the raw input could not be billed as given."""
        if any(not is_finite_number(value) or to_decimal(value) < 0 for value in (self.quantity, self.unit_price)):
            return True
        return not money_product(self.billable_quantity, self.billable_unit_price).is_finite()


@dataclass(frozen=True)
class DisplayTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class Totals:
    """Unrounded aggregates of a document's line items."""

    subtotal: Decimal
    tax_rate_percent: Decimal
    tax_amount: Decimal
    total: Decimal

    @classmethod
    def compute(cls, items: Iterable[LineItem], tax_rate_percent: Decimal) -> "Totals":
        with localcontext(MONEY_CONTEXT):
            subtotal = sum((item.line_total for item in items), ZERO)
            tax_amount = subtotal * tax_rate_percent / Decimal(100)
            total = subtotal + tax_amount
        if not total.is_finite():
            logger.warning("Document totals overflow; shown as 0")
        return cls(
            subtotal=subtotal,
            tax_rate_percent=tax_rate_percent,
            tax_amount=tax_amount,
            total=total,
        )

    def display(self) -> DisplayTotals:
        # total is rounded from the unrounded sum, never from the rounded parts
        return DisplayTotals(
            subtotal=round2(self.subtotal),
            tax_amount=round2(self.tax_amount),
            total=round2(self.total),
        )


@dataclass(frozen=True)
class DocumentModel:
    issuer: Party
    counterparty: Party
    header: DocumentHeader = field(default_factory=DocumentHeader)
    title_line: Optional[str] = None
    description_line: Optional[str] = None
    line_items: Tuple[LineItem, ...] = ()
    tax_rate_percent: Any = None
    currency: Optional[str] = None
    locale: Optional[str] = None
    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    contract_body: Optional[str] = None
    signature: Optional[bool] = None
    totals: Totals = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "issuer", self.issuer.with_name_fallback(ISSUER_NAME_PLACEHOLDER))
        object.__setattr__(self, "counterparty", self.counterparty.with_name_fallback(CLIENT_NAME_PLACEHOLDER))
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "tax_rate_percent", _resolve_tax_rate(self.tax_rate_percent))
        object.__setattr__(self, "totals", Totals.compute(self.line_items, self.tax_rate_percent))

        degraded = [index for index, item in enumerate(self.line_items) if item.is_degraded]
        if degraded:
            logger.warning(
                "Line items %s could not be billed as given and count as 0",
                degraded,
            )

    @property
    def document_kind(self) -> str:
        return (self.header.document_kind or "invoice").strip().lower()

    @property
    def wants_signature(self) -> bool:
        if self.signature is not None:
            return bool(self.signature)
        return self.document_kind == "contract"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentModel":
        """

        Builds a model from plain records as delivered by the storage layer.

        Accepts the column names used by the invoices/contracts tables
        (`invoice_number`, `created_at`, `nif`, `items`, ...) next to the
        model's own field names.

        """
        if not isinstance(data, Mapping):
            raise ModelError("Document data must be a mapping", details=type(data).__name__)

        raw_items = _first(data, "line_items", "items") or []
        if not isinstance(raw_items, (list, tuple)):
            raise ModelError("Line items must be a list", details=type(raw_items).__name__)

        header_data = data.get("header") if isinstance(data.get("header"), Mapping) else data
        header = DocumentHeader(
            document_kind=_first(header_data, "document_kind", "kind") or "invoice",
            reference_number=str(_first(header_data, "reference_number", "invoice_number", "number") or ""),
            issue_date=_first(header_data, "issue_date", "date", "created_at"),
            status=_first(header_data, "status") or "draft",
            due_date=_first(header_data, "due_date"),
        )

        return cls(
            issuer=_party_from_record(_first(data, "issuer", "company")),
            counterparty=_party_from_record(_first(data, "counterparty", "client")),
            header=header,
            title_line=_first(data, "title_line", "title"),
            description_line=_first(data, "description_line", "description"),
            line_items=tuple(_item_from_record(item) for item in raw_items),
            tax_rate_percent=_first(data, "tax_rate_percent", "tax_rate"),
            currency=_first(data, "currency"),
            locale=_first(data, "locale"),
            notes=_first(data, "notes"),
            terms_and_conditions=_first(data, "terms_and_conditions", "terms", "payment_terms"),
            contract_body=_first(data, "contract_body"),
            signature=_first(data, "signature"),
        )


def _non_negative(value: Any) -> Decimal:
    number = to_decimal(value)
    return number if number > 0 else ZERO


def _resolve_tax_rate(value: Any) -> Decimal:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_TAX_RATE
    rate = to_decimal(value)
    if rate < 0 or not is_finite_number(value):
        logger.warning("Unusable tax rate %r, using default %s%%", value, DEFAULT_TAX_RATE)
        return DEFAULT_TAX_RATE
    return rate


def _first(record: Any, *keys: str) -> Any:
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return None


def _party_from_record(record: Any) -> Party:
    if record is None:
        return Party()
    if isinstance(record, Party):
        return record
    if not isinstance(record, Mapping):
        raise ModelError("Party data must be a mapping", details=type(record).__name__)
    return Party(
        display_name=str(_first(record, "display_name", "name", "company_name", "full_name") or ""),
        tax_id=_first(record, "tax_id", "nif", "document_number"),
        address=_first(record, "address"),
        email=_first(record, "email"),
        phone=_first(record, "phone"),
        company=_first(record, "company"),
    )


def _item_from_record(record: Any) -> LineItem:
    if isinstance(record, LineItem):
        return record
    if not isinstance(record, Mapping):
        raise ModelError("Line item must be a mapping", details=type(record).__name__)
    quantity = record.get("quantity")
    return LineItem(
        description=str(_first(record, "description", "name") or ""),
        quantity=1 if quantity is None else quantity,
        unit_price=_first(record, "unit_price", "rate", "price") or 0,
        notes=_first(record, "notes"),
    )
