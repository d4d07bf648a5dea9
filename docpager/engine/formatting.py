"""Consistent formatting for money amounts and dates. Never render raw floats."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, NamedTuple, Optional


CENT = Decimal("0.01")
ZERO = Decimal("0")

# Amount arithmetic runs in this context. Results that still do not fit come
# back as Infinity/NaN instead of raising and are then treated as 0.
MONEY_CONTEXT = Context(prec=1000, rounding=ROUND_HALF_UP, traps=[])
FALLBACK_CURRENCY = "EUR"
FALLBACK_LOCALE = "es_ES"


class LocaleConvention(NamedTuple):
    group_separator: str
    decimal_separator: str
    symbol_after: bool


LOCALE_CONVENTIONS: Dict[str, LocaleConvention] = {
    "es_ES": LocaleConvention(".", ",", True),
    "de_DE": LocaleConvention(".", ",", True),
    "fr_FR": LocaleConvention("\u00a0", ",", True),
    "en_US": LocaleConvention(",", ".", False),
    "en_GB": LocaleConvention(",", ".", False),
}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
}


def is_finite_number(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    try:
        return Decimal(str(value).strip()).is_finite()
    except (InvalidOperation, ValueError):
        return False


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric-ish value to Decimal; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, float):
        # str() keeps the short repr so 0.1 stays 0.1 instead of its binary expansion
        value = str(value)
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def round2(value: Any) -> Decimal:
    """Round half-up to cents; amounts too large to hold in cents become 0."""
    with localcontext(MONEY_CONTEXT):
        rounded = to_decimal(value).quantize(CENT)
    return rounded if rounded.is_finite() else ZERO


def money_product(*factors: Decimal) -> Decimal:
    """Multiply amounts without trapping; an overflowing product is Infinity."""
    result = Decimal(1)
    with localcontext(MONEY_CONTEXT):
        for factor in factors:
            result = result * factor
    return result


def format_percent(rate: Any) -> str:
    value = to_decimal(rate).normalize()
    text = f"{value:f}"
    return f"{text}%"


def parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d.%m.%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: Any, placeholder: str = "—") -> str:
    """Render a date as dd/mm/yyyy; unparseable text is shown as given."""
    parsed = parse_date(value)
    if parsed is not None:
        return parsed.strftime("%d/%m/%Y")
    text = "" if value is None else str(value).strip()
    return text or placeholder


class MoneyFormatter:
    """Formats amounts with two decimals, locale grouping and a currency symbol."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale if locale in LOCALE_CONVENTIONS else FALLBACK_LOCALE
        self.convention = LOCALE_CONVENTIONS[self.locale]

    def format_number(self, amount: Any) -> str:
        value = round2(amount)
        sign = "-" if value < 0 else ""
        with localcontext(MONEY_CONTEXT):
            integer_part, _, fraction = f"{value.copy_abs():.2f}".partition(".")

        groups = []
        while len(integer_part) > 3:
            groups.insert(0, integer_part[-3:])
            integer_part = integer_part[:-3]
        groups.insert(0, integer_part)

        grouped = self.convention.group_separator.join(groups)
        return f"{sign}{grouped}{self.convention.decimal_separator}{fraction}"

    def format(self, amount: Any, currency_code: Optional[str] = None) -> str:
        code = (currency_code or FALLBACK_CURRENCY).strip().upper() or FALLBACK_CURRENCY
        symbol = CURRENCY_SYMBOLS.get(code, code)
        number = self.format_number(amount)
        if self.convention.symbol_after:
            return f"{number} {symbol}"
        if number.startswith("-"):
            return f"-{symbol}{number[1:]}"
        return f"{symbol}{number}"
