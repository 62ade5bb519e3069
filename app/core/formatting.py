"""Display helpers: the only place monetary values are rounded."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

DISPLAY_DATE_FORMAT = "%Y-%m-%d"
MONEY_QUANT = Decimal("0.01")


def format_display_date(value: date | datetime | None) -> str:
    """Format a date as yyyy-mm-dd or return an empty string."""
    if value is None:
        return ""
    return value.strftime(DISPLAY_DATE_FORMAT)


def round_money(value: Any) -> Decimal:
    """Round an amount half-up to cents."""
    if value in (None, ""):
        return Decimal("0.00")
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def format_money(value: Any, symbol: str = "$") -> str:
    """Format numeric values with thousand separators and two decimals."""
    try:
        rounded = round_money(value)
    except (InvalidOperation, TypeError, ValueError):
        return str(value)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


__all__ = [
    "format_display_date",
    "format_money",
    "round_money",
]
