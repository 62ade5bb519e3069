from datetime import date, datetime
from decimal import Decimal

from app.core.formatting import format_display_date, format_money, round_money


def test_round_money_half_up():
    assert round_money(Decimal("2.005")) == Decimal("2.01")
    assert round_money(None) == Decimal("0.00")
    assert round_money(10) == Decimal("10.00")


def test_format_money():
    assert format_money(Decimal("1234.5")) == "$1,234.50"
    assert format_money(Decimal("-1000")) == "-$1,000.00"
    assert format_money("n/a") == "n/a"


def test_format_display_date():
    assert format_display_date(date(2026, 3, 1)) == "2026-03-01"
    assert format_display_date(datetime(2026, 3, 1, 23, 59)) == "2026-03-01"
    assert format_display_date(None) == ""
