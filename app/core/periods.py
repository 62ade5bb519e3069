"""Calendar windows used by dashboards, goals and analytics."""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta

from app.errors import ValidationError


@dataclass(frozen=True)
class Period:
    """Inclusive datetime window covering whole calendar days."""

    start: datetime
    end: datetime

    @property
    def months(self) -> int:
        """Number of calendar months touched by the window."""

        return (self.end.year - self.start.year) * 12 + self.end.month - self.start.month + 1

    @property
    def days(self) -> int:
        return (self.end.date() - self.start.date()).days + 1

    def iter_days(self) -> Iterator[date]:
        current = self.start.date()
        last = self.end.date()
        while current <= last:
            yield current
            current += timedelta(days=1)


def _check_month(month: int) -> None:
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12")


def date_range_period(start: date, end: date) -> Period:
    if end < start:
        raise ValidationError("End date must be on or after start date.")
    return Period(datetime.combine(start, time.min), datetime.combine(end, time.max))


def month_period(year: int, month: int) -> Period:
    _check_month(month)
    last_day = calendar.monthrange(year, month)[1]
    return date_range_period(date(year, month, 1), date(year, month, last_day))


def year_period(year: int) -> Period:
    return date_range_period(date(year, 1, 1), date(year, 12, 31))


def goal_period(year: int, month: int) -> Period:
    """Month 0 is a yearly goal, 1-12 a specific month."""

    if month == 0:
        return year_period(year)
    return month_period(year, month)


def dashboard_period(year: int, month: int, cumulative: bool = False) -> Period:
    if cumulative:
        return year_period(year)
    return month_period(year, month)


def previous_month(year: int, month: int) -> tuple[int, int]:
    _check_month(month)
    shifted = date(year, month, 1) - relativedelta(months=1)
    return shifted.year, shifted.month


def week_start(value: date) -> date:
    """Monday of the week containing ``value``."""

    return value - timedelta(days=value.weekday())


def parse_month(value: str) -> tuple[int, int]:
    """Parse ``YYYY-MM`` into a (year, month) tuple."""

    try:
        year_text, month_text = value.strip().split("-", 1)
        year, month = int(year_text), int(month_text)
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Invalid month '{value}'. Use YYYY-MM.") from exc
    _check_month(month)
    return year, month


__all__ = [
    "Period",
    "dashboard_period",
    "date_range_period",
    "goal_period",
    "month_period",
    "parse_month",
    "previous_month",
    "week_start",
    "year_period",
]
