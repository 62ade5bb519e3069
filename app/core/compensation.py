"""Chatter earnings and creator financial computations.

All functions here are pure: they take already-loaded rows (ORM instances or
any object exposing the same attributes) and return derived figures. Money is
kept as ``Decimal`` throughout and is only rounded by the formatting helpers
or at serialization time.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Sequence

from app.core.constants import COMPENSATION_PERCENTAGE, COMPENSATION_SALARY
from app.core.periods import Period
from app.errors import CompensationConfigError

MONEY_QUANT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats, strings and ``None`` into a Decimal amount."""

    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise CompensationConfigError(f"Invalid amount '{value}'") from exc


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value)


def _check_percent(value: Optional[Decimal], label: str) -> None:
    if value is not None and (value < ZERO or value > HUNDRED):
        raise CompensationConfigError(f"{label} must be between 0 and 100")


def _check_non_negative(value: Optional[Decimal], label: str) -> None:
    if value is not None and value < ZERO:
        raise CompensationConfigError(f"{label} cannot be negative")


def distribute_evenly(total: Decimal, parts: int) -> List[Decimal]:
    """Split ``total`` into ``parts`` cent-rounded shares; the last share absorbs rounding."""

    if parts <= 0:
        return []
    base_share = (total / parts).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    shares = [base_share for _ in range(parts - 1)]
    shares.append(total - sum(shares, ZERO))
    return shares


# --- Chatter earnings --------------------------------------------------------


@dataclass
class UserEarnings:
    total_sales: Decimal
    commission: Decimal
    base_earnings: Decimal
    fixed_salary: Decimal
    total_retribution: Decimal
    sale_count: int = 0


@dataclass
class DailyEarnings:
    day: date
    sales: Decimal = ZERO
    commission: Decimal = ZERO
    base_earnings: Decimal = ZERO
    fixed_salary_portion: Decimal = ZERO
    count: int = 0

    @property
    def total(self) -> Decimal:
        return self.commission + self.base_earnings + self.fixed_salary_portion


def _user_rates(user: Any) -> tuple[Optional[Decimal], Decimal]:
    percent = _optional_decimal(getattr(user, "commission_percent", None))
    salary = to_decimal(getattr(user, "fixed_salary", None))
    _check_percent(percent, "Commission percent")
    _check_non_negative(salary, "Fixed salary")
    return percent, salary


def compute_user_earnings(user: Any, sales: Iterable[Any], months: int = 1) -> UserEarnings:
    """Compute a chatter's sales, commission, BASE earnings and total retribution.

    Percentage commission applies to ``amount`` only; ``base_amount`` is paid
    one to one and the fixed salary is owed for every month of the period.
    """

    percent, salary = _user_rates(user)

    total_sales = ZERO
    base_earnings = ZERO
    count = 0
    for sale in sales:
        total_sales += to_decimal(sale.amount)
        base_earnings += to_decimal(getattr(sale, "base_amount", None))
        count += 1

    commission = total_sales * percent / HUNDRED if percent is not None else ZERO
    fixed_salary = salary * max(months, 0)

    return UserEarnings(
        total_sales=total_sales,
        commission=commission,
        base_earnings=base_earnings,
        fixed_salary=fixed_salary,
        total_retribution=commission + base_earnings + fixed_salary,
        sale_count=count,
    )


def daily_breakdown(user: Any, sales: Iterable[Any], period: Period) -> List[DailyEarnings]:
    """One row per calendar day of ``period`` with the salary spread evenly across days."""

    percent, salary = _user_rates(user)
    rows = {day: DailyEarnings(day=day) for day in period.iter_days()}

    for sale in sales:
        sale_date = sale.sale_date
        day = sale_date.date() if isinstance(sale_date, datetime) else sale_date
        row = rows.get(day)
        if row is None:
            continue
        amount = to_decimal(sale.amount)
        row.sales += amount
        row.base_earnings += to_decimal(getattr(sale, "base_amount", None))
        if percent is not None:
            row.commission += amount * percent / HUNDRED
        row.count += 1

    if salary:
        ordered = sorted(rows)
        for day, share in zip(ordered, distribute_evenly(salary * period.months, len(ordered))):
            rows[day].fixed_salary_portion = share

    return [rows[day] for day in sorted(rows)]


def chatter_commission_on_sales(sales: Iterable[Any]) -> Decimal:
    """Percent commission plus BASE owed to the chatters who made ``sales``.

    Each sale must expose its owning ``user``; fixed salaries are not attributable
    to a single creator and are left out.
    """

    total = ZERO
    for sale in sales:
        owner = getattr(sale, "user", None)
        percent = _optional_decimal(getattr(owner, "commission_percent", None))
        if percent is not None:
            _check_percent(percent, "Commission percent")
            total += to_decimal(sale.amount) * percent / HUNDRED
        total += to_decimal(getattr(sale, "base_amount", None))
    return total


# --- Creator financials ------------------------------------------------------


@dataclass
class CostLine:
    name: str
    amount: Decimal


@dataclass
class CostSnapshot:
    """Manually entered reference revenue and costs for one or more months."""

    gross_revenue: Decimal = ZERO
    marketing_costs: Decimal = ZERO
    tool_costs: Decimal = ZERO
    other_costs: Decimal = ZERO
    custom_costs: List[CostLine] = field(default_factory=list)

    @property
    def custom_costs_total(self) -> Decimal:
        return sum((line.amount for line in self.custom_costs), ZERO)

    @property
    def total_costs(self) -> Decimal:
        return self.marketing_costs + self.tool_costs + self.other_costs + self.custom_costs_total


def cost_snapshot(financial: Any | None) -> CostSnapshot:
    """Normalize a monthly financial row (or ``None``) into a snapshot."""

    if financial is None:
        return CostSnapshot()
    if isinstance(financial, CostSnapshot):
        return financial
    return CostSnapshot(
        gross_revenue=to_decimal(financial.gross_revenue),
        marketing_costs=to_decimal(financial.marketing_costs),
        tool_costs=to_decimal(financial.tool_costs),
        other_costs=to_decimal(financial.other_costs),
        custom_costs=[
            CostLine(name=line.name, amount=to_decimal(line.amount))
            for line in (financial.custom_costs or [])
        ],
    )


def merge_cost_snapshots(financials: Iterable[Any]) -> CostSnapshot:
    """Sum several monthly rows; custom cost lines are concatenated."""

    merged = CostSnapshot()
    for financial in financials:
        snapshot = cost_snapshot(financial)
        merged.gross_revenue += snapshot.gross_revenue
        merged.marketing_costs += snapshot.marketing_costs
        merged.tool_costs += snapshot.tool_costs
        merged.other_costs += snapshot.other_costs
        merged.custom_costs.extend(snapshot.custom_costs)
    return merged


@dataclass
class CreatorFinancials:
    creator_id: Optional[int]
    creator_name: str
    compensation_type: str
    revenue_share_percent: Optional[Decimal]
    fixed_salary_cost: Optional[Decimal]
    gross_revenue: Decimal
    total_sales_amount: Decimal
    creator_earnings: Decimal
    marketing_costs: Decimal
    tool_costs: Decimal
    other_costs: Decimal
    custom_costs: List[CostLine]
    custom_costs_total: Decimal
    net_revenue: Decimal
    agency_profit: Decimal


def validate_creator_compensation(
    compensation_type: str,
    revenue_share_percent: Any,
    fixed_salary_cost: Any,
) -> None:
    share = _optional_decimal(revenue_share_percent)
    salary = _optional_decimal(fixed_salary_cost)
    if compensation_type == COMPENSATION_PERCENTAGE:
        if share is None:
            raise CompensationConfigError("Revenue share percent is required for PERCENTAGE creators")
        _check_percent(share, "Revenue share percent")
    elif compensation_type == COMPENSATION_SALARY:
        if salary is None:
            raise CompensationConfigError("Fixed salary cost is required for SALARY creators")
        _check_non_negative(salary, "Fixed salary cost")
    else:
        raise CompensationConfigError(f"Unknown compensation type '{compensation_type}'")


def creator_earnings_for(creator: Any, total_sales_amount: Decimal, months: int = 1) -> Decimal:
    validate_creator_compensation(
        creator.compensation_type, creator.revenue_share_percent, creator.fixed_salary_cost
    )
    if creator.compensation_type == COMPENSATION_PERCENTAGE:
        return total_sales_amount * to_decimal(creator.revenue_share_percent) / HUNDRED
    return to_decimal(creator.fixed_salary_cost) * max(months, 0)


def compute_creator_financials(
    creator: Any,
    sales: Iterable[Any],
    financial: Any | None = None,
    months: int = 1,
) -> CreatorFinancials:
    """Creator earnings, net revenue and agency profit for a period.

    ``total_sales_amount`` comes from the sale rows; the manual ``gross_revenue``
    figure is carried along for reference only. Costs reduce agency profit but
    never net revenue.
    """

    costs = cost_snapshot(financial)
    total_sales_amount = sum((to_decimal(sale.amount) for sale in sales), ZERO)
    creator_earnings = creator_earnings_for(creator, total_sales_amount, months)
    net_revenue = total_sales_amount - creator_earnings
    agency_profit = net_revenue - costs.total_costs

    return CreatorFinancials(
        creator_id=getattr(creator, "id", None),
        creator_name=creator.name,
        compensation_type=creator.compensation_type,
        revenue_share_percent=_optional_decimal(creator.revenue_share_percent),
        fixed_salary_cost=_optional_decimal(creator.fixed_salary_cost),
        gross_revenue=costs.gross_revenue,
        total_sales_amount=total_sales_amount,
        creator_earnings=creator_earnings,
        marketing_costs=costs.marketing_costs,
        tool_costs=costs.tool_costs,
        other_costs=costs.other_costs,
        custom_costs=list(costs.custom_costs),
        custom_costs_total=costs.custom_costs_total,
        net_revenue=net_revenue,
        agency_profit=agency_profit,
    )


def sum_field(rows: Sequence[Any], attribute: str) -> Decimal:
    return sum((to_decimal(getattr(row, attribute)) for row in rows), ZERO)


__all__ = [
    "CostLine",
    "CostSnapshot",
    "CreatorFinancials",
    "DailyEarnings",
    "UserEarnings",
    "chatter_commission_on_sales",
    "compute_creator_financials",
    "compute_user_earnings",
    "cost_snapshot",
    "creator_earnings_for",
    "daily_breakdown",
    "distribute_evenly",
    "merge_cost_snapshots",
    "sum_field",
    "to_decimal",
    "validate_creator_compensation",
]
