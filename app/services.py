"""Application service layer."""
from __future__ import annotations

from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Sequence

import pandas as pd
from sqlalchemy import select
from sqlalchemy.orm import Session

from app import crud
from app.auth import User
from app.core.compensation import (
    ZERO,
    CreatorFinancials,
    chatter_commission_on_sales,
    compute_creator_financials,
    compute_user_earnings,
    daily_breakdown,
    merge_cost_snapshots,
    sum_field,
)
from app.core.constants import GOAL_COMMISSION, GOAL_SALES, ROLE_CHATTER, ROLE_MANAGER
from app.core.goals import compute_goal_progress
from app.core.periods import (
    Period,
    dashboard_period,
    date_range_period,
    goal_period,
    month_period,
    previous_month,
)
from app.models import Creator, Goal, Sale

CENTS = Decimal("100")


def _daily_points(rows) -> list[dict[str, Any]]:
    return [
        {
            "date": row.day,
            "sales": row.sales,
            "commission": row.commission,
            "base_earnings": row.base_earnings,
            "fixed_salary": row.fixed_salary_portion,
            "total": row.total,
            "count": row.count,
        }
        for row in rows
    ]


class DashboardService:
    """Builds chatter and admin dashboards from stored sales, payments and costs."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # -- chatters -------------------------------------------------------------

    def active_chatters(self) -> Sequence[User]:
        stmt = (
            select(User)
            .where(User.role.in_((ROLE_CHATTER, ROLE_MANAGER)), User.is_active.is_(True))
            .order_by(User.name)
        )
        return self.db.execute(stmt).scalars().all()

    def chatter_dashboard(self, user: User, year: int, month: int) -> dict[str, Any]:
        period = month_period(year, month)
        sales = crud.sales_in_period(self.db, period, user_id=user.id)
        earnings = compute_user_earnings(user, sales, months=period.months)
        return {
            "user_id": user.id,
            "user_name": user.name,
            "year": year,
            "month": month,
            "total_sales": earnings.total_sales,
            "total_commissions": earnings.total_retribution,
            "sale_count": earnings.sale_count,
            "daily": _daily_points(daily_breakdown(user, sales, period)),
        }

    def chatter_detail(self, user: User, year: int, month: int) -> dict[str, Any]:
        period = month_period(year, month)
        sales = crud.sales_in_period(self.db, period, user_id=user.id)
        earnings = compute_user_earnings(user, sales, months=period.months)
        payments = crud.list_payments(
            self.db, user_id=user.id, start_date=period.start.date(), end_date=period.end.date()
        )
        paid = sum_field(payments, "amount")
        return {
            "user": user,
            "period_start": period.start.date(),
            "period_end": period.end.date(),
            "daily": _daily_points(daily_breakdown(user, sales, period)),
            "payments": payments,
            "total_sales": earnings.total_sales,
            "commission": earnings.commission,
            "base_earnings": earnings.base_earnings,
            "fixed_salary": earnings.fixed_salary,
            "total_retribution": earnings.total_retribution,
            "total_payments": paid,
            "amount_owed": earnings.total_retribution - paid,
        }

    def chatter_revenue(self, period: Period) -> list[dict[str, Any]]:
        sales = crud.sales_in_period(self.db, period)
        by_user: dict[int, list[Sale]] = {}
        for sale in sales:
            by_user.setdefault(sale.user_id, []).append(sale)

        rows = []
        for chatter in self.active_chatters():
            earnings = compute_user_earnings(chatter, by_user.get(chatter.id, []), months=period.months)
            rows.append(
                {
                    "user_id": chatter.id,
                    "name": chatter.name,
                    "email": chatter.email,
                    "role": chatter.role,
                    "commission_percent": chatter.commission_percent,
                    "revenue": earnings.total_sales,
                    "commission": earnings.commission,
                    "fixed_salary": earnings.fixed_salary,
                    "total_base": earnings.base_earnings,
                    "total_retribution": earnings.total_retribution,
                    "sale_count": earnings.sale_count,
                }
            )
        return rows

    # -- creators -------------------------------------------------------------

    def active_creators(self) -> Sequence[Creator]:
        return crud.list_creators(self.db, active=True)

    def creator_financials(self, creator: Creator, period: Period) -> CreatorFinancials:
        sales = crud.sales_in_period(self.db, period, creator_id=creator.id)
        costs = merge_cost_snapshots(crud.financials_for_period(self.db, period, creator_id=creator.id))
        return compute_creator_financials(creator, sales, costs, months=period.months)

    def creator_financials_rows(self, period: Period) -> list[dict[str, Any]]:
        sales = crud.sales_in_period(self.db, period)
        financials = crud.financials_for_period(self.db, period)

        sales_by_creator: dict[int, list[Sale]] = {}
        for sale in sales:
            sales_by_creator.setdefault(sale.creator_id, []).append(sale)
        costs_by_creator: dict[int, list] = {}
        for financial in financials:
            costs_by_creator.setdefault(financial.creator_id, []).append(financial)

        rows = []
        for creator in self.active_creators():
            creator_sales = sales_by_creator.get(creator.id, [])
            result = compute_creator_financials(
                creator,
                creator_sales,
                merge_cost_snapshots(costs_by_creator.get(creator.id, [])),
                months=period.months,
            )
            row = asdict(result)
            row["chatter_commissions"] = chatter_commission_on_sales(creator_sales)
            rows.append(row)
        return rows

    # -- admin recap ----------------------------------------------------------

    def admin_recap(self, year: int, month: int, cumulative: bool = False) -> dict[str, Any]:
        period = dashboard_period(year, month, cumulative)
        chatter_rows = self.chatter_revenue(period)
        creator_rows = self.creator_financials_rows(period)

        total_commissions = sum((row["total_retribution"] for row in chatter_rows), ZERO)
        paid = sum(
            (crud.total_payments(self.db, period, user_id=row["user_id"]) for row in chatter_rows),
            ZERO,
        )
        return {
            "year": year,
            "month": month,
            "cumulative": cumulative,
            "period_start": period.start.date(),
            "period_end": period.end.date(),
            "total_sales": sum_field(crud.sales_in_period(self.db, period), "amount"),
            "total_commissions": total_commissions,
            "total_fixed_salaries": sum((row["fixed_salary"] for row in chatter_rows), ZERO),
            "total_payments": paid,
            "total_owed_to_chatters": total_commissions - paid,
            "total_net_revenue": sum((row["net_revenue"] for row in creator_rows), ZERO),
            "total_agency_profit": sum((row["agency_profit"] for row in creator_rows), ZERO),
            "chatter_revenue": chatter_rows,
            "creator_financials": creator_rows,
        }


class GoalService:
    """Aggregates the figure a goal is measured against and evaluates progress."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.dashboards = DashboardService(db)

    def current_value(self, goal: Goal) -> Decimal:
        period = goal_period(goal.year, goal.month)

        if goal.user_id is not None:
            user = crud.get_user(self.db, goal.user_id)
            sales = crud.sales_in_period(self.db, period, user_id=user.id)
            if goal.type == GOAL_COMMISSION:
                return compute_user_earnings(user, sales, months=period.months).total_retribution
            return sum_field(sales, "amount")

        if goal.creator_id is not None:
            creator = crud.get_creator(self.db, goal.creator_id)
            if goal.type == GOAL_SALES:
                return sum_field(crud.sales_in_period(self.db, period, creator_id=creator.id), "amount")
            if goal.type == GOAL_COMMISSION:
                return chatter_commission_on_sales(
                    crud.sales_in_period(self.db, period, creator_id=creator.id)
                )
            return self.dashboards.creator_financials(creator, period).net_revenue

        if goal.type == GOAL_SALES:
            return sum_field(crud.sales_in_period(self.db, period), "amount")
        if goal.type == GOAL_COMMISSION:
            return sum((row["total_retribution"] for row in self.dashboards.chatter_revenue(period)), ZERO)
        return sum((row["net_revenue"] for row in self.dashboards.creator_financials_rows(period)), ZERO)

    def progress(self, goal: Goal, chatter_view: bool = False) -> dict[str, Any]:
        period = goal_period(goal.year, goal.month)
        creator_name = goal.creator.name if goal.creator is not None else None
        result = compute_goal_progress(
            goal, self.current_value(goal), creator_name=creator_name, chatter_view=chatter_view
        )
        payload = asdict(result)
        payload.update(goal=goal, period_start=period.start.date(), period_end=period.end.date())
        return payload

    def progress_for(self, goals: Iterable[Goal], chatter_view: bool = False) -> list[dict[str, Any]]:
        return [self.progress(goal, chatter_view=chatter_view) for goal in goals]


def _to_cents(value: Any) -> int:
    return int(Decimal(str(value or 0)) * CENTS)


def _from_cents(value: Any) -> Decimal:
    return Decimal(int(value)) / CENTS


def _change_percent(current: Decimal, previous: Decimal) -> Decimal:
    if previous == 0:
        return ZERO
    return (current - previous) / previous * CENTS


class AnalyticsService:
    """Sales analytics computed over pandas frames.

    Amounts are held as integer cents inside the frames so that grouping and
    summing stay exact.
    """

    FRAME_COLUMNS = ["sale_date", "day", "user_id", "user_name", "creator_id", "creator_name", "cents"]

    def __init__(self, db: Session) -> None:
        self.db = db

    def sales_frame(self, period: Period, user_id: int | None = None) -> pd.DataFrame:
        sales = crud.sales_in_period(self.db, period, user_id=user_id)
        rows = [
            {
                "sale_date": sale.sale_date,
                "day": sale.sale_date.date(),
                "user_id": sale.user_id,
                "user_name": sale.user.name if sale.user else "",
                "creator_id": sale.creator_id,
                "creator_name": sale.creator.name if sale.creator else "",
                "cents": _to_cents(sale.amount),
            }
            for sale in sales
        ]
        return pd.DataFrame(rows, columns=self.FRAME_COLUMNS)

    def month_over_month(self, year: int, month: int, user_id: int | None = None) -> dict[str, Any]:
        current_df = self.sales_frame(month_period(year, month), user_id=user_id)
        previous_df = self.sales_frame(month_period(*previous_month(year, month)), user_id=user_id)

        current_amount = _from_cents(current_df["cents"].sum())
        previous_amount = _from_cents(previous_df["cents"].sum())
        current_count = int(len(current_df))
        previous_count = int(len(previous_df))
        return {
            "year": year,
            "month": month,
            "current_amount": current_amount,
            "previous_amount": previous_amount,
            "amount_change": current_amount - previous_amount,
            "amount_change_percent": _change_percent(current_amount, previous_amount),
            "current_count": current_count,
            "previous_count": previous_count,
            "count_change": current_count - previous_count,
            "count_change_percent": _change_percent(Decimal(current_count), Decimal(previous_count)),
        }

    def leaderboard(
        self,
        start: date,
        end: date,
        limit: int = 10,
        user_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Chatters ranked by sales amount; ``user_id`` narrows the output to one entry."""

        df = self.sales_frame(date_range_period(start, end))
        if df.empty:
            return []
        grouped = (
            df.groupby(["user_id", "user_name"], as_index=False)
            .agg(cents=("cents", "sum"), sales_count=("cents", "size"))
            .sort_values(["cents", "sales_count", "user_name"], ascending=[False, False, True])
            .reset_index(drop=True)
        )
        grouped["rank"] = grouped.index + 1
        if user_id is not None:
            grouped = grouped[grouped["user_id"] == user_id]
        else:
            grouped = grouped.head(limit)
        return [
            {
                "rank": int(row.rank),
                "user_id": int(row.user_id),
                "name": row.user_name,
                "amount": _from_cents(row.cents),
                "count": int(row.sales_count),
            }
            for row in grouped.itertuples(index=False)
        ]

    def daily_revenue_by_creator(
        self, start: date, end: date, user_id: int | None = None
    ) -> list[dict[str, Any]]:
        df = self.sales_frame(date_range_period(start, end), user_id=user_id)
        if df.empty:
            return []
        grouped = (
            df.groupby(["day", "creator_id", "creator_name"], as_index=False)["cents"]
            .sum()
            .sort_values(["day", "creator_name"])
        )
        return [
            {
                "date": row.day,
                "creator_id": int(row.creator_id),
                "creator_name": row.creator_name,
                "amount": _from_cents(row.cents),
            }
            for row in grouped.itertuples(index=False)
        ]

    def available_years(self, user_id: int | None = None) -> list[int]:
        years = crud.sale_years(self.db, user_id=user_id)
        return years or [date.today().year]

    def recap_frames(self, year: int, month: int, cumulative: bool = False) -> tuple[pd.DataFrame, pd.DataFrame]:
        """Admin recap as two frames (chatters, creators) for the command line."""

        recap = DashboardService(self.db).admin_recap(year, month, cumulative)
        chatters = pd.DataFrame(
            recap["chatter_revenue"],
            columns=["name", "role", "revenue", "commission", "total_base", "fixed_salary", "total_retribution"],
        )
        creators = pd.DataFrame(
            recap["creator_financials"],
            columns=[
                "creator_name",
                "compensation_type",
                "total_sales_amount",
                "creator_earnings",
                "net_revenue",
                "marketing_costs",
                "tool_costs",
                "other_costs",
                "custom_costs_total",
                "agency_profit",
            ],
        )
        return chatters, creators
