"""Agency command line tools.

Prints the monthly (or year-to-date) admin recap as a table or CSV and
bootstraps admin accounts without going through the web application.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from app.core.formatting import format_display_date, round_money
from app.core.periods import dashboard_period, parse_month
from app.database import SessionLocal, init_db
from app.errors import AppError
from app.services import AnalyticsService


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(description="Agency administration tools.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    recap = subparsers.add_parser("recap", help="Print chatter retribution and creator financials.")
    recap.add_argument("--month", required=True, help="Target month in YYYY-MM format.")
    recap.add_argument(
        "--ytd",
        action="store_true",
        help="Cover the whole calendar year of the target month instead of the single month.",
    )
    recap.add_argument("--format", choices=["table", "csv"], default="table", help="Output format (default: table).")
    recap.add_argument("--out", help="Directory to write chatters/creators CSV files instead of stdout.")

    admin = subparsers.add_parser("create-admin", help="Create the bootstrap admin when none exists.")
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)
    return parser.parse_args(argv)


def _money_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    rounded = df.copy()
    for column in columns:
        if column in rounded.columns:
            rounded[column] = rounded[column].map(round_money)
    return rounded


def render_recap(chatters: pd.DataFrame, creators: pd.DataFrame, output: str = "table") -> str:
    """Render both recap frames as a single text block."""

    chatters = _money_columns(chatters, ["revenue", "commission", "total_base", "fixed_salary", "total_retribution"])
    creators = _money_columns(
        creators,
        [
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
    if output == "csv":
        return chatters.to_csv(index=False) + "\n" + creators.to_csv(index=False)

    parts = ["Chatters"]
    parts.append(chatters.to_string(index=False) if not chatters.empty else "No active chatters.")
    parts.append("")
    parts.append("Creators")
    parts.append(creators.to_string(index=False) if not creators.empty else "No active creators.")
    return "\n".join(parts)


def run_recap(args: argparse.Namespace) -> None:
    try:
        year, month = parse_month(args.month)
    except AppError as exc:
        raise SystemExit(exc.message) from exc

    init_db()
    session = SessionLocal()
    try:
        chatters, creators = AnalyticsService(session).recap_frames(year, month, cumulative=args.ytd)
    finally:
        session.close()

    if args.out:
        out_dir = Path(args.out)
        out_dir.mkdir(parents=True, exist_ok=True)
        suffix = f"{year:04d}_{month:02d}{'_ytd' if args.ytd else ''}"
        chatters.to_csv(out_dir / f"chatters_{suffix}.csv", index=False)
        creators.to_csv(out_dir / f"creators_{suffix}.csv", index=False)
        print(f"Wrote {len(chatters)} chatter rows and {len(creators)} creator rows to {out_dir}.")
        return
    if args.format == "table":
        period = dashboard_period(year, month, cumulative=args.ytd)
        print(f"Recap {format_display_date(period.start)} to {format_display_date(period.end)}\n")
    print(render_recap(chatters, creators, args.format))


def run_create_admin(args: argparse.Namespace) -> None:
    from app import auth, models  # noqa: F401
    from app.database import Base, engine, ensure_admin

    Base.metadata.create_all(bind=engine, checkfirst=True)
    session = SessionLocal()
    try:
        admin = ensure_admin(session, email=args.email, password=args.password)
        if admin.email != args.email.strip().lower():
            print(f"An admin already exists: {admin.email}", file=sys.stderr)
            return
        print(f"Admin ready: {admin.email}")
    finally:
        session.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point."""

    args = parse_args(argv)
    if args.command == "recap":
        run_recap(args)
    elif args.command == "create-admin":
        run_create_admin(args)


if __name__ == "__main__":
    main()
