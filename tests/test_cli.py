from decimal import Decimal

import pandas as pd
import pytest

from agency import parse_args, render_recap


def _frames():
    chatters = pd.DataFrame(
        [
            {
                "name": "Alice",
                "role": "CHATTER",
                "revenue": Decimal("1000"),
                "commission": Decimal("100.005"),
                "total_base": Decimal("0"),
                "fixed_salary": Decimal("0"),
                "total_retribution": Decimal("100.005"),
            }
        ]
    )
    creators = pd.DataFrame(columns=["creator_name", "agency_profit"])
    return chatters, creators


def test_parse_recap_arguments():
    args = parse_args(["recap", "--month", "2026-03", "--ytd", "--format", "csv"])
    assert args.command == "recap"
    assert args.month == "2026-03"
    assert args.ytd is True
    assert args.format == "csv"


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_table_rendering_rounds_money():
    chatters, creators = _frames()
    text = render_recap(chatters, creators)
    assert text.startswith("Chatters")
    assert "100.01" in text
    assert "No active creators." in text


def test_csv_rendering():
    chatters, creators = _frames()
    text = render_recap(chatters, creators, "csv")
    assert text.splitlines()[0] == "name,role,revenue,commission,total_base,fixed_salary,total_retribution"
    assert "Alice,CHATTER,1000.00,100.01,0.00,0.00,100.01" in text
