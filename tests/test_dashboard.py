from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.constants import ROLE_ADMIN, ROLE_MANAGER
from app.models import MonthlyFinancial, Payment


@pytest.fixture()
def march(db_session, make_user, make_creator, make_sale):
    chatter = make_user("Alice", commission_percent="10", fixed_salary="300")
    manager = make_user("Mona", role=ROLE_MANAGER)
    admin = make_user("Ada", role=ROLE_ADMIN)
    luna = make_creator("Luna", revenue_share_percent="50")

    make_sale(chatter, luna, "600", datetime(2026, 3, 2, 10, 0))
    make_sale(chatter, luna, "400", datetime(2026, 3, 20, 22, 30))
    make_sale(chatter, luna, "0", datetime(2026, 3, 20, 23, 0), sale_type="BASE", base_amount="25")
    # outside the month
    make_sale(chatter, luna, "999", datetime(2026, 4, 1, 0, 0))

    db_session.add(
        MonthlyFinancial(
            creator_id=luna.id,
            year=2026,
            month=3,
            marketing_costs=Decimal("50"),
            tool_costs=Decimal("20"),
            other_costs=Decimal("10"),
        )
    )
    db_session.add(
        Payment(user_id=chatter.id, amount=Decimal("100"), payment_date=date(2026, 3, 31), payment_method="CRYPTO")
    )
    db_session.commit()
    return {"chatter": chatter, "manager": manager, "admin": admin, "luna": luna}


def test_chatter_dashboard_month(act_as, march):
    resp = act_as(march["chatter"]).get("/dashboard/chatter", params={"year": 2026, "month": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalSales"] == 1000.0
    # 10% of 1000 + 25 BASE + 300 fixed salary
    assert data["totalCommissions"] == 425.0
    assert data["saleCount"] == 3
    assert len(data["daily"]) == 31
    assert data["daily"][1]["sales"] == 600.0
    assert round(sum(point["fixedSalary"] for point in data["daily"]), 2) == 300.0


def test_chatter_detail_includes_payments_and_balance(act_as, march):
    chatter = march["chatter"]
    resp = act_as(march["admin"]).get(f"/dashboard/chatter/{chatter.id}", params={"year": 2026, "month": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["name"] == "Alice"
    assert data["commission"] == 100.0
    assert data["baseEarnings"] == 25.0
    assert data["fixedSalary"] == 300.0
    assert data["totalRetribution"] == 425.0
    assert data["totalPayments"] == 100.0
    assert data["amountOwed"] == 325.0
    assert [payment["amount"] for payment in data["payments"]] == [100.0]


def test_chatter_cannot_view_someone_elses_detail(act_as, march):
    resp = act_as(march["chatter"]).get(f"/dashboard/chatter/{march['manager'].id}")
    assert resp.status_code == 403


def test_manager_cannot_view_chatter_detail(act_as, march):
    resp = act_as(march["manager"]).get(f"/dashboard/chatter/{march['chatter'].id}")
    assert resp.status_code == 403


def test_chatter_can_view_own_detail(act_as, march):
    chatter = march["chatter"]
    resp = act_as(chatter).get(f"/dashboard/chatter/{chatter.id}", params={"year": 2026, "month": 3})
    assert resp.status_code == 200


def test_admin_recap_month(act_as, march):
    resp = act_as(march["admin"]).get("/dashboard/admin", params={"year": 2026, "month": 3})
    assert resp.status_code == 200
    data = resp.json()
    assert data["cumulative"] is False
    assert data["periodStart"] == "2026-03-01"
    assert data["periodEnd"] == "2026-03-31"
    assert data["totalSales"] == 1000.0
    assert data["totalCommissions"] == 425.0
    assert data["totalPayments"] == 100.0
    assert data["totalOwedToChatters"] == 325.0
    assert data["totalNetRevenue"] == 500.0
    assert data["totalAgencyProfit"] == 420.0

    rows = {row["name"]: row for row in data["chatterRevenue"]}
    assert rows["Alice"]["revenue"] == 1000.0
    assert rows["Alice"]["totalRetribution"] == 425.0
    assert rows["Mona"]["totalRetribution"] == 0.0

    (luna,) = data["creatorFinancials"]
    assert luna["creatorEarnings"] == 500.0
    assert luna["netRevenue"] == 500.0
    assert luna["agencyProfit"] == 420.0
    assert luna["chatterCommissions"] == 125.0


def test_admin_recap_cumulative_covers_the_year(act_as, march):
    data = act_as(march["admin"]).get(
        "/dashboard/admin", params={"year": 2026, "month": 3, "cumulative": True}
    ).json()
    assert data["periodStart"] == "2026-01-01"
    assert data["periodEnd"] == "2026-12-31"
    assert data["totalSales"] == 1999.0
    # commission on 1999 + BASE + twelve months of salary
    assert data["totalCommissions"] == pytest.approx(199.9 + 25 + 3600)


def test_admin_recap_is_admin_only(act_as, march):
    assert act_as(march["manager"]).get("/dashboard/admin").status_code == 403
    assert act_as(march["chatter"]).get("/dashboard/admin").status_code == 403


def test_sales_stats_scoped_to_chatter(act_as, march, make_user, make_sale):
    other = make_user("Bob")
    make_sale(other, march["luna"], "70", datetime(2026, 3, 5, 12, 0))

    chatter_stats = act_as(march["chatter"]).get(
        "/dashboard/sales-stats", params={"year": 2026, "month": 3}
    ).json()
    assert chatter_stats["count"] == 3
    assert chatter_stats["totalAmount"] == 1000.0

    manager_stats = act_as(march["manager"]).get(
        "/dashboard/sales-stats", params={"year": 2026, "month": 3}
    ).json()
    assert manager_stats["count"] == 4
