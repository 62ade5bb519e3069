from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app import crud
from app.core.constants import ROLE_ADMIN, ROLE_MANAGER
from app.errors import ForbiddenError, ValidationError
from app.models import Sale
from app.schemas import SaleCreate, SaleUpdate


@pytest.fixture()
def team(make_user, make_creator):
    return {
        "chatter": make_user("Alice", commission_percent="10"),
        "other": make_user("Bob", commission_percent="20"),
        "manager": make_user("Mona", role=ROLE_MANAGER),
        "admin": make_user("Ada", role=ROLE_ADMIN),
        "creator": make_creator("Luna"),
    }


def _sale_body(creator, **extra):
    body = {"creatorId": creator.id, "amount": 100, "saleType": "PPV"}
    body.update(extra)
    return body


def test_live_sale_is_online_and_editable(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json=_sale_body(team["creator"]))
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "ONLINE"
    assert data["userId"] == team["chatter"].id
    assert data["creatorName"] == "Luna"
    assert data["amount"] == 100.0
    assert data["editState"] == "EDITABLE_BY_OWNER"
    assert data["canEdit"] is True


def test_backdated_sale_is_offline_and_locked(act_as, team):
    client = act_as(team["chatter"])
    ten_days_ago = (datetime.now() - timedelta(days=10)).replace(microsecond=0)
    resp = client.post("/sales", json=_sale_body(team["creator"], saleDate=ten_days_ago.isoformat()))
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "OFFLINE"
    assert data["editState"] == "LOCKED_FOR_OWNER"
    assert data["canEdit"] is False


def test_base_sale_with_zero_amount_is_accepted(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json=_sale_body(team["creator"], amount=0, baseAmount=20, saleType="BASE"))
    assert resp.status_code == 201
    assert resp.json()["baseAmount"] == 20.0


def test_zero_amount_rejected_for_regular_sale(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json=_sale_body(team["creator"], amount=0))
    assert resp.status_code == 422


def test_unknown_sale_type_rejected(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json=_sale_body(team["creator"], saleType="GIFT"))
    assert resp.status_code == 422


def test_chatter_cannot_log_for_someone_else(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json=_sale_body(team["creator"], userId=team["other"].id))
    assert resp.status_code == 403


def test_manager_logs_sale_for_chatter(act_as, team):
    client = act_as(team["manager"])
    resp = client.post("/sales", json=_sale_body(team["creator"], userId=team["chatter"].id))
    assert resp.status_code == 201
    assert resp.json()["userId"] == team["chatter"].id


def test_sale_for_unknown_creator_is_404(act_as, team):
    client = act_as(team["chatter"])
    resp = client.post("/sales", json={"creatorId": 999, "amount": 10, "saleType": "TIP"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Creator not found"


def test_chatter_only_sees_own_sales(act_as, team):
    act_as(team["chatter"]).post("/sales", json=_sale_body(team["creator"]))
    act_as(team["other"]).post("/sales", json=_sale_body(team["creator"], amount=50))

    client = act_as(team["chatter"])
    resp = client.get("/sales", params={"user_id": team["other"].id})
    assert resp.status_code == 200
    page = resp.json()
    assert page["total"] == 1
    assert [item["userId"] for item in page["items"]] == [team["chatter"].id]

    manager_page = act_as(team["manager"]).get("/sales").json()
    assert manager_page["total"] == 2


def test_chatter_cannot_open_another_chatters_sale(act_as, team):
    sale_id = act_as(team["other"]).post("/sales", json=_sale_body(team["creator"])).json()["id"]
    resp = act_as(team["chatter"]).get(f"/sales/{sale_id}")
    assert resp.status_code == 403


def test_sale_list_pagination(act_as, team):
    client = act_as(team["chatter"])
    for amount in (10, 20, 30):
        client.post("/sales", json=_sale_body(team["creator"], amount=amount))
    page = client.get("/sales", params={"page": 2, "limit": 2}).json()
    assert page["total"] == 3
    assert page["pages"] == 2
    assert len(page["items"]) == 1


def test_invalid_status_filter_returns_400(act_as, team):
    resp = act_as(team["manager"]).get("/sales", params={"status": "PENDING"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid sale filters"
    assert resp.json()["errors"]


def test_owner_edits_recent_sale_without_changing_status(act_as, team):
    client = act_as(team["chatter"])
    sale = client.post("/sales", json=_sale_body(team["creator"])).json()
    resp = client.patch(f"/sales/{sale['id']}", json={"amount": 150, "note": "fixed typo"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["amount"] == 150.0
    assert data["note"] == "fixed typo"
    assert data["status"] == "ONLINE"


def test_owner_cannot_edit_after_window(act_as, team):
    client = act_as(team["chatter"])
    old = (datetime.now() - timedelta(days=2)).replace(microsecond=0)
    sale = client.post("/sales", json=_sale_body(team["creator"], saleDate=old.isoformat())).json()
    resp = client.patch(f"/sales/{sale['id']}", json={"amount": 150})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "The 24-hour edit window for this sale has closed"

    manager_resp = act_as(team["manager"]).patch(f"/sales/{sale['id']}", json={"amount": 150})
    assert manager_resp.status_code == 200


def test_reassignment_is_manager_only(act_as, team):
    sale = act_as(team["chatter"]).post("/sales", json=_sale_body(team["creator"])).json()

    resp = act_as(team["chatter"]).patch(f"/sales/{sale['id']}", json={"userId": team["other"].id})
    assert resp.status_code == 403

    resp = act_as(team["manager"]).patch(f"/sales/{sale['id']}", json={"userId": team["other"].id})
    assert resp.status_code == 200
    assert resp.json()["userId"] == team["other"].id
    assert resp.json()["status"] == "ONLINE"


def test_delete_requires_manager(act_as, team):
    sale = act_as(team["chatter"]).post("/sales", json=_sale_body(team["creator"])).json()
    assert act_as(team["chatter"]).delete(f"/sales/{sale['id']}").status_code == 403
    assert act_as(team["admin"]).delete(f"/sales/{sale['id']}").status_code == 204
    assert act_as(team["admin"]).get(f"/sales/{sale['id']}").status_code == 404


def test_sale_stats_group_by_type_and_status(act_as, team):
    client = act_as(team["chatter"])
    client.post("/sales", json=_sale_body(team["creator"], amount=40, saleType="TIP"))
    client.post("/sales", json=_sale_body(team["creator"], amount=60, saleType="TIP"))
    client.post("/sales", json=_sale_body(team["creator"], amount=0, baseAmount=15, saleType="BASE"))

    today = datetime.now()
    stats = client.get("/sales/stats", params={"year": today.year, "month": today.month}).json()
    assert stats["count"] == 3
    assert stats["totalAmount"] == 100.0
    assert stats["totalBase"] == 15.0
    by_type = {bucket["key"]: bucket for bucket in stats["byType"]}
    assert by_type["TIP"]["count"] == 2
    assert by_type["TIP"]["amount"] == 100.0


# --- storage layer -----------------------------------------------------------


def test_edit_window_boundary_through_crud(db_session, team):
    created = datetime(2026, 3, 10, 12, 0, 0)
    sale = crud.create_sale(
        db_session,
        SaleCreate(creator_id=team["creator"].id, amount=Decimal("10"), sale_type="TIP"),
        team["chatter"],
        now=created,
    )
    assert sale.status == "ONLINE"

    crud.update_sale(
        db_session, sale, SaleUpdate(note="edge"), team["chatter"], now=created + timedelta(hours=24)
    )
    with pytest.raises(ForbiddenError):
        crud.update_sale(
            db_session,
            sale,
            SaleUpdate(note="too late"),
            team["chatter"],
            now=created + timedelta(hours=24, seconds=1),
        )


def test_status_is_frozen_when_date_moves(db_session, team):
    created = datetime(2026, 3, 10, 12, 0, 0)
    sale = crud.create_sale(
        db_session,
        SaleCreate(creator_id=team["creator"].id, amount=Decimal("10"), sale_type="TIP"),
        team["chatter"],
        now=created,
    )
    crud.update_sale(
        db_session,
        sale,
        SaleUpdate(sale_date=datetime(2026, 3, 1, 9, 0)),
        team["manager"],
        now=created,
    )
    assert db_session.get(Sale, sale.id).status == "ONLINE"


def test_edit_cannot_zero_a_regular_sale(db_session, team):
    sale = crud.create_sale(
        db_session,
        SaleCreate(creator_id=team["creator"].id, amount=Decimal("10"), sale_type="TIP"),
        team["chatter"],
    )
    with pytest.raises(ValidationError):
        crud.update_sale(db_session, sale, SaleUpdate(amount=Decimal("0")), team["chatter"])


def test_inactive_user_cannot_receive_sales(db_session, team, make_user):
    gone = make_user("Gone", is_active=False)
    with pytest.raises(ValidationError):
        crud.create_sale(
            db_session,
            SaleCreate(creator_id=team["creator"].id, amount=Decimal("10"), sale_type="TIP", user_id=gone.id),
            team["manager"],
        )


def test_chatter_cannot_date_a_sale_in_the_future(db_session, team):
    now = datetime(2026, 3, 10, 12, 0, 0)
    tomorrow = SaleCreate(
        creator_id=team["creator"].id, amount=Decimal("500"), sale_type="PPV", sale_date=now + timedelta(days=1)
    )
    with pytest.raises(ValidationError):
        crud.create_sale(db_session, tomorrow, team["chatter"], now=now)

    sale = crud.create_sale(db_session, tomorrow, team["manager"], now=now)
    assert sale.status == "OFFLINE"


def test_chatter_cannot_push_sale_date_forward(db_session, team):
    created = datetime(2026, 3, 10, 12, 0, 0)
    sale = crud.create_sale(
        db_session,
        SaleCreate(creator_id=team["creator"].id, amount=Decimal("10"), sale_type="TIP"),
        team["chatter"],
        now=created,
    )
    an_hour_later = created + timedelta(hours=1)
    for moved in (datetime(2027, 1, 1, 0, 0), created + timedelta(minutes=30)):
        with pytest.raises(ValidationError):
            crud.update_sale(db_session, sale, SaleUpdate(sale_date=moved), team["chatter"], now=an_hour_later)

    crud.update_sale(
        db_session, sale, SaleUpdate(sale_date=created - timedelta(hours=2)), team["chatter"], now=an_hour_later
    )
    with pytest.raises(ForbiddenError):
        crud.update_sale(
            db_session, sale, SaleUpdate(amount=Decimal("999")), team["chatter"], now=created + timedelta(days=200)
        )
    assert db_session.get(Sale, sale.id).amount == Decimal("10.00")
