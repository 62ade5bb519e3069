import pytest

from app.core.constants import ROLE_MANAGER


@pytest.fixture()
def people(make_user):
    return {
        "manager": make_user("Mona", role=ROLE_MANAGER),
        "alice": make_user("Alice"),
        "bob": make_user("Bob"),
    }


def test_end_time_follows_the_slot(act_as, people):
    resp = act_as(people["manager"]).post(
        "/shifts", json={"userId": people["alice"].id, "date": "2026-03-16", "startTime": "20:00"}
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["endTime"] == "01:00"
    assert data["date"] == "2026-03-16"
    assert data["user"]["name"] == "Alice"


def test_mismatched_end_time_rejected(act_as, people):
    resp = act_as(people["manager"]).post(
        "/shifts",
        json={"userId": people["alice"].id, "date": "2026-03-16", "startTime": "09:00", "endTime": "12:00"},
    )
    assert resp.status_code == 422


def test_unknown_slot_rejected(act_as, people):
    resp = act_as(people["manager"]).post(
        "/shifts", json={"userId": people["alice"].id, "date": "2026-03-16", "startTime": "10:00"}
    )
    assert resp.status_code == 422


def test_duplicate_shift_conflicts(act_as, people):
    client = act_as(people["manager"])
    body = {"userId": people["alice"].id, "date": "2026-03-16", "startTime": "09:00"}
    assert client.post("/shifts", json=body).status_code == 201
    resp = client.post("/shifts", json=body)
    assert resp.status_code == 409


def test_chatters_read_but_do_not_plan(act_as, people):
    body = {"userId": people["alice"].id, "date": "2026-03-16", "startTime": "09:00"}
    assert act_as(people["alice"]).post("/shifts", json=body).status_code == 403
    act_as(people["manager"]).post("/shifts", json=body)
    assert len(act_as(people["alice"]).get("/shifts").json()) == 1


def test_moving_a_shift_rederives_end_time(act_as, people):
    client = act_as(people["manager"])
    shift = client.post(
        "/shifts", json={"userId": people["alice"].id, "date": "2026-03-16", "startTime": "09:00"}
    ).json()
    resp = client.patch(f"/shifts/{shift['id']}", json={"startTime": "01:00"})
    assert resp.status_code == 200
    assert resp.json()["endTime"] == "09:00"


def test_auto_generate_from_template(act_as, people):
    client = act_as(people["manager"])
    alice, bob = people["alice"].id, people["bob"].id
    body = {
        # a Wednesday; generation starts on that week's Monday
        "weekStartDate": "2026-03-18",
        "template": {"0": {"09:00": [alice]}, "2": {"14:30": [alice, bob]}},
        "weeks": 2,
    }
    first = client.post("/shifts/auto-generate", json=body).json()
    assert first == {"created": 6, "skipped": 0, "replaced": 0}

    dates = sorted({row["date"] for row in client.get("/shifts").json()})
    assert dates == ["2026-03-16", "2026-03-18", "2026-03-23", "2026-03-25"]

    again = client.post("/shifts/auto-generate", json=body).json()
    assert again == {"created": 0, "skipped": 6, "replaced": 0}

    body["overwriteExisting"] = True
    replaced = client.post("/shifts/auto-generate", json=body).json()
    assert replaced == {"created": 6, "skipped": 0, "replaced": 6}
    assert len(client.get("/shifts").json()) == 6


def test_auto_generate_rejects_bad_weekday(act_as, people):
    resp = act_as(people["manager"]).post(
        "/shifts/auto-generate",
        json={"weekStartDate": "2026-03-16", "template": {"7": {"09:00": [people["alice"].id]}}},
    )
    assert resp.status_code == 422


def test_clear_range_and_filters(act_as, people):
    client = act_as(people["manager"])
    for day in ("2026-03-16", "2026-03-17", "2026-03-30"):
        client.post("/shifts", json={"userId": people["bob"].id, "date": day, "startTime": "14:30"})

    week = client.get("/shifts", params={"start_date": "2026-03-16", "end_date": "2026-03-22"}).json()
    assert len(week) == 2

    resp = client.post("/shifts/clear", json={"startDate": "2026-03-16", "endDate": "2026-03-22"})
    assert resp.json() == {"deleted": 2}
    assert [row["date"] for row in client.get("/shifts").json()] == ["2026-03-30"]
