import logging

from fastapi.testclient import TestClient

from app import __version__
from app.core.constants import ROLE_ADMIN, ROLE_MANAGER
from app.database import get_session
from app.main import app


def test_login_sets_session_cookie(client, make_user):
    make_user("Alice")
    resp = client.post("/login", data={"email": "ALICE@agency.test", "password": "secret"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@agency.test"
    assert "user_id" in resp.cookies

    me = client.get("/me")
    assert me.status_code == 200
    assert me.json()["name"] == "Alice"

    assert client.post("/logout").status_code == 204


def test_wrong_password_is_rejected(client, make_user):
    make_user("Alice")
    resp = client.post("/login", data={"email": "alice@agency.test", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_inactive_user_cannot_log_in(client, make_user):
    make_user("Gone", is_active=False)
    resp = client.post("/login", data={"email": "gone@agency.test", "password": "secret"})
    assert resp.status_code == 401


def test_requests_without_session_are_401(client):
    resp = client.get("/sales")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Not authenticated"}


def test_health_reports_in_flight_requests(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == __version__
    assert data["inFlight"] >= 1


def test_unexpected_errors_are_logged_and_return_500(caplog):
    def broken_session():
        raise RuntimeError("database is gone")
        yield

    app.dependency_overrides[get_session] = broken_session
    try:
        with caplog.at_level(logging.ERROR, logger="app.main"):
            resp = TestClient(app, raise_server_exceptions=False).get("/creators")
    finally:
        app.dependency_overrides.pop(get_session, None)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
    assert any(record.exc_info and "unexpected error" in record.getMessage() for record in caplog.records)


def test_admin_creates_and_deactivates_users(act_as, make_user):
    admin = act_as(make_user("Ada", role=ROLE_ADMIN))
    resp = admin.post(
        "/users",
        json={
            "email": "Carla@Agency.test",
            "name": "Carla",
            "password": "hunter22",
            "role": "chatter",
            "commissionPercent": 15,
        },
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["email"] == "carla@agency.test"
    assert created["role"] == "CHATTER"
    assert created["commissionPercent"] == 15.0

    duplicate = admin.post(
        "/users", json={"email": "carla@agency.test", "name": "Carla 2", "password": "hunter22"}
    )
    assert duplicate.status_code == 409

    updated = admin.patch(f"/users/{created['id']}", json={"fixedSalary": 500})
    assert updated.json()["fixedSalary"] == 500.0

    removed = admin.delete(f"/users/{created['id']}")
    assert removed.status_code == 200
    assert removed.json()["isActive"] is False


def test_user_management_permissions(act_as, make_user):
    manager = make_user("Mona", role=ROLE_MANAGER)
    chatter = make_user("Alice")

    assert act_as(manager).get("/users").status_code == 200
    body = {"email": "x@agency.test", "name": "X", "password": "secret"}
    assert act_as(manager).post("/users", json=body).status_code == 403
    assert act_as(chatter).get("/users").status_code == 403


def test_invalid_role_rejected(act_as, make_user):
    admin = act_as(make_user("Ada", role=ROLE_ADMIN))
    resp = admin.post(
        "/users", json={"email": "y@agency.test", "name": "Y", "password": "secret", "role": "OWNER"}
    )
    assert resp.status_code == 422
