"""
Tests for audit records and the Admin-only audit listing.
"""
import pytest
from fastapi.testclient import TestClient

from auth_server.audit import EVENT_LOGIN_FAIL, EVENT_LOGIN_OK, EVENT_REGISTER, OUTCOME_FAIL
from auth_server.main import app
from auth_server.models import AuditLog
from shop_common.tokens import encode_token


@pytest.fixture
def client(db):
    return TestClient(app)


def _admin_headers():
    return {"Authorization": f"Bearer {encode_token('root', ['Admin'])}"}


def test_login_and_register_are_audited(client, db):
    client.post("/auth/register", json={"username": "kim", "password": "Secret123"})
    client.post("/auth/login", json={"username": "kim", "password": "Secret123"})
    client.post("/auth/login", json={"username": "kim", "password": "wrong-one"})

    events = [(a.event_type, a.outcome) for a in db.query(AuditLog).order_by(AuditLog.id)]
    assert events == [
        (EVENT_REGISTER, "success"),
        (EVENT_LOGIN_OK, "success"),
        (EVENT_LOGIN_FAIL, OUTCOME_FAIL),
    ]


def test_audit_rows_never_hold_secrets(client, db):
    client.post("/auth/register", json={"username": "lou", "password": "Secret123"})
    client.post("/auth/login", json={"username": "lou", "password": "Secret123"})
    for row in db.query(AuditLog):
        values = [row.event_type, row.username, row.ip, row.outcome]
        assert not any(v and "Secret123" in v for v in values)


def test_audit_listing_is_admin_only(client):
    assert client.get("/auth/audit").status_code == 401
    user_headers = {"Authorization": f"Bearer {encode_token('kim', ['User'])}"}
    assert client.get("/auth/audit", headers=user_headers).status_code == 403


def test_audit_listing_filters(client):
    client.post("/auth/register", json={"username": "max", "password": "Secret123"})
    client.post("/auth/login", json={"username": "max", "password": "bad-pass"})
    client.post("/auth/login", json={"username": "max", "password": "Secret123"})

    r = client.get("/auth/audit", headers=_admin_headers())
    assert r.status_code == 200
    rows = r.json()
    assert [row["eventType"] for row in rows] == [EVENT_LOGIN_OK, EVENT_LOGIN_FAIL, EVENT_REGISTER]

    r = client.get("/auth/audit", params={"outcome": "fail"}, headers=_admin_headers())
    assert [row["eventType"] for row in r.json()] == [EVENT_LOGIN_FAIL]
    assert r.json()[0]["username"] == "max"

    r = client.get("/auth/audit", params={"limit": 1}, headers=_admin_headers())
    assert len(r.json()) == 1
