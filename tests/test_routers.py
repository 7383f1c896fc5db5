"""API tests: login, terms, gated lookup and the admin console."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from app import dependencies
from app.config import settings
from app.database import get_store
from app.errors import NotFound, ServiceClosed
from app.main import app
from app.services.access_gate import ServiceWindowMonitor
from app.services.local_state import JsonStateStore
from app.services.lookup_cache import LookupCache, RecentSearches
from app.services.session_service import SessionStore

OPEN_TIME = datetime(2026, 10, 14, 10, 0)     # Wednesday morning
CLOSED_TIME = datetime(2026, 10, 24, 10, 0)   # after the 20th


class FakeStore:
    def __init__(self):
        self.users = {"1001": {"username": "1001", "password": "pw", "allowed_device_id": None}}
        self.customers = {"1002003": {
            "installation_number": "1002003", "name": "Ahmet Yilmaz", "phone": "0532 111 22 33",
            "address": "Ataturk Cad. No:1", "latitude": 41.0082, "longitude": 28.9784,
        }}
        self.inserts = []
        self.upserts = []

    async def select_one(self, table, columns="*", filters=None):
        value = next(iter(filters.values()))[len("eq."):]
        row = (self.users if table == "users" else self.customers).get(value)
        return dict(row) if row else None

    async def select(self, table, columns="*", filters=None, limit=None):
        if table == "users":
            return list(self.users.values())
        if table == "customers":
            return list(self.customers.values())
        return []

    async def probe(self, table):
        return table == "search_logs"

    async def update(self, table, values, filters):
        row = self.users.get(filters["username"][len("eq."):])
        if row is None or row.get("allowed_device_id"):
            return []
        row.update(values)
        return [dict(row)]

    async def insert(self, table, rows):
        self.inserts.append((table, rows))

    async def upsert(self, table, rows, on_conflict):
        self.upserts.append(rows)

    async def delete(self, table, filters):
        pass

    async def count(self, table):
        return len(self.customers)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(store, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_USERNAME", "admin")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "s3cret")
    monkeypatch.setattr(settings, "IMPORT_THROTTLE_SECONDS", 0)
    monkeypatch.setattr(dependencies, "service_window", ServiceWindowMonitor(clock=lambda: OPEN_TIME))

    state = JsonStateStore(str(tmp_path / "server_state.json"))
    cache, recents, sessions = LookupCache(state), RecentSearches(state), SessionStore()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[dependencies.get_sessions] = lambda: sessions
    app.dependency_overrides[dependencies.get_lookup_cache] = lambda: cache
    app.dependency_overrides[dependencies.get_recent_searches] = lambda: recents
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, username="1001", password="pw", device_id="dev-a"):
    resp = client.post("/api/v1/session/login",
                       json={"username": username, "password": password, "device_id": device_id})
    return resp


def auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestStaffFlow:
    def test_login_lookup_and_recents(self, client, store):
        resp = login(client)
        assert resp.status_code == 200
        body = resp.json()
        assert body["terms_required"] is True
        assert body["unrestricted"] is False
        assert store.users["1001"]["allowed_device_id"] == "dev-a"
        headers = auth(body["token"])

        assert client.get("/api/v1/lookup/1002003", headers=headers).status_code == 403

        assert client.post("/api/v1/session/terms/accept", headers=headers).status_code == 200
        resp = client.get("/api/v1/lookup/1002003", headers=headers)
        assert resp.status_code == 200
        view = resp.json()
        assert view["name"] == "Ah*** Yi***"
        assert view["phone_actions"]["call_url"] == "tel:05321112233"
        assert view["cached"] is False
        assert ("search_logs", {"username": "1001", "installation_number": "1002003"}) in store.inserts

        assert client.get("/api/v1/lookup/1002003", headers=headers).json()["cached"] is True
        assert client.get("/api/v1/lookup/recent", headers=headers).json() == {"items": ["1002003"]}

    def test_unknown_installation(self, client, store):
        token = login(client).json()["token"]
        client.post("/api/v1/session/terms/accept", headers=auth(token))
        resp = client.get("/api/v1/lookup/999", headers=auth(token))
        assert resp.status_code == 404
        assert resp.json()["detail"] == NotFound.default_message
        assert store.inserts == []

    def test_other_device_rejected(self, client):
        assert login(client, device_id="dev-a").status_code == 200
        resp = login(client, device_id="dev-b")
        assert resp.status_code == 403

    def test_wrong_password(self, client):
        assert login(client, password="nope").status_code == 401

    def test_closed_window_blocks_lookup(self, client, monkeypatch):
        token = login(client).json()["token"]
        client.post("/api/v1/session/terms/accept", headers=auth(token))
        monkeypatch.setattr(dependencies, "service_window", ServiceWindowMonitor(clock=lambda: CLOSED_TIME))

        resp = client.get("/api/v1/lookup/1002003", headers=auth(token))
        assert resp.status_code == 403
        assert resp.json()["detail"] == ServiceClosed.default_message

    def test_non_bearer_authorization_rejected(self, client):
        token = login(client).json()["token"]
        resp = client.get("/api/v1/session", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401

    def test_decline_terms_logs_out(self, client):
        token = login(client).json()["token"]
        assert client.post("/api/v1/session/terms/decline", headers=auth(token)).status_code == 200
        assert client.get("/api/v1/session", headers=auth(token)).status_code == 401


class TestAdmin:
    def test_requires_admin_session(self, client):
        assert client.get("/api/v1/admin/users").status_code == 401
        staff = login(client).json()["token"]
        assert client.get("/api/v1/admin/users", headers=auth(staff)).status_code == 403

    def test_edit_ends_sessions_of_that_user(self, client):
        staff = login(client).json()["token"]
        admin = login(client, "admin", "s3cret", "").json()["token"]

        resp = client.put("/api/v1/admin/users/1001", headers=auth(admin),
                          json={"username": "1001", "password": "pw", "unrestricted": True})

        assert resp.status_code == 200
        assert client.get("/api/v1/session", headers=auth(staff)).status_code == 401
        assert client.get("/api/v1/session", headers=auth(admin)).status_code == 200

    def test_delete_ends_sessions_of_that_user(self, client):
        staff = login(client).json()["token"]
        admin = login(client, "admin", "s3cret", "").json()["token"]

        assert client.delete("/api/v1/admin/users/1001", headers=auth(admin)).status_code == 200
        assert client.get("/api/v1/session", headers=auth(staff)).status_code == 401

    def test_admin_lists_users(self, client):
        body = login(client, "admin", "s3cret", "").json()
        assert body["is_admin"] is True
        assert body["terms_required"] is False

        users = client.get("/api/v1/admin/users", headers=auth(body["token"])).json()
        assert [u["username"] for u in users] == ["1001"]
        assert users[0]["query_count"] == 0

    def test_import_csv(self, client, store):
        token = login(client, "admin", "s3cret", "").json()["token"]
        csv_text = "installation_number;name;phone\n2001;Ali Veli;0532\n2002;Ayse Kara;0533\n"

        resp = client.post("/api/v1/admin/customers/import", content=csv_text.encode("utf-8"),
                           headers={**auth(token), "Content-Type": "text/csv"})

        assert resp.status_code == 200
        report = resp.json()
        assert (report["total"], report["success"], report["error_count"]) == (2, 2, 0)
        assert [r["installation_number"] for r in store.upserts[0]] == ["2001", "2002"]
        assert "IMPORT COMPLETE." in report["log"]

    def test_import_without_rows(self, client):
        token = login(client, "admin", "s3cret", "").json()["token"]
        resp = client.post("/api/v1/admin/customers/import", content=b"installation_number;name\n",
                           headers={**auth(token), "Content-Type": "text/csv"})
        assert resp.status_code == 400

    def test_export_csv(self, client):
        token = login(client, "admin", "s3cret", "").json()["token"]
        resp = client.get("/api/v1/admin/customers/export", headers=auth(token))
        assert resp.status_code == 200
        assert resp.content.startswith("\ufeff".encode("utf-8"))
        lines = resp.content.decode("utf-8-sig").splitlines()
        assert lines[0] == "Installation No;Name;Phone;Address;Latitude;Longitude"
        assert lines[1].startswith('1002003;"Ahmet Yilmaz";0532 111 22 33;')
        assert "customers_backup_" in resp.headers["content-disposition"]


class TestHealth:
    def test_reports_unconfigured_datastore(self, client, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_URL", None)
        body = client.get("/api/v1/health").json()
        assert body["database"] == "not_configured"
        assert body["status"] == "degraded"
