"""Integration tests for the schedule REST API and WebSocket snapshot."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.websocket import router as ws_router
from schedule.router import router as schedule_router

BASE = "/api/schedule"


@pytest.fixture
def app(store, gate):
    app = FastAPI()
    app.include_router(schedule_router)
    app.include_router(ws_router)
    app.state.event_store = store
    app.state.access_gate = gate
    return app


@pytest.fixture
def client(app, row_store, make_row):
    row_store.rows = [
        make_row(id="evt-a", start_date="2024-06-01T02:00:00.000Z", impact="High"),
        make_row(id="evt-b", start_date="2024-06-02T02:00:00.000Z", system="XL"),
    ]
    with TestClient(app) as client:
        assert client.post(f"{BASE}/refresh").status_code == 200
        yield client


def login(client):
    resp = client.post(f"{BASE}/access/login", json={"passcode": "6666"})
    assert resp.status_code == 200


class TestViews:

    def test_events_listed_chronologically(self, client):
        resp = client.get(f"{BASE}/events")
        assert resp.status_code == 200
        assert [e["id"] for e in resp.json()] == ["evt-a", "evt-b"]

    def test_dashboard(self, client):
        body = client.get(f"{BASE}/dashboard").json()
        assert [g["key"] for g in body["groups"]] == ["2024-06-01", "2024-06-02"]
        assert body["groups"][0]["label"] == "Sabtu, 1 Juni 2024"
        assert body["stats"]["total_machines"] == 2
        assert body["stats"]["high_impact"] == 1
        assert body["stats"]["active_windows"] == 2
        assert body["is_authenticated"] is False
        assert body["error_message"] == ""

    def test_machines(self, client):
        machines = client.get(f"{BASE}/machines").json()
        assert "CX" in machines and "SM74" in machines

    def test_refresh_failure(self, client, row_store):
        row_store.fail_on.add("select")
        resp = client.post(f"{BASE}/refresh")
        assert resp.status_code == 502
        body = client.get(f"{BASE}/dashboard").json()
        assert body["error_message"] == "Gagal memuat data dari Supabase."
        assert sum(len(g["items"]) for g in body["groups"]) == 2


class TestAccess:

    def test_writes_need_login(self, client, row_store):
        resp = client.post(f"{BASE}/events", json={"title": "x", "system": "CX"})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Silakan login terlebih dahulu."
        assert row_store.writes == []

    def test_wrong_passcode(self, client):
        resp = client.post(f"{BASE}/access/login", json={"passcode": "0000"})
        assert resp.status_code == 401
        assert client.get(f"{BASE}/access").json()["authenticated"] is False

    def test_login_logout(self, client):
        login(client)
        assert client.get(f"{BASE}/access").json()["authenticated"] is True
        client.post(f"{BASE}/access/logout")
        assert client.get(f"{BASE}/access").json()["authenticated"] is False


class TestWrites:

    def test_create_validation_failure(self, client, row_store):
        login(client)
        resp = client.post(f"{BASE}/events", json={"title": "", "system": "CX"})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Detail pekerjaan dan nama mesin wajib diisi."
        assert row_store.writes == []

    def test_create(self, client, row_store):
        login(client)
        resp = client.post(
            f"{BASE}/events",
            json={"title": "Ganti oli", "system": "CX", "work_date": "2024-06-03"},
        )
        assert resp.status_code == 201

        created = [e for e in resp.json() if e["id"] == "evt-1"]
        assert len(created) == 1
        assert created[0]["description"] == "Ganti oli"
        assert created[0]["start_date"] == "2024-06-03T02:00:00.000Z"
        assert created[0]["end_date"] == "2024-06-03T02:00:00.000Z"

    def test_create_write_failure(self, client, row_store):
        login(client)
        row_store.fail_on.add("insert")
        resp = client.post(f"{BASE}/events", json={"title": "Ganti oli", "system": "CX"})
        assert resp.status_code == 502
        assert resp.json()["detail"] == "Gagal menyimpan jadwal. Coba lagi."

    def test_update(self, client, row_store):
        login(client)
        resp = client.put(f"{BASE}/events/evt-b", json={"impact": "Low", "owner": "Sari"})
        assert resp.status_code == 200
        updated = next(e for e in resp.json() if e["id"] == "evt-b")
        assert updated["impact"] == "Low"
        assert updated["owner"] == "Sari"
        assert updated["system"] == "XL"

    def test_update_unknown(self, client):
        login(client)
        assert client.put(f"{BASE}/events/nope", json={"title": "x"}).status_code == 404

    def test_toggle(self, client):
        login(client)
        resp = client.post(f"{BASE}/events/evt-a/toggle")
        assert resp.status_code == 200
        toggled = next(e for e in resp.json() if e["id"] == "evt-a")
        assert toggled["status"] == "Completed"

        body = client.get(f"{BASE}/dashboard", params={"split_completed": True}).json()
        assert [e["id"] for e in body["completed"]] == ["evt-a"]

    def test_delete_needs_confirmation(self, client, row_store):
        login(client)
        resp = client.delete(f"{BASE}/events/evt-a")
        assert resp.status_code == 409
        assert row_store.writes == []

        resp = client.delete(f"{BASE}/events/evt-a", params={"confirm": True})
        assert resp.status_code == 204
        assert [e["id"] for e in client.get(f"{BASE}/events").json()] == ["evt-b"]


def test_websocket_snapshot(client):
    with client.websocket_connect("/ws/schedule") as ws:
        message = ws.receive_json()
        assert message["type"] == "snapshot"
        assert message["data"]["stats"]["total"] == 2
        ws.send_text("ping")
        assert ws.receive_text() == "pong"
