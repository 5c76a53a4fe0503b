from fastapi import FastAPI
from fastapi.testclient import TestClient

import main
from core.log import safe_extra, sanitize


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_report_requires_username(client):
    res = client.get("/api/report")
    assert res.status_code == 400
    assert res.json() == {"detail": "Username is required"}


def test_report_totals(client, widget):
    headers = {"x-username": "alice"}
    client.post("/api/inventory", json=widget, headers=headers)
    client.post("/api/inventory", json={**widget, "part_number": "B2", "quantity": 2, "purchase_price": 10}, headers=headers)

    res = client.get("/api/report", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["totalValue"] == 45.0
    assert body["totalItems"] == 12
    assert [it["part_number"] for it in body["items"]] == ["A1", "B2"]


def test_client_logs_are_accepted(client):
    res = client.post("/api/logs", json={"level": "error", "message": "render failed", "component": "Table"})
    assert res.status_code == 200
    assert res.json() == {"success": True}


def test_client_log_with_reserved_keys_and_unknown_level(client):
    res = client.post("/api/logs", json={"level": "loud", "msg": "x", "args": [1], "name": "frontend"})
    assert res.status_code == 200


def test_client_log_must_be_an_object(client):
    res = client.post("/api/logs", json=["not", "an", "object"])
    assert res.status_code == 400


def test_unhandled_errors_become_500():
    app = FastAPI()
    app.add_exception_handler(Exception, main.unhandled_exception_handler)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret connection string")

    res = TestClient(app, raise_server_exceptions=False).get("/boom")
    assert res.status_code == 500
    assert res.json() == {"detail": "Internal server error"}


def test_sensitive_values_are_redacted():
    cleaned = sanitize({"username": "alice", "password": "hunter2", "nested": {"token": "abc"}})
    assert cleaned["username"] == "alice"
    assert cleaned["password"] != "hunter2"
    assert cleaned["nested"]["token"] != "abc"


def test_extra_keys_do_not_clash_with_log_records():
    extra = safe_extra({"message": "m", "args": 1, "component": "Table"})
    assert "message" not in extra and "args" not in extra
    assert extra["ctx_message"] == "m"
    assert extra["component"] == "Table"
