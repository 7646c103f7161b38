import logging
import os
import re
import time
from unittest.mock import MagicMock

import mongomock
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

# --- 1. ENV setzen ---
os.environ["TESTING"] = "1"

# --- 2. App importieren ---
import database
from app import LOG_FORMAT, app
from database import get_slots_collection

client = TestClient(app)

@pytest.fixture(autouse=True)
def clear_overrides():
    yield
    app.dependency_overrides.clear()

# ======================================================
# Routing / 404
# ======================================================
def test_unknown_api_route():
    response = client.get("/api/unknown")
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}

def test_unknown_static_file():
    response = client.get("/does-not-exist.js")
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}

def test_unsupported_method_is_not_found():
    response = client.patch("/api/slots", json={})
    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}

def test_responses_are_indented():
    response = client.get("/api/unknown")
    assert response.text == '{\n   "error": "Not found"\n}'

# ======================================================
# Static files
# ======================================================
def test_index_is_served():
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<h1>Slots</h1>" in response.text

def test_static_file_by_name():
    response = client.get("/index.html")
    assert response.status_code == 200

# ======================================================
# Middleware
# ======================================================
def test_cors_allows_any_origin():
    collection = mongomock.MongoClient().test_calendar.cors_slots
    app.dependency_overrides[get_slots_collection] = lambda: collection

    response = client.get("/api/slots", headers={"Origin": "http://calendar.example.org"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"

def test_cors_preflight():
    response = client.options(
        "/api/slots/000000000000000000000000",
        headers={
            "Origin": "http://calendar.example.org",
            "Access-Control-Request-Method": "DELETE",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"

def test_requests_are_logged(caplog):
    before = time.time()
    with caplog.at_level(logging.INFO, logger="app"):
        client.get("/api/unknown?x=1")
    after = time.time()

    records = [r for r in caplog.records if r.getMessage() == "GET /api/unknown?x=1 from testclient"]
    assert len(records) == 1
    assert before <= records[0].created <= after

    line = logging.Formatter(LOG_FORMAT).format(records[0])
    assert re.match(
        r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3}\] INFO app: GET /api/unknown\?x=1 from testclient$",
        line,
    )

# ======================================================
# Global error handler
# ======================================================
def test_unexpected_error_returns_generic_500():
    def broken_dependency():
        raise RuntimeError("secret internals")

    app.dependency_overrides[get_slots_collection] = broken_dependency
    safe_client = TestClient(app, raise_server_exceptions=False)

    response = safe_client.get("/api/slots")
    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred"}
    assert "secret" not in response.text

def test_unexpected_error_keeps_cors_header():
    def broken_dependency():
        raise RuntimeError("secret internals")

    app.dependency_overrides[get_slots_collection] = broken_dependency
    safe_client = TestClient(app, raise_server_exceptions=False)

    response = safe_client.get("/api/slots", headers={"Origin": "http://calendar.example.org"})
    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred"}
    assert response.headers["access-control-allow-origin"] == "*"

# ======================================================
# Lifespan
# ======================================================
def test_lifespan_connects_store():
    with TestClient(app) as lifespan_client:
        slot_id = lifespan_client.post("/api/slots", json={"date": "2024-05-01", "startTime": "09:00"}).json()["id"]
        data = lifespan_client.get("/api/slots").json()
        assert app.state.db.name == database.DB_NAME

    assert slot_id in [slot["_id"] for slot in data]

def test_startup_fails_without_store(monkeypatch):
    broken_client = MagicMock()
    broken_client.server_info.side_effect = ServerSelectionTimeoutError("no servers found")
    monkeypatch.setattr("database.create_client", lambda: broken_client)

    with pytest.raises(ServerSelectionTimeoutError):
        with TestClient(app):
            pass

    broken_client.close.assert_called_once()
