"""Tests for the HTTP surface (FastAPI TestClient + in-memory SQLite)."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from room_monitor.routers import get_reading_service


def post_reading(client, lumen=120, suhu=24.5, kelembapan=55):
    return client.post("/sensors", json={"lumen": lumen, "suhu": suhu, "kelembapan": kelembapan})


# =============================================================================
# POST /sensors
# =============================================================================

def test_post_then_get_returns_new_reading_first(client):
    response = post_reading(client)
    assert response.status_code == 200
    assert response.json() == {"message": "Data saved successfully"}

    response = client.get("/sensors")
    assert response.status_code == 200
    first = response.json()[0]
    assert first["nilai_suhu"] == 24.5
    assert first["nilai_lumen"] == 120
    assert first["nilai_kelembapan"] == 55
    assert set(first) == {"id", "timestamp", "nilai_lumen", "nilai_suhu", "nilai_kelembapan"}


def test_post_with_null_field_is_rejected(client):
    post_reading(client)

    response = post_reading(client, suhu=None)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}
    assert len(client.get("/sensors").json()) == 1


@pytest.mark.parametrize("body", [
    {"lumen": 120, "suhu": 24.5},
    {"suhu": 24.5, "kelembapan": 55},
    {},
])
def test_post_with_absent_field_is_rejected(client, body):
    response = client.post("/sensors", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_post_without_body_is_rejected(client):
    response = client.post("/sensors")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_post_accepts_zero_values(client):
    response = post_reading(client, lumen=0, suhu=0, kelembapan=0)

    assert response.status_code == 200
    assert client.get("/sensors").json()[0]["nilai_lumen"] == 0


def test_post_with_non_numeric_value_is_rejected(client):
    response = post_reading(client, suhu="warm")

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid sensor payload"}
    assert client.get("/sensors").json() == []


def test_post_keeps_only_ten_rows(client):
    for i in range(13):
        assert post_reading(client, lumen=i).status_code == 200

    rows = client.get("/sensors").json()
    assert [row["nilai_lumen"] for row in rows] == [12, 11, 10, 9, 8, 7, 6, 5, 4, 3]


# =============================================================================
# GET /sensors
# =============================================================================

def test_get_empty_table_returns_empty_list(client):
    response = client.get("/sensors")

    assert response.status_code == 200
    assert response.json() == []


def test_get_with_timestamp_returns_newer_rows_oldest_first(client):
    for i in range(1, 13):
        post_reading(client, lumen=i)

    newest_first = client.get("/sensors").json()
    r9 = next(row for row in newest_first if row["nilai_lumen"] == 9)

    response = client.get("/sensors", params={"timestamp": r9["timestamp"]})

    assert response.status_code == 200
    assert [row["nilai_lumen"] for row in response.json()] == [10, 11, 12]


def test_get_with_latest_timestamp_returns_nothing(client):
    post_reading(client)
    latest = client.get("/sensors").json()[0]

    response = client.get("/sensors", params={"timestamp": latest["timestamp"]})

    assert response.json() == []


def test_get_with_empty_timestamp_is_initial_fetch(client):
    post_reading(client)

    response = client.get("/sensors?timestamp=")

    assert response.status_code == 200
    assert len(response.json()) == 1


def test_get_with_invalid_timestamp(client):
    response = client.get("/sensors", params={"timestamp": "yesterday-ish"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid timestamp"}


# =============================================================================
# STORAGE FAILURES
# =============================================================================

def test_storage_failure_on_get(app, client, broken_service):
    app.dependency_overrides[get_reading_service] = lambda: broken_service

    response = client.get("/sensors")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch sensor data"}


def test_storage_failure_on_post(app, client, broken_service):
    app.dependency_overrides[get_reading_service] = lambda: broken_service

    response = post_reading(client)

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to save data"}


# =============================================================================
# OTHER ENDPOINTS
# =============================================================================

def test_health(client):
    post_reading(client)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "readings": 1, "retention_limit": 10}


def test_unknown_route_uses_error_shape(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert "error" in response.json()


def test_root_lists_endpoints(client):
    body = client.get("/").json()

    assert body["endpoints"]["readings"] == "GET /sensors"


def test_gauge_endpoint_draws_latest_value(client):
    post_reading(client, suhu=20)
    post_reading(client, suhu=24.5)

    response = client.get("/dashboard/gauge/temperature")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert "24.5°C" in response.text


def test_gauge_endpoint_without_readings_shows_zero(client):
    response = client.get("/dashboard/gauge/humidity")

    assert response.status_code == 200
    assert ">0%<" in response.text


def test_gauge_endpoint_unknown_metric(client):
    response = client.get("/dashboard/gauge/pressure")

    assert response.status_code == 404
    assert response.json() == {"error": "Unknown metric: pressure"}


def test_snapshot_endpoint(client):
    post_reading(client, lumen=100, suhu=20, kelembapan=60)
    post_reading(client, lumen=300, suhu=20, kelembapan=50)

    body = client.get("/dashboard/snapshot").json()

    assert body["latest"]["nilai_lumen"] == 300
    assert body["metrics"]["lumen"]["trend"] == "up"
    assert body["metrics"]["humidity"]["trend"] == "down"
    assert body["metrics"]["temperature"]["trend"] == "stable"
    assert body["metrics"]["lumen"]["stats"]["average"] == 200


def test_api_import_leaves_poller_and_scheduler_unloaded():
    backend_dir = Path(__file__).resolve().parent.parent / "backend"
    env = {**os.environ, "PYTHONPATH": str(backend_dir)}
    code = (
        "import sys, room_monitor.main; "
        "print('apscheduler' in sys.modules, 'room_monitor.client.poller' in sys.modules)"
    )

    result = subprocess.run([sys.executable, "-c", code], env=env, capture_output=True, text=True, check=True)

    assert result.stdout.split() == ["False", "False"]
