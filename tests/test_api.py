import pytest
from fastapi.testclient import TestClient

from flight_scheduler.api import app


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("FLIGHT_SCHEDULER_DB_PATH", str(tmp_path / "api.db"))
    with TestClient(app) as client:
        yield client


def test_airports_seeded_on_startup(client, catalog):
    response = client.get("/airports")
    assert response.status_code == 200
    assert len(response.json()) == len(catalog.airports)


def test_generate_and_browse(client):
    response = client.post("/generate", json={"days": 2, "flights_per_day": 3, "seed": 7, "batch_size": 4})
    assert response.status_code == 200
    body = response.json()
    assert body["tally"]["generated"] == 6
    assert body["summary"]["status"] == "completed"
    assert body["summary"]["batches_committed"] == 2

    rows = client.get("/scheduled-flights", params={"date": "2025-12-01"}).json()
    assert len(rows) == 3

    number = rows[0]["flight_number"]
    flight = client.get(f"/scheduled-flights/{number}")
    assert flight.status_code == 200
    assert flight.json()["flight_number"] == number


def test_zero_width_window_is_rejected(client):
    response = client.post(
        "/generate",
        json={"days": 1, "flights_per_day": 1, "window_start": "07:00", "window_end": "07:00"},
    )
    assert response.status_code == 400
    assert client.get("/scheduled-flights").json() == []


def test_negative_days_rejected(client):
    assert client.post("/generate", json={"days": -1, "flights_per_day": 1}).status_code == 422


def test_bad_date(client):
    assert client.get("/scheduled-flights", params={"date": "12/01/2025"}).status_code == 400


def test_unknown_flight(client):
    assert client.get("/scheduled-flights/ZZ0000").status_code == 404
