from datetime import datetime, timedelta, timezone
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from services.aggregator import StatsAggregator
from services.location import LocationGate

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api_client(clock: FakeClock) -> Iterator[TestClient]:
    app = create_app(
        aggregator=StatsAggregator(clock=clock),
        location_gate=LocationGate(),
    )
    with TestClient(app) as client:
        yield client


def _post_transaction(client: TestClient, amount: float, timestamp: datetime):
    return client.post(
        "/transactions",
        json={"amount": amount, "timestamp": timestamp.isoformat()},
    )


def test_create_app_builds_independent_state() -> None:
    first = create_app()
    second = create_app()

    assert first.state.aggregator is not second.state.aggregator
    assert first.state.location_gate is not second.state.location_gate


def test_ingest_then_read_statistics(api_client: TestClient, clock: FakeClock) -> None:
    assert _post_transaction(api_client, 100, clock.now).status_code == 201
    response = _post_transaction(api_client, 50, clock.now)

    assert response.status_code == 201
    assert response.content == b""

    stats = api_client.get("/statistics")
    assert stats.status_code == 200
    assert stats.json() == {"sum": 150.0, "avg": 75.0, "max": 100.0, "min": 50.0, "count": 2}


def test_zulu_timestamp_is_accepted(api_client: TestClient, clock: FakeClock) -> None:
    response = api_client.post(
        "/transactions",
        json={"amount": 1.5, "timestamp": clock.now.strftime("%Y-%m-%dT%H:%M:%S.000Z")},
    )

    assert response.status_code == 201


def test_future_transaction_returns_unprocessable(
    api_client: TestClient, clock: FakeClock
) -> None:
    response = _post_transaction(api_client, 10, clock.now + timedelta(seconds=5))

    assert response.status_code == 422
    assert "future" in response.json()["detail"]
    assert api_client.get("/statistics").json() == {}


def test_stale_transaction_returns_no_content(api_client: TestClient, clock: FakeClock) -> None:
    response = _post_transaction(api_client, 10, clock.now - timedelta(seconds=61))

    assert response.status_code == 204
    assert response.content == b""
    assert api_client.get("/statistics").json() == {}


def test_statistics_empty_object_when_stale(api_client: TestClient, clock: FakeClock) -> None:
    _post_transaction(api_client, 10, clock.now)
    clock.advance(61)

    response = api_client.get("/statistics")

    assert response.status_code == 200
    assert response.json() == {}


@pytest.mark.parametrize(
    "body",
    [
        {"amount": 10},
        {"timestamp": "2024-01-01T12:00:00Z"},
        {"amount": "ten", "timestamp": "2024-01-01T12:00:00Z"},
        {"amount": 10, "timestamp": "yesterday"},
        {"amount": "100", "timestamp": "2024-01-01T12:00:00Z"},
        {"amount": True, "timestamp": "2024-01-01T12:00:00Z"},
        {"amount": 10, "timestamp": 1704110400},
        {"amount": 10, "timestamp": "1704110400"},
    ],
)
def test_malformed_transaction_returns_bad_request(
    api_client: TestClient, clock: FakeClock, body: dict
) -> None:
    response = api_client.post("/transactions", json=body)

    assert response.status_code == 400
    assert isinstance(response.json()["detail"], list)
    assert api_client.get("/statistics").json() == {}


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_amount_returns_bad_request(
    api_client: TestClient, clock: FakeClock, literal: str
) -> None:
    _post_transaction(api_client, 10, clock.now)
    raw = f'{{"amount": {literal}, "timestamp": "{clock.now.isoformat()}"}}'

    response = api_client.post(
        "/transactions",
        content=raw.encode(),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    stats = api_client.get("/statistics")
    assert stats.status_code == 200
    assert stats.json() == {"sum": 10.0, "avg": 10.0, "max": 10.0, "min": 10.0, "count": 1}


def test_integer_amount_is_accepted(api_client: TestClient, clock: FakeClock) -> None:
    response = api_client.post(
        "/transactions",
        json={"amount": 7, "timestamp": clock.now.isoformat()},
    )

    assert response.status_code == 201
    assert api_client.get("/statistics").json()["sum"] == 7.0


def test_invalid_json_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/transactions",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_reset_statistics(api_client: TestClient, clock: FakeClock) -> None:
    _post_transaction(api_client, 10, clock.now)

    response = api_client.delete("/reset")

    assert response.status_code == 204
    assert api_client.get("/statistics").json() == {}
    assert api_client.delete("/reset").status_code == 204


def test_location_gate_flow(api_client: TestClient, clock: FakeClock) -> None:
    _post_transaction(api_client, 10, clock.now)
    assert api_client.get("/statistics").status_code == 200

    assert api_client.post("/location", json={"city": "paris"}).status_code == 204
    denied = api_client.get("/statistics")
    assert denied.status_code == 401
    assert "paris" in denied.json()["detail"]

    assert api_client.post("/location", json={"city": "bangalore"}).status_code == 204
    assert api_client.get("/statistics").status_code == 200

    assert api_client.post("/location", json={"city": "paris"}).status_code == 204
    assert api_client.delete("/location/reset").status_code == 204
    assert api_client.get("/statistics").json()["sum"] == 10.0


def test_location_gate_does_not_block_ingest(api_client: TestClient, clock: FakeClock) -> None:
    api_client.post("/location", json={"city": "paris"})

    assert _post_transaction(api_client, 10, clock.now).status_code == 201
    assert api_client.delete("/reset").status_code == 204


def test_malformed_location_returns_bad_request(api_client: TestClient) -> None:
    assert api_client.post("/location", json={"town": "paris"}).status_code == 400
    assert api_client.post("/location", json={"city": 42}).status_code == 400


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("GET", "/transactions"),
        ("PUT", "/transactions"),
        ("POST", "/statistics"),
        ("DELETE", "/statistics"),
        ("GET", "/reset"),
        ("POST", "/reset"),
        ("GET", "/location"),
        ("DELETE", "/location"),
        ("POST", "/location/reset"),
    ],
)
def test_wrong_method_returns_not_allowed(api_client: TestClient, method: str, path: str) -> None:
    response = api_client.request(method, path)

    assert response.status_code == 405


def test_healthcheck(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
