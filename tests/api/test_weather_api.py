from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from hazard_watch.db.models import Location, Severity, WeatherAlertRecord, WeatherAlertType
from hazard_watch.external import WeatherApiError


class _StubWeatherClient:
    def __init__(self, *, error: WeatherApiError | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, float, float]] = []

    async def current(self, *, lat: float, lon: float) -> Dict[str, Any]:
        self.calls.append(("current", lat, lon))
        if self.error is not None:
            raise self.error
        return {"temperature": 31.5, "description": "haze", "location": "Delhi"}

    async def forecast(self, *, lat: float, lon: float, days: int = 5) -> list[Dict[str, Any]]:
        self.calls.append(("forecast", lat, lon))
        return [{"date": f"2025-03-1{i}", "min_temp": 20.0, "max_temp": 33.0} for i in range(days)]

    async def marine(self, *, lat: float, lon: float) -> Dict[str, Any] | None:
        self.calls.append(("marine", lat, lon))
        if lat > 25:
            return None
        return {"wind_speed": 7.0, "wave_height": "0.3-0.6m", "sea_conditions": "Slight"}


def test_weather_without_api_key_is_500(client: TestClient) -> None:
    response = client.get("/api/weather/current", params={"lat": 28.6, "lon": 77.2})

    assert response.status_code == 500
    assert response.json()["detail"] == "Weather API key not configured"


def test_current_weather_proxies_client(app, client: TestClient) -> None:
    stub = _StubWeatherClient()
    app.state.weather_client = stub

    response = client.get("/api/weather/current", params={"lat": 28.6, "lon": 77.2})

    assert response.status_code == 200
    assert response.json()["weather"]["temperature"] == 31.5
    assert stub.calls == [("current", 28.6, 77.2)]


@pytest.mark.parametrize(
    "status_code,expected_status,expected_detail",
    [
        (401, 500, "Invalid weather API key"),
        (404, 404, "Weather data not found for this location"),
        (503, 502, "Failed to fetch weather data"),
        (None, 502, "Failed to fetch weather data"),
    ],
)
def test_upstream_errors_are_translated(app, client, status_code, expected_status, expected_detail) -> None:
    app.state.weather_client = _StubWeatherClient(error=WeatherApiError("boom", status_code=status_code))

    response = client.get("/api/weather/current", params={"lat": 28.6, "lon": 77.2})

    assert response.status_code == expected_status
    assert response.json()["detail"] == expected_detail


def test_forecast_days_are_bounded(app, client: TestClient) -> None:
    app.state.weather_client = _StubWeatherClient()

    ok = client.get("/api/weather/forecast", params={"lat": 28.6, "lon": 77.2, "days": 3})
    too_many = client.get("/api/weather/forecast", params={"lat": 28.6, "lon": 77.2, "days": 6})

    assert len(ok.json()["forecast"]) == 3
    assert too_many.status_code == 422


def test_marine_inland_and_coastal(app, client: TestClient) -> None:
    app.state.weather_client = _StubWeatherClient()

    inland = client.get("/api/weather/marine", params={"lat": 28.6, "lon": 77.2})
    coastal = client.get("/api/weather/marine", params={"lat": 19.07, "lon": 72.87})

    assert inland.json() == {"message": "Location is not near the coast", "marine": None}
    assert coastal.json()["marine"]["sea_conditions"] == "Slight"


def _alert(clock, *, latitude: float, longitude: float, starts_in: timedelta = timedelta(0)) -> WeatherAlertRecord:
    now = clock.now()
    return WeatherAlertRecord(
        id="",
        type=WeatherAlertType.CYCLONE,
        title="Cyclone Warning",
        description="Cyclone approaching the coast",
        severity=Severity.HIGH,
        location=Location(latitude=latitude, longitude=longitude, address="Coast"),
        valid_from=now + starts_in,
        valid_until=now + starts_in + timedelta(hours=12),
        created_at=now,
    )


def test_active_alerts_with_location_filter(client: TestClient, alert_store, clock) -> None:
    odisha = alert_store.add(_alert(clock, latitude=20.29, longitude=85.82))
    alert_store.add(_alert(clock, latitude=13.08, longitude=80.27))
    alert_store.add(_alert(clock, latitude=20.29, longitude=85.82, starts_in=timedelta(days=1)))

    everything = client.get("/api/weather/alerts").json()["alerts"]
    near_puri = client.get("/api/weather/alerts", params={"location": "19.81,85.83"}).json()["alerts"]
    malformed = client.get("/api/weather/alerts", params={"location": "puri"})

    assert len(everything) == 2
    assert [a["id"] for a in near_puri] == [odisha.id]
    assert malformed.status_code == 400


def test_create_alert_requires_admin(client: TestClient, citizen_headers, admin_headers) -> None:
    body = {
        "type": "heavy_rain",
        "title": "Heavy rain warning",
        "description": "Very heavy rain expected over the ghats",
        "severity": "high",
        "location": {"latitude": 15.49, "longitude": 73.82, "address": "Goa"},
        "valid_from": "2025-03-10T00:00:00Z",
        "valid_until": "2025-03-11T00:00:00Z",
    }

    forbidden = client.post("/api/weather/alerts", json=body, headers=citizen_headers)
    created = client.post("/api/weather/alerts", json=body, headers=admin_headers)
    inverted = client.post(
        "/api/weather/alerts",
        json={**body, "valid_until": "2025-03-09T00:00:00Z"},
        headers=admin_headers,
    )

    assert forbidden.status_code == 403
    assert created.status_code == 201
    assert created.json()["message"] == "Weather alert created successfully"
    assert created.json()["alert"]["type"] == "heavy_rain"
    assert inverted.status_code == 422

    active = client.get("/api/weather/alerts").json()["alerts"]
    assert [a["title"] for a in active] == ["Heavy rain warning"]
    listed = client.get("/api/weather/admin/alerts", headers=admin_headers)
    assert len(listed.json()["alerts"]) == 1


def test_emergency_numbers(client: TestClient) -> None:
    numbers = client.get("/api/weather/emergency").json()["emergency_numbers"]

    assert numbers["police"] == "100"
    assert numbers["disaster_helpline"] == "108"
