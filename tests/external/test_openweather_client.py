from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest

from hazard_watch.external.openweather_client import (
    OpenWeatherClient,
    WeatherApiError,
    describe_sea_conditions,
    estimate_wave_height,
    is_near_coast,
)

BASE_URL = "https://mock.openweather.test"

# 2025-03-10 00:00 UTC
DAY_ONE = 1741564800


def _client(responses: List[Dict[str, Any]], seen: List[httpx.Request] | None = None) -> OpenWeatherClient:
    async def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if not responses:
            raise AssertionError("unexpected request: no scripted response left")
        payload = responses.pop(0)
        status_code = payload.pop("_status", 200)
        return httpx.Response(status_code, json=payload)

    return OpenWeatherClient(
        api_key="key",
        base_url=BASE_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL),
    )


@pytest.mark.asyncio
async def test_current_weather_is_flattened() -> None:
    seen: List[httpx.Request] = []
    client = _client(
        [
            {
                "name": "Delhi",
                "sys": {"country": "IN"},
                "visibility": 4000,
                "main": {"temp": 31.2, "feels_like": 33.0, "humidity": 40, "pressure": 1008},
                "wind": {"speed": 3.1, "deg": 270},
                "weather": [{"description": "haze", "icon": "50d"}],
            }
        ],
        seen,
    )

    weather = await client.current(lat=28.6, lon=77.2)

    assert weather["temperature"] == pytest.approx(31.2)
    assert weather["location"] == "Delhi"
    assert weather["country"] == "IN"
    assert weather["wind_direction"] == 270
    assert weather["description"] == "haze"
    request = seen[0]
    assert request.url.path == "/data/2.5/weather"
    assert request.url.params["appid"] == "key"
    assert request.url.params["units"] == "metric"
    await client.close()


@pytest.mark.asyncio
async def test_forecast_groups_slots_by_day() -> None:
    def slot(offset_hours: int, temp: float) -> Dict[str, Any]:
        return {
            "dt": DAY_ONE + offset_hours * 3600,
            "main": {"temp": temp, "temp_min": temp - 2, "temp_max": temp + 2, "humidity": 50},
            "wind": {"speed": 2.0},
            "weather": [{"description": "clear sky", "icon": "01d"}],
        }

    client = _client([{"list": [slot(0, 20.0), slot(3, 24.0), slot(24, 22.0), slot(48, 23.0)]}])

    forecast = await client.forecast(lat=28.6, lon=77.2, days=2)

    assert [day["date"] for day in forecast] == ["2025-03-10", "2025-03-11"]
    assert forecast[0]["min_temp"] == pytest.approx(18.0)
    assert [h["time"] for h in forecast[0]["hourly"]] == ["00:00", "03:00"]
    await client.close()


@pytest.mark.asyncio
async def test_marine_skips_inland_points_without_calling_upstream() -> None:
    client = _client([])

    assert await client.marine(lat=28.6, lon=77.2) is None
    await client.close()


@pytest.mark.asyncio
async def test_marine_conditions_for_coastal_point() -> None:
    client = _client([{"wind": {"speed": 12.0, "deg": 200, "gust": 15.0}, "visibility": 8000, "main": {"sea_level": 1005}}])

    marine = await client.marine(lat=19.07, lon=72.87)

    assert marine is not None
    assert marine["wave_height"] == "0.6-1.2m"
    assert marine["sea_conditions"] == "Moderate"
    assert marine["wind_gust"] == pytest.approx(15.0)
    await client.close()


@pytest.mark.asyncio
async def test_upstream_status_is_kept_on_error() -> None:
    client = _client([{"_status": 401, "message": "Invalid API key"}])

    with pytest.raises(WeatherApiError) as excinfo:
        await client.current(lat=28.6, lon=77.2)

    assert excinfo.value.status_code == 401
    await client.close()


@pytest.mark.asyncio
async def test_transport_failure_has_no_status() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = OpenWeatherClient(
        api_key="key",
        base_url=BASE_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL),
    )

    with pytest.raises(WeatherApiError) as excinfo:
        await client.current(lat=28.6, lon=77.2)

    assert excinfo.value.status_code is None
    await client.close()


def test_coastal_lookup_and_sea_estimates() -> None:
    assert is_near_coast(13.08, 80.27) is True
    assert is_near_coast(28.6, 77.2) is False
    assert estimate_wave_height(2.0) == "0.1-0.3m"
    assert estimate_wave_height(25.0) == "2.0m+"
    assert describe_sea_conditions(17.0) == "Rough"
