# Copyright 2025 msq
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TypedDict

import httpx

from hazard_watch.geo import is_within_radius

logger = logging.getLogger(__name__)

COASTAL_RADIUS_METERS = 50_000.0
COASTAL_REFERENCE_POINTS = (
    ("Mumbai", 19.0760, 72.8777),
    ("Bangalore", 12.9716, 77.5946),
    ("Chennai", 13.0827, 80.2707),
    ("Kolkata", 22.5726, 88.3639),
    ("Thiruvananthapuram", 8.5241, 76.9366),
)


class WeatherApiError(RuntimeError):
    """OpenWeather call failed; ``status_code`` is the upstream HTTP status when known."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CurrentWeather(TypedDict):
    temperature: float
    feels_like: float
    humidity: int
    pressure: int
    visibility: Optional[int]
    wind_speed: float
    wind_direction: Optional[int]
    description: str
    icon: str
    location: str
    country: Optional[str]
    timestamp: str


class HourlyForecast(TypedDict):
    time: str
    temperature: float
    description: str
    icon: str
    wind_speed: float


class DailyForecast(TypedDict):
    date: str
    min_temp: float
    max_temp: float
    description: str
    icon: str
    humidity: int
    wind_speed: float
    hourly: List[HourlyForecast]


class MarineConditions(TypedDict):
    wind_speed: float
    wind_direction: Optional[int]
    wind_gust: float
    visibility: Optional[int]
    sea_level: Optional[float]
    wave_height: str
    sea_conditions: str
    tide_info: str
    timestamp: str


def is_near_coast(lat: float, lon: float) -> bool:
    return any(
        is_within_radius(lat, lon, ref_lat, ref_lon, COASTAL_RADIUS_METERS)
        for _, ref_lat, ref_lon in COASTAL_REFERENCE_POINTS
    )


def estimate_wave_height(wind_speed: float) -> str:
    if wind_speed < 5:
        return "0.1-0.3m"
    if wind_speed < 10:
        return "0.3-0.6m"
    if wind_speed < 15:
        return "0.6-1.2m"
    if wind_speed < 20:
        return "1.2-2.0m"
    return "2.0m+"


def describe_sea_conditions(wind_speed: float) -> str:
    if wind_speed < 5:
        return "Calm"
    if wind_speed < 10:
        return "Slight"
    if wind_speed < 15:
        return "Moderate"
    if wind_speed < 20:
        return "Rough"
    return "Very Rough"


class OpenWeatherClient:
    """OpenWeather REST client (metric units) used by the weather proxy routes."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self._api_key = api_key
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            trust_env=False,
        )
        self._rate_lock = asyncio.Semaphore(5)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def current(self, *, lat: float, lon: float) -> CurrentWeather:
        data = await self._request("/data/2.5/weather", lat=lat, lon=lon)
        main = data.get("main") or {}
        wind = data.get("wind") or {}
        weather = (data.get("weather") or [{}])[0]
        return CurrentWeather(
            temperature=main.get("temp"),
            feels_like=main.get("feels_like"),
            humidity=main.get("humidity"),
            pressure=main.get("pressure"),
            visibility=data.get("visibility"),
            wind_speed=wind.get("speed", 0.0),
            wind_direction=wind.get("deg"),
            description=weather.get("description", ""),
            icon=weather.get("icon", ""),
            location=data.get("name", ""),
            country=(data.get("sys") or {}).get("country"),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    async def forecast(self, *, lat: float, lon: float, days: int = 5) -> List[DailyForecast]:
        """3-hourly forecast folded into per-day summaries (first slot of each day wins)."""
        data = await self._request("/data/2.5/forecast", lat=lat, lon=lon)
        daily: Dict[str, DailyForecast] = {}
        for item in data.get("list") or []:
            moment = datetime.fromtimestamp(int(item["dt"]), tz=timezone.utc)
            day_key = moment.date().isoformat()
            main = item.get("main") or {}
            wind = item.get("wind") or {}
            weather = (item.get("weather") or [{}])[0]
            if day_key not in daily:
                daily[day_key] = DailyForecast(
                    date=day_key,
                    min_temp=main.get("temp_min"),
                    max_temp=main.get("temp_max"),
                    description=weather.get("description", ""),
                    icon=weather.get("icon", ""),
                    humidity=main.get("humidity"),
                    wind_speed=wind.get("speed", 0.0),
                    hourly=[],
                )
            daily[day_key]["hourly"].append(
                HourlyForecast(
                    time=moment.strftime("%H:%M"),
                    temperature=main.get("temp"),
                    description=weather.get("description", ""),
                    icon=weather.get("icon", ""),
                    wind_speed=wind.get("speed", 0.0),
                )
            )
        return list(daily.values())[: max(days, 0)]

    async def marine(self, *, lat: float, lon: float) -> MarineConditions | None:
        """Marine estimates for coastal points; ``None`` away from the coast."""
        if not is_near_coast(lat, lon):
            return None
        data = await self._request("/data/2.5/weather", lat=lat, lon=lon)
        wind = data.get("wind") or {}
        wind_speed = float(wind.get("speed", 0.0))
        return MarineConditions(
            wind_speed=wind_speed,
            wind_direction=wind.get("deg"),
            wind_gust=float(wind.get("gust", 0.0)),
            visibility=data.get("visibility"),
            sea_level=(data.get("main") or {}).get("sea_level"),
            wave_height=estimate_wave_height(wind_speed),
            sea_conditions=describe_sea_conditions(wind_speed),
            tide_info="Tide information not available in free API",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    async def _request(self, path: str, *, lat: float, lon: float) -> Dict[str, Any]:
        params = {"lat": lat, "lon": lon, "appid": self._api_key, "units": "metric"}
        try:
            async with self._rate_lock:
                response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            logger.warning("openweather_request_failed", extra={"path": path, "error": str(exc)})
            raise WeatherApiError("weather service unreachable") from exc
        if response.status_code >= 400:
            raise WeatherApiError(
                f"weather service returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()
