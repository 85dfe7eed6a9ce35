# Copyright 2025 msq
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, NoReturn, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from hazard_watch.api.deps import (
    get_clock,
    optional_weather_client,
    require_admin,
    require_alert_store,
)
from hazard_watch.api.schemas import WeatherAlertCreateRequest, WeatherAlertResponse
from hazard_watch.clock import Clock
from hazard_watch.db.models import UserRecord, WeatherAlertRecord
from hazard_watch.db.store import InMemoryWeatherAlertStore
from hazard_watch.external import OpenWeatherClient, WeatherApiError
from hazard_watch.geo import is_within_radius

router = APIRouter(prefix="/api/weather", tags=["weather"])
logger = structlog.get_logger(__name__)

ALERT_RADIUS_METERS = 100_000.0

EMERGENCY_NUMBERS: Dict[str, str] = {
    "police": "100",
    "fire": "101",
    "ambulance": "102",
    "disaster_helpline": "108",
    "women_helpline": "1091",
    "child_helpline": "1098",
    "senior_citizen_helpline": "14567",
}


def _require_client(client: Optional[OpenWeatherClient]) -> OpenWeatherClient:
    if client is None:
        raise HTTPException(status_code=500, detail="Weather API key not configured")
    return client


def _raise_weather_error(exc: WeatherApiError, *, endpoint: str) -> NoReturn:
    logger.warning("weather_upstream_failed", endpoint=endpoint, status_code=exc.status_code, error=str(exc))
    if exc.status_code == 401:
        raise HTTPException(status_code=500, detail="Invalid weather API key")
    if exc.status_code == 404:
        raise HTTPException(status_code=404, detail="Weather data not found for this location")
    raise HTTPException(status_code=502, detail="Failed to fetch weather data")


@router.get("/current")
async def current_weather(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    client: Optional[OpenWeatherClient] = Depends(optional_weather_client),
) -> Dict[str, Any]:
    weather_client = _require_client(client)
    try:
        weather = await weather_client.current(lat=lat, lon=lon)
    except WeatherApiError as exc:
        _raise_weather_error(exc, endpoint="current")
    return {"weather": weather}


@router.get("/forecast")
async def weather_forecast(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    days: int = Query(5, ge=1, le=5),
    client: Optional[OpenWeatherClient] = Depends(optional_weather_client),
) -> Dict[str, Any]:
    weather_client = _require_client(client)
    try:
        forecast = await weather_client.forecast(lat=lat, lon=lon, days=days)
    except WeatherApiError as exc:
        _raise_weather_error(exc, endpoint="forecast")
    return {"forecast": forecast}


@router.get("/marine")
async def marine_weather(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    client: Optional[OpenWeatherClient] = Depends(optional_weather_client),
) -> Dict[str, Any]:
    weather_client = _require_client(client)
    try:
        marine = await weather_client.marine(lat=lat, lon=lon)
    except WeatherApiError as exc:
        _raise_weather_error(exc, endpoint="marine")
    if marine is None:
        return {"message": "Location is not near the coast", "marine": None}
    return {"marine": marine}


def _as_utc(moment: datetime) -> datetime:
    # naive timestamps from clients are taken as UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def _parse_point(raw: str) -> tuple[float, float]:
    try:
        lat_str, lon_str = raw.split(",")
        return float(lat_str), float(lon_str)
    except ValueError:
        raise HTTPException(status_code=400, detail="location must be 'lat,lon'")


@router.get("/alerts")
async def active_alerts(
    location: Optional[str] = Query(None, description="lat,lon; limits results to alerts within 100 km"),
    alerts: InMemoryWeatherAlertStore = Depends(require_alert_store),
    clock: Clock = Depends(get_clock),
) -> Dict[str, List[WeatherAlertResponse]]:
    active: List[WeatherAlertRecord] = alerts.list_active(clock.now())
    if location:
        lat, lon = _parse_point(location)
        active = [
            alert
            for alert in active
            if alert.location.latitude is not None
            and alert.location.longitude is not None
            and is_within_radius(alert.location.latitude, alert.location.longitude, lat, lon, ALERT_RADIUS_METERS)
        ]
    return {"alerts": [WeatherAlertResponse.from_record(a) for a in active]}


@router.post("/alerts", status_code=201)
async def create_alert(
    payload: WeatherAlertCreateRequest,
    admin: UserRecord = Depends(require_admin),
    alerts: InMemoryWeatherAlertStore = Depends(require_alert_store),
    clock: Clock = Depends(get_clock),
) -> Dict[str, Any]:
    alert = alerts.add(
        WeatherAlertRecord(
            id="",
            type=payload.type,
            title=payload.title,
            description=payload.description,
            severity=payload.severity,
            location=payload.location.to_record(),
            valid_from=_as_utc(payload.valid_from),
            valid_until=_as_utc(payload.valid_until),
            created_at=clock.now(),
        )
    )
    logger.info("weather_alert_created", alert_id=alert.id, admin_id=admin.id, alert_type=alert.type.value)
    return {
        "message": "Weather alert created successfully",
        "alert": WeatherAlertResponse.from_record(alert),
    }


@router.get("/admin/alerts")
async def all_alerts(
    admin: UserRecord = Depends(require_admin),
    alerts: InMemoryWeatherAlertStore = Depends(require_alert_store),
) -> Dict[str, List[WeatherAlertResponse]]:
    return {"alerts": [WeatherAlertResponse.from_record(a) for a in alerts.list_all()]}


@router.get("/emergency")
async def emergency_numbers() -> Dict[str, Dict[str, str]]:
    return {"emergency_numbers": dict(EMERGENCY_NUMBERS)}
