# Copyright 2025 msq
from __future__ import annotations

import os
from dataclasses import dataclass

import structlog

_logger = structlog.get_logger(__name__)

DEFAULT_JWT_SECRET = "fallback-jwt-secret-for-development-only-change-in-production"
DEFAULT_OPENWEATHER_URL = "https://api.openweathermap.org"

try:
    from dotenv import load_dotenv

    base_dir: str = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
    config_dir: str = os.path.join(base_dir, "config")

    # Shared settings first, never overriding variables already in the environment
    load_dotenv(os.path.join(config_dir, ".env"), override=False)

    # Optional developer overlay; fills in only what is still unset
    load_dotenv(os.path.join(config_dir, "dev.local.env"), override=False)
except Exception as exc:
    _logger.warning("dotenv_load_skipped", error=str(exc))


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning("config_value_invalid", name=name, raw=raw, fallback=default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        _logger.warning("config_value_invalid", name=name, raw=raw, fallback=default)
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class GeofenceBounds:
    """Inclusive lat/lon bounding box of the service region."""

    south: float = 6.0
    north: float = 37.0
    west: float = 68.0
    east: float = 97.0

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.south <= latitude <= self.north and self.west <= longitude <= self.east


def _parse_geofence(raw: str | None) -> GeofenceBounds:
    if raw is None or not raw.strip():
        return GeofenceBounds()
    try:
        south, north, west, east = (float(part) for part in raw.split(","))
    except ValueError:
        _logger.warning("geofence_bounds_parse_failed", raw=raw)
        return GeofenceBounds()
    if south > north or west > east:
        _logger.warning("geofence_bounds_inverted", raw=raw)
        return GeofenceBounds()
    return GeofenceBounds(south=south, north=north, west=west, east=east)


@dataclass(frozen=True)
class VerificationSettings:
    strategy: str = "rules"
    recency_window_hours: float = 24.0
    duplicate_window_minutes: float = 60.0
    duplicate_radius_meters: float = 1000.0
    geofence: GeofenceBounds = GeofenceBounds()
    active_hours_utc_offset_minutes: int = 330


@dataclass(frozen=True)
class AppConfig:
    app_env: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_expiration_days: int
    openweather_api_key: str | None
    openweather_base_url: str
    weather_timeout_seconds: float
    verification: VerificationSettings
    seed_sample_data: bool
    cors_origins: tuple[str, ...]
    log_json: bool
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env in {"prod", "production"}

    @staticmethod
    def load_from_env() -> "AppConfig":
        app_env = (os.getenv("APP_ENV") or "development").strip().lower()

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            _logger.warning("jwt_secret_missing_using_fallback", app_env=app_env)
            jwt_secret = DEFAULT_JWT_SECRET

        strategy = (os.getenv("VERIFICATION_STRATEGY") or "rules").strip().lower()
        if strategy not in {"rules", "scoring"}:
            _logger.warning("verification_strategy_unknown", strategy=strategy, fallback="rules")
            strategy = "rules"

        verification = VerificationSettings(
            strategy=strategy,
            recency_window_hours=_env_float("RECENCY_WINDOW_HOURS", 24.0),
            duplicate_window_minutes=_env_float("DUPLICATE_WINDOW_MINUTES", 60.0),
            duplicate_radius_meters=_env_float("DUPLICATE_RADIUS_METERS", 1000.0),
            geofence=_parse_geofence(os.getenv("GEOFENCE_BOUNDS")),
            active_hours_utc_offset_minutes=_env_int("ACTIVE_HOURS_UTC_OFFSET_MINUTES", 330),
        )

        cors_raw = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        cors_origins = tuple(origin.strip() for origin in cors_raw.split(",") if origin.strip())

        return AppConfig(
            app_env=app_env,
            jwt_secret=jwt_secret,
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            jwt_expiration_days=_env_int("JWT_EXPIRATION_DAYS", 7),
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY") or None,
            openweather_base_url=os.getenv("OPENWEATHER_BASE_URL", DEFAULT_OPENWEATHER_URL).rstrip("/"),
            weather_timeout_seconds=_env_float("WEATHER_TIMEOUT_SECONDS", 10.0),
            verification=verification,
            seed_sample_data=_env_bool("SEED_SAMPLE_DATA", True),
            cors_origins=cors_origins,
            log_json=_env_bool("LOG_JSON", False),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
