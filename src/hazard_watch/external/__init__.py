"""Clients for third-party services."""

from .openweather_client import OpenWeatherClient, WeatherApiError

__all__ = ["OpenWeatherClient", "WeatherApiError"]
