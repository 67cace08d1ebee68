"""
OpenWeatherMap integration for outfit context.
"""

from .client import (
    CityNotFoundError,
    MockWeatherClient,
    OpenWeatherClient,
    WeatherClient,
    WeatherConfig,
    WeatherError,
    WeatherNotConfiguredError,
    WeatherServiceError,
    create_weather_client,
)

__all__ = [
    "CityNotFoundError",
    "MockWeatherClient",
    "OpenWeatherClient",
    "WeatherClient",
    "WeatherConfig",
    "WeatherError",
    "WeatherNotConfiguredError",
    "WeatherServiceError",
    "create_weather_client",
]
