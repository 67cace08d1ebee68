"""
OpenWeatherMap client.

Fetches current conditions for a city and normalises them into a
WeatherReport. The payload is validated with small Pydantic models so a
change on OpenWeatherMap's side shows up as a clear error instead of a
KeyError deep in a route.

Mock mode returns canned weather, enabling local development without an
API key.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from styleai.core.wardrobe.models import WeatherReport

logger = logging.getLogger(__name__)


class WeatherError(Exception):
    """Base class for weather lookup failures."""
    pass


class WeatherNotConfiguredError(WeatherError):
    """Raised when no API key is configured."""
    pass


class CityNotFoundError(WeatherError):
    """Raised when OpenWeatherMap doesn't know the city."""

    def __init__(self, city: str) -> None:
        super().__init__(f"City not found: {city}")
        self.city = city


class WeatherServiceError(WeatherError):
    """Raised when OpenWeatherMap fails or is unreachable."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


# ---------------------------------------------------------------------------
# Payload schema
# ---------------------------------------------------------------------------

class _Condition(BaseModel):
    main: Optional[str] = None
    description: Optional[str] = None


class _Main(BaseModel):
    temp: Optional[float] = None


class _Sys(BaseModel):
    country: Optional[str] = None


class _CurrentWeather(BaseModel):
    name: Optional[str] = None
    main: _Main = _Main()
    sys: _Sys = _Sys()
    weather: list[_Condition] = []


@dataclass
class WeatherConfig:
    """Configuration for the OpenWeatherMap client."""
    api_key: str
    base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    timeout_seconds: float = 10.0
    units: str = "metric"


class WeatherClient(Protocol):
    """
    Protocol for weather lookups.

    Routes depend on this, so tests and local dev can swap in the mock.
    """

    async def get_current_weather(self, city: str) -> WeatherReport:
        """Return current conditions for a city."""
        ...


class OpenWeatherClient:
    """
    Current-weather client for OpenWeatherMap.

    Temperatures are requested in metric and converted for display by
    WeatherReport.from_celsius.
    """

    def __init__(
        self,
        config: WeatherConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    async def get_current_weather(self, city: str) -> WeatherReport:
        """
        Fetch and normalise current weather.

        Raises:
            WeatherNotConfiguredError: no API key
            CityNotFoundError: upstream 404
            WeatherServiceError: any other upstream or transport failure
        """
        city = (city or "").strip()
        if not city:
            raise ValueError("city is required")

        if not self._config.api_key:
            raise WeatherNotConfiguredError("Weather API not configured")

        params = {
            "q": city,
            "appid": self._config.api_key,
            "units": self._config.units,
        }

        logger.debug("Fetching weather", extra={"city": city})

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(self._config.base_url, params=params)
        except httpx.HTTPError as e:
            logger.error("Weather API unreachable", extra={"city": city, "error": str(e)})
            raise WeatherServiceError(502, "Failed to fetch weather data")

        if response.status_code == 404:
            logger.info("Weather city not found", extra={"city": city})
            raise CityNotFoundError(city)

        if response.is_error:
            message = self._error_message(response)
            logger.error(
                "Weather API error",
                extra={"city": city, "status": response.status_code, "error": message},
            )
            raise WeatherServiceError(response.status_code, message)

        try:
            payload = _CurrentWeather.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Weather payload could not be parsed", extra={"city": city, "error": str(e)})
            raise WeatherServiceError(502, "Failed to fetch weather data")

        condition = payload.weather[0] if payload.weather else _Condition()

        return WeatherReport.from_celsius(
            city=payload.name or city,
            temp_celsius=payload.main.temp,
            country=payload.sys.country,
            condition=condition.main,
            description=condition.description,
        )

    def _error_message(self, response: httpx.Response) -> str:
        """Use OpenWeatherMap's own message when the error body has one."""
        try:
            body = response.json()
        except ValueError:
            return "Failed to fetch weather data"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return "Failed to fetch weather data"


# ---------------------------------------------------------------------------
# Mock Weather for Local Development
# ---------------------------------------------------------------------------

MOCK_UNKNOWN_CITY = "nowhere"


class MockWeatherClient:
    """
    Deterministic weather for local development and tests.

    Every city gets the same mild, cloudy day. The city "nowhere"
    behaves like an unknown city so the error path can be exercised.
    """

    def __init__(self, report: Optional[WeatherReport] = None) -> None:
        self._report = report
        logger.info("Initialized mock weather client")

    async def get_current_weather(self, city: str) -> WeatherReport:
        city = (city or "").strip()
        if not city:
            raise ValueError("city is required")
        if city.lower() == MOCK_UNKNOWN_CITY:
            raise CityNotFoundError(city)

        if self._report is not None:
            return self._report

        return WeatherReport.from_celsius(
            city=city,
            temp_celsius=14.0,
            condition="Clouds",
            description="overcast clouds",
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_weather_client(
    config: Optional[WeatherConfig] = None,
    mock_mode: bool = False,
) -> WeatherClient:
    """Return the mock client in mock mode, otherwise the OpenWeatherMap client."""
    if mock_mode:
        return MockWeatherClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return OpenWeatherClient(config)
