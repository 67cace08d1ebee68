"""
Weather API endpoint.

Current conditions for a city, used by the client to show outfit context.
Temperatures are in Fahrenheit for US cities and Celsius elsewhere.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from ...infrastructure.weather.client import (
    CityNotFoundError,
    WeatherNotConfiguredError,
    WeatherServiceError,
)
from ..dependencies import CurrentUser, WeatherClientDep

logger = logging.getLogger(__name__)

router = APIRouter()


class WeatherResponse(BaseModel):
    """Current weather for a city."""
    city: str = Field(description="City name as OpenWeatherMap reports it")
    temperature: int = Field(description="Rounded temperature in `unit`")
    unit: str = Field(description="C or F")
    condition: str = Field(description="Short condition, e.g. Clouds")
    description: str = Field(description="Longer description, e.g. overcast clouds")


@router.get(
    "",
    response_model=WeatherResponse,
    status_code=status.HTTP_200_OK,
    summary="Current weather",
    description="Fetch current conditions for a city from OpenWeatherMap.",
)
async def get_weather(
    user: CurrentUser,
    weather_client: WeatherClientDep,
    city: Optional[str] = Query(None, description="City name, e.g. London"),
) -> WeatherResponse:
    if not city or not city.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="City name is required (query: ?city=London)",
        )

    try:
        report = await weather_client.get_current_weather(city.strip())
    except WeatherNotConfiguredError:
        logger.error("Weather API key missing")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Weather API not configured. Add OPENWEATHER_API_KEY to .env",
        )
    except CityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="City not found",
        )
    except WeatherServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    logger.debug("Weather fetched", extra={"user_id": user.id, "city": report.city})

    return WeatherResponse(
        city=report.city,
        temperature=report.temperature,
        unit=report.unit,
        condition=report.condition,
        description=report.description,
    )
