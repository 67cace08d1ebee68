"""
Outfit generation API endpoints.

POST /generate runs the whole pipeline for one request:

1. Load the caller's wardrobe (must not be empty)
2. Load their profile for styling context (optional)
3. Look up current weather for the city
4. Check the daily generation limit
5. Ask the stylist for an outfit and validate it against the wardrobe

Each step maps its failures to a specific HTTP status so the client can
tell "add some clothes" apart from "the weather service is down".
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from ...core.wardrobe.models import UserProfile
from ...core.wardrobe.stylist import OutfitGenerationError
from ...infrastructure.anthropic.client import AnthropicClientError, RateLimitExceeded
from ...infrastructure.weather.client import (
    CityNotFoundError,
    WeatherNotConfiguredError,
    WeatherServiceError,
)
from ..dependencies import (
    ClothingRepositoryDep,
    CurrentUser,
    OutfitStylistDep,
    ProfileRepositoryDep,
    SettingsDep,
    StorageClientDep,
    UsageLimitRepositoryDep,
    WeatherClientDep,
)
from .clothing import ClothingItemResponse, build_item_response

logger = logging.getLogger(__name__)

router = APIRouter()

OUTFIT_RESOURCE = "outfit_generation"


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class OutfitWeather(BaseModel):
    """The weather the outfit was picked for."""
    city: str
    temperature: int
    unit: str
    condition: str


class OutfitResponse(BaseModel):
    """A suggested outfit."""
    item_ids: list[str] = Field(description="Chosen item ids, in the stylist's order")
    items: list[ClothingItemResponse] = Field(description="Full records for the chosen items")
    explanation: str = Field(description="Why the outfit works")
    weather: OutfitWeather


class UsageResponse(BaseModel):
    """Outfit generations used today."""
    used: int
    limit: int
    remaining: int


class GapFinderResponse(BaseModel):
    message: str
    placeholder: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/generate",
    response_model=OutfitResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate an outfit",
    description="Suggest a complete outfit from the caller's wardrobe for today's weather.",
    responses={
        400: {"description": "Empty wardrobe or unknown city"},
        429: {"description": "Daily limit reached or LLM rate limited"},
        502: {"description": "Weather service or LLM failed"},
    },
)
async def generate_outfit(
    user: CurrentUser,
    settings: SettingsDep,
    clothing_repository: ClothingRepositoryDep,
    profile_repository: ProfileRepositoryDep,
    usage_repository: UsageLimitRepositoryDep,
    storage: StorageClientDep,
    weather_client: WeatherClientDep,
    stylist: OutfitStylistDep,
    city: Optional[str] = Query(None, description="City for weather; defaults to the configured city"),
) -> OutfitResponse:
    city = (city or "").strip() or settings.default_city

    # Step 1: wardrobe
    try:
        wardrobe = clothing_repository.list_for_user(user.id)
    except Exception as e:
        logger.error("Outfit generate: fetch items error", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch clothing items",
        )

    if not wardrobe:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Your wardrobe is empty. Add some clothing items first.",
        )

    # Step 2: profile (best effort)
    profile: Optional[UserProfile] = None
    try:
        profile = profile_repository.get_profile(user.id)
    except Exception as e:
        logger.warning(
            "Outfit generate: profile unavailable",
            extra={"user_id": user.id, "error": str(e)}
        )

    # Step 3: weather
    try:
        weather = await weather_client.get_current_weather(city)
    except WeatherNotConfiguredError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Weather API not configured",
        )
    except CityNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'City "{city}" not found',
        )
    except WeatherServiceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        )

    if stylist is None:
        logger.error("Outfit generator not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Outfit generator not configured. Add ANTHROPIC_API_KEY to .env",
        )

    # Step 4: daily limit, counted only once we're about to call the LLM
    allowed, used, limit = usage_repository.check_and_increment(
        user_id=user.id,
        resource_type=OUTFIT_RESOURCE,
        limit_max=settings.outfit_generation_daily_limit,
    )
    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Daily outfit limit reached ({limit} per day). Try again tomorrow.",
        )

    # Step 5: stylist
    try:
        suggestion = await stylist.suggest_outfit(wardrobe, weather, profile)
    except RateLimitExceeded as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(e),
        )
    except AnthropicClientError as e:
        logger.error("Outfit generate: LLM error", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Outfit generator request failed",
        )
    except OutfitGenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    logger.info(
        "Outfit generated",
        extra={
            "user_id": user.id,
            "city": weather.city,
            "item_count": len(suggestion.items),
            "usage": f"{used}/{limit}",
        }
    )

    items = [
        await build_item_response(item, storage, settings.photo_url_expiry_seconds)
        for item in suggestion.items
    ]

    return OutfitResponse(
        item_ids=suggestion.item_ids,
        items=items,
        explanation=suggestion.explanation,
        weather=OutfitWeather(
            city=weather.city,
            temperature=weather.temperature,
            unit=weather.unit,
            condition=weather.condition,
        ),
    )


@router.get(
    "/usage",
    response_model=UsageResponse,
    status_code=status.HTTP_200_OK,
    summary="Today's outfit usage",
    description="How many outfit generations the caller has used today.",
)
async def get_outfit_usage(
    user: CurrentUser,
    settings: SettingsDep,
    usage_repository: UsageLimitRepositoryDep,
) -> UsageResponse:
    limit = settings.outfit_generation_daily_limit

    try:
        usage = usage_repository.get_current_usage(user.id, OUTFIT_RESOURCE)
    except Exception as e:
        logger.error("Failed to fetch usage", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch usage",
        )

    used = usage[0] if usage else 0

    return UsageResponse(used=used, limit=limit, remaining=max(limit - used, 0))


@router.post(
    "/gap-finder",
    response_model=GapFinderResponse,
    status_code=status.HTTP_200_OK,
    summary="Wardrobe gap finder (placeholder)",
    description="Will suggest missing wardrobe essentials. Not implemented yet.",
)
async def gap_finder(user: CurrentUser) -> GapFinderResponse:
    return GapFinderResponse(message="Gap finder not yet implemented", placeholder=True)
