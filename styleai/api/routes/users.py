"""
User profile API endpoints.

The profile holds the styling context the stylist uses (style preference,
gender, body type) plus sizes and budget. Onboarding and settings both
write it through the same partial-update PUT.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.wardrobe.models import UserProfile
from ..dependencies import CurrentUser, ProfileRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ProfileUpdateRequest(BaseModel):
    """
    Partial profile update.

    Only fields present in the body are changed. Unknown option values
    are stored as null rather than rejected.
    """
    style_preference: Optional[str] = Field(
        None,
        description="casual, streetwear, business casual or smart casual"
    )
    gender: Optional[str] = Field(
        None,
        description="male, female, non-binary or prefer not to say"
    )
    body_type: Optional[str] = Field(None, description="Free text, e.g. athletic")
    size_top: Optional[str] = Field(None, description="Top size, e.g. M")
    size_bottom: Optional[str] = Field(None, description="Bottom size, e.g. 32")
    size_shoes: Optional[str] = Field(None, description="Shoe size, e.g. 10")
    budget_range: Optional[str] = Field(None, description="$, $$, $$$ or $$$$")


class ProfileResponse(BaseModel):
    """A stored profile."""
    user_id: str
    style_preference: Optional[str] = None
    gender: Optional[str] = None
    body_type: Optional[str] = None
    size_top: Optional[str] = None
    size_bottom: Optional[str] = None
    size_shoes: Optional[str] = None
    budget_range: Optional[str] = None
    updated_at: datetime

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileResponse":
        return cls(
            user_id=profile.user_id,
            style_preference=profile.style_preference,
            gender=profile.gender,
            body_type=profile.body_type,
            size_top=profile.size_top,
            size_bottom=profile.size_bottom,
            size_shoes=profile.size_shoes,
            budget_range=profile.budget_range,
            updated_at=profile.updated_at,
        )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/profile",
    response_model=Optional[ProfileResponse],
    status_code=status.HTTP_200_OK,
    summary="Get my profile",
    description="Returns the caller's profile, or null if they haven't created one.",
)
async def get_profile(
    user: CurrentUser,
    repository: ProfileRepositoryDep,
) -> Optional[ProfileResponse]:
    try:
        profile = repository.get_profile(user.id)
    except Exception as e:
        logger.error("Failed to fetch profile", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch profile",
        )

    if profile is None:
        return None

    return ProfileResponse.from_profile(profile)


@router.put(
    "/profile",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Create or update my profile",
    description="Merge the given fields onto the existing profile and save it.",
)
async def update_profile(
    request: ProfileUpdateRequest,
    user: CurrentUser,
    repository: ProfileRepositoryDep,
) -> ProfileResponse:
    """
    Partial update.

    Fields absent from the body keep their stored values; a profile is
    created on the first call.
    """
    changes = request.model_dump(exclude_unset=True)

    try:
        existing = repository.get_profile(user.id) or UserProfile(user_id=user.id)
        profile = repository.save_profile(existing.merge(changes))
    except Exception as e:
        logger.error("Failed to save profile", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save profile",
        )

    logger.info(
        "Profile saved",
        extra={"user_id": user.id, "fields": sorted(changes)}
    )

    return ProfileResponse.from_profile(profile)
