"""
Clothing item API endpoints.

Handles the wardrobe: uploading a photo with its metadata, listing the
user's items, and deleting them. Photos go to object storage under the
user's prefix; rows go to the clothing_items table.

The stored photo_url is a storage path, never a public URL. Responses
carry a short-lived presigned URL alongside it for display.
"""

import logging
import os
from datetime import datetime
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status
from pydantic import BaseModel, Field

from ...core.wardrobe.models import ClothingItem, parse_style_tags
from ...infrastructure.snowflake.repositories.clothing import ClothingItemNotFoundError
from ...infrastructure.storage.client import PhotoStorage, StorageError
from ..dependencies import (
    ClothingRepositoryDep,
    CurrentUser,
    SettingsDep,
    StorageClientDep,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")

DEFAULT_PHOTO_EXTENSION = ".jpg"


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class ClothingItemResponse(BaseModel):
    """A wardrobe item as returned to clients."""
    id: str = Field(description="Item identifier")
    user_id: str = Field(description="Owner's user id")
    photo_url: str = Field(description="Storage path of the photo")
    item_type: str = Field(description="Kind of garment, e.g. shirt, pants")
    color: Optional[str] = Field(None, description="Main color")
    style_tags: list[str] = Field(default_factory=list, description="Free-form style tags")
    season: Optional[str] = Field(None, description="Season the item suits")
    created_at: datetime = Field(description="When the item was added")
    photo_signed_url: Optional[str] = Field(
        None,
        description="Temporary URL for displaying the photo, if one could be generated"
    )


class PhotoUrlResponse(BaseModel):
    """A fresh presigned URL for an item's photo."""
    url: str = Field(description="Temporary download URL")
    expires_in: int = Field(description="Seconds until the URL expires")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def signed_photo_url(
    storage: PhotoStorage,
    storage_path: str,
    expiry_seconds: int,
) -> Optional[str]:
    """Presign a photo path; a failure leaves the item without a URL."""
    if not storage_path:
        return None

    try:
        return await storage.get_presigned_url(storage_path, expiry_seconds=expiry_seconds)
    except StorageError as e:
        logger.warning(
            "Could not presign photo",
            extra={"storage_path": storage_path, "error": str(e)}
        )
        return None


async def build_item_response(
    item: ClothingItem,
    storage: PhotoStorage,
    expiry_seconds: int,
) -> ClothingItemResponse:
    """Convert a domain item to its API shape."""
    return ClothingItemResponse(
        id=item.id,
        user_id=item.user_id,
        photo_url=item.photo_url,
        item_type=item.item_type,
        color=item.color,
        style_tags=item.style_tags,
        season=item.season,
        created_at=item.created_at,
        photo_signed_url=await signed_photo_url(storage, item.photo_url, expiry_seconds),
    )


def _photo_filename(original_name: Optional[str]) -> str:
    """A fresh UUID filename keeping the upload's extension."""
    ext = os.path.splitext(original_name or "")[1] or DEFAULT_PHOTO_EXTENSION
    return f"{uuid4()}{ext}"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=ClothingItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a clothing item",
    description="Upload a photo with item metadata. Accepts multipart/form-data.",
)
async def create_clothing_item(
    user: CurrentUser,
    settings: SettingsDep,
    repository: ClothingRepositoryDep,
    storage: StorageClientDep,
    photo: Optional[UploadFile] = File(None, description="JPEG, PNG, WebP or GIF image"),
    item_type: Optional[str] = Form(None, description="e.g. shirt, pants"),
    color: Optional[str] = Form(None),
    style_tags: Optional[str] = Form(
        None,
        description='JSON array (["casual", "striped"]) or comma-separated string'
    ),
    season: Optional[str] = Form(None, description="e.g. summer, all-season"),
) -> ClothingItemResponse:
    """
    Store a new wardrobe item.

    The photo is uploaded first; if the row can't be written, the
    uploaded photo is removed again so storage doesn't collect orphans.
    """
    if photo is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Photo file is required",
        )

    if photo.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Allowed: jpeg, png, webp, gif",
        )

    # Never buffer more than one byte past the limit
    max_bytes = settings.max_photo_size_bytes
    too_large = photo.size is not None and photo.size > max_bytes
    photo_data = b"" if too_large else await photo.read(max_bytes + 1)
    if too_large or len(photo_data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Maximum {settings.max_photo_size_mb}MB.",
        )

    if not item_type or not item_type.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="item_type is required",
        )

    filename = _photo_filename(photo.filename)

    try:
        storage_path = await storage.upload_photo(
            photo_data=photo_data,
            user_id=user.id,
            filename=filename,
            content_type=photo.content_type,
        )
    except StorageError as e:
        logger.error("Storage upload error", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload photo",
        )

    item = ClothingItem(
        user_id=user.id,
        item_type=item_type,
        photo_url=storage_path,
        color=color,
        style_tags=parse_style_tags(style_tags),
        season=season,
    )

    try:
        repository.add_item(item)
    except Exception as e:
        logger.error("DB insert error", extra={"user_id": user.id, "error": str(e)})
        try:
            await storage.delete_photos([storage_path])
        except StorageError as cleanup_error:
            logger.warning(
                "Failed to remove orphaned photo",
                extra={"storage_path": storage_path, "error": str(cleanup_error)}
            )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save clothing item",
        )

    logger.info(
        "Clothing item created",
        extra={"user_id": user.id, "item_id": item.id, "item_type": item.item_type}
    )

    return await build_item_response(item, storage, settings.photo_url_expiry_seconds)


@router.get(
    "",
    response_model=list[ClothingItemResponse],
    status_code=status.HTTP_200_OK,
    summary="List my clothing items",
    description="All items in the caller's wardrobe, newest first.",
)
async def list_clothing_items(
    user: CurrentUser,
    settings: SettingsDep,
    repository: ClothingRepositoryDep,
    storage: StorageClientDep,
) -> list[ClothingItemResponse]:
    try:
        items = repository.list_for_user(user.id)
    except Exception as e:
        logger.error("Failed to fetch clothing items", extra={"user_id": user.id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch clothing items",
        )

    return [
        await build_item_response(item, storage, settings.photo_url_expiry_seconds)
        for item in items
    ]


@router.get(
    "/{item_id}/photo-url",
    response_model=PhotoUrlResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a photo URL",
    description="Issue a fresh presigned URL for an item's photo.",
)
async def get_photo_url(
    item_id: str,
    user: CurrentUser,
    settings: SettingsDep,
    repository: ClothingRepositoryDep,
    storage: StorageClientDep,
) -> PhotoUrlResponse:
    """Used by clients whose earlier URL has expired."""
    try:
        item = repository.get_item(item_id, user.id)
    except ClothingItemNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Clothing item not found",
        )

    try:
        url = await storage.get_presigned_url(
            item.photo_url,
            expiry_seconds=settings.photo_url_expiry_seconds,
        )
    except StorageError as e:
        logger.error(
            "Failed to generate photo URL",
            extra={"item_id": item_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate photo URL",
        )

    return PhotoUrlResponse(url=url, expires_in=settings.photo_url_expiry_seconds)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a clothing item",
    description="Remove an item and its photo. Only the owner can delete.",
    response_class=Response,
)
async def delete_clothing_item(
    item_id: str,
    user: CurrentUser,
    repository: ClothingRepositoryDep,
    storage: StorageClientDep,
) -> Response:
    try:
        item = repository.get_item(item_id, user.id)
    except ClothingItemNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Clothing item not found",
        )

    # Photo first, then the row
    try:
        await storage.delete_photos([item.photo_url])
    except StorageError as e:
        logger.warning(
            "Failed to delete photo",
            extra={"item_id": item_id, "storage_path": item.photo_url, "error": str(e)}
        )

    try:
        repository.delete_item(item_id, user.id)
    except Exception as e:
        logger.error("Failed to delete clothing item", extra={"item_id": item_id, "error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete clothing item",
        )

    logger.info("Clothing item deleted", extra={"user_id": user.id, "item_id": item_id})

    return Response(status_code=status.HTTP_204_NO_CONTENT)
