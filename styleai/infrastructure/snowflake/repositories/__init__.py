"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .clothing import ClothingItemNotFoundError, ClothingItemRepository
from .profiles import UserProfileRepository
from .usage_limits import UsageLimitRepository

__all__ = [
    "ClothingItemNotFoundError",
    "ClothingItemRepository",
    "UserProfileRepository",
    "UsageLimitRepository",
]
