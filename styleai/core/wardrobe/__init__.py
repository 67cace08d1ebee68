"""
Wardrobe and outfit styling logic.

Contains the domain models, profile rules and the stylist service.
"""

from .models import (
    BudgetRange,
    ClothingItem,
    Gender,
    OutfitSuggestion,
    StylePreference,
    UserProfile,
    WeatherReport,
    parse_style_tags,
)
from .stylist import LanguageModelClient, OutfitGenerationError, OutfitStylist

__all__ = [
    "BudgetRange",
    "ClothingItem",
    "Gender",
    "OutfitSuggestion",
    "StylePreference",
    "UserProfile",
    "WeatherReport",
    "parse_style_tags",
    "LanguageModelClient",
    "OutfitGenerationError",
    "OutfitStylist",
]
