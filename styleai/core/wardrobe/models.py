"""
Domain models for wardrobe management.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. Persistence and transport live
in the infrastructure and api layers, which translate to and from these
dataclasses.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StylePreference(Enum):
    """The aesthetics a user can pick during onboarding."""
    CASUAL = "casual"
    STREETWEAR = "streetwear"
    BUSINESS_CASUAL = "business casual"
    SMART_CASUAL = "smart casual"


class Gender(Enum):
    """
    Gender context for styling.

    Men's and women's fashion differ enough that the stylist
    needs to know which conventions apply.
    """
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"
    PREFER_NOT_TO_SAY = "prefer not to say"


class BudgetRange(Enum):
    """Shopping budget, expressed the way the client displays it."""
    LOW = "$"
    MEDIUM = "$$"
    HIGH = "$$$"
    LUXURY = "$$$$"


def option_or_none(value: Any, options: type[Enum]) -> Optional[str]:
    """
    Return value if it is one of the enum's values, otherwise None.

    Unknown options are cleared rather than rejected so a stale client
    can't wedge a profile into an invalid state.
    """
    if not isinstance(value, str):
        return None
    allowed = {option.value for option in options}
    return value if value in allowed else None


def clean_text(value: Any) -> Optional[str]:
    """Trim a free-text field, mapping blank or missing values to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_style_tags(raw: Any) -> list[str]:
    """
    Parse style tags from a form field.

    Accepts a JSON array ('["casual", "striped"]') or a comma-separated
    string ("casual, striped"). If the value looks like JSON but doesn't
    parse, it is kept as a single tag.
    """
    if raw is None or raw == "":
        return []

    if isinstance(raw, list):
        return [str(tag).strip() for tag in raw if str(tag).strip()]

    text = str(raw)
    if text.strip().startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            return [text]
        if not isinstance(parsed, list):
            return [text]
        return [str(tag).strip() for tag in parsed if tag is not None and str(tag).strip()]

    return [tag.strip() for tag in text.split(",") if tag.strip()]


@dataclass
class ClothingItem:
    """
    A single piece of clothing in a user's wardrobe.

    photo_url holds the object storage path, not a public URL.
    Clients get a time-limited URL through the storage layer.
    """
    user_id: str
    item_type: str
    photo_url: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    color: Optional[str] = None
    style_tags: list[str] = field(default_factory=list)
    season: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.item_type or not self.item_type.strip():
            raise ValueError("item_type is required")
        self.item_type = self.item_type.strip()
        self.color = clean_text(self.color)
        self.season = clean_text(self.season)

    def describe(self) -> str:
        """One-line description used when presenting the wardrobe to the stylist."""
        return (
            f"- id: {self.id}, type: {self.item_type}, "
            f"color: {self.color or 'unknown'}, "
            f"style_tags: {json.dumps(self.style_tags)}, "
            f"season: {self.season or 'all'}"
        )


@dataclass
class UserProfile:
    """Styling preferences and sizes for one user."""
    user_id: str
    style_preference: Optional[str] = None
    gender: Optional[str] = None
    body_type: Optional[str] = None
    size_top: Optional[str] = None
    size_bottom: Optional[str] = None
    size_shoes: Optional[str] = None
    budget_range: Optional[str] = None
    updated_at: datetime = field(default_factory=_utcnow)

    def merge(self, changes: dict[str, Any]) -> "UserProfile":
        """
        Return a new profile with a partial update applied.

        Only keys present in changes are touched. Enumerated fields
        outside their option set become None; free-text fields are
        trimmed and blank values become None.
        """
        merged = UserProfile(
            user_id=self.user_id,
            style_preference=self.style_preference,
            gender=self.gender,
            body_type=self.body_type,
            size_top=self.size_top,
            size_bottom=self.size_bottom,
            size_shoes=self.size_shoes,
            budget_range=self.budget_range,
        )

        if "style_preference" in changes:
            merged.style_preference = option_or_none(changes["style_preference"], StylePreference)
        if "gender" in changes:
            merged.gender = option_or_none(changes["gender"], Gender)
        if "budget_range" in changes:
            merged.budget_range = option_or_none(changes["budget_range"], BudgetRange)

        for name in ("body_type", "size_top", "size_bottom", "size_shoes"):
            if name in changes:
                setattr(merged, name, clean_text(changes[name]))

        return merged


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

DEFAULT_TEMPERATURE_CELSIUS = 15.0

# Countries that read temperatures in Fahrenheit
FAHRENHEIT_COUNTRIES = frozenset({"US"})


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (-2.5 becomes -2)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class WeatherReport:
    """Current conditions for a city, already in the user's display unit."""
    city: str
    temperature: int
    unit: str
    condition: str = "Unknown"
    description: str = "No description"

    def __post_init__(self) -> None:
        if self.unit not in ("C", "F"):
            raise ValueError("unit must be 'C' or 'F'")

    @classmethod
    def from_celsius(
        cls,
        city: str,
        temp_celsius: Optional[float],
        country: Optional[str] = None,
        condition: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "WeatherReport":
        """
        Build a report from metric readings.

        US locations are converted to Fahrenheit; everywhere else stays
        in Celsius. A missing reading falls back to a mild 15 C.
        """
        celsius = DEFAULT_TEMPERATURE_CELSIUS if temp_celsius is None else temp_celsius

        if country in FAHRENHEIT_COUNTRIES:
            temperature = round_half_up(celsius * 9 / 5 + 32)
            unit = "F"
        else:
            temperature = round_half_up(celsius)
            unit = "C"

        return cls(
            city=city,
            temperature=temperature,
            unit=unit,
            condition=condition or "Unknown",
            description=description or "No description",
        )


# ---------------------------------------------------------------------------
# Outfits
# ---------------------------------------------------------------------------

@dataclass
class OutfitSuggestion:
    """
    A validated outfit: wardrobe items in the stylist's order plus its reasoning.

    Only items that exist in the user's wardrobe ever make it in here.
    """
    items: list[ClothingItem]
    explanation: str

    @property
    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]
