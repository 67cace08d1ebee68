"""
Outfit styling logic and prompt management.

This module contains the "stylist brain": it turns a wardrobe, the current
weather and the user's preferences into a prompt, asks a language model for
an outfit, and validates what comes back. It's framework-agnostic and
doesn't know about HTTP or databases.

The prompts are here, not in config, because they're core business logic.
Changing them changes what the product does.
"""

import json
import logging
import re
from typing import Any, Optional, Protocol

from .models import ClothingItem, OutfitSuggestion, UserProfile, WeatherReport


logger = logging.getLogger(__name__)


class OutfitGenerationError(Exception):
    """Raised when the model's reply can't be turned into an outfit."""
    pass


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class LanguageModelClient(Protocol):
    """
    Interface for text LLM clients.

    The stylist doesn't know or care whether we're using Claude or a
    stub in tests. It just needs something that answers a prompt.
    """

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return the model's text reply."""
        ...


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """You are a fashion stylist. You suggest complete outfits using only the clothing a person already owns, and you always answer in the exact JSON format you are asked for."""


STYLE_CONTEXT_TEMPLATE = "\nUSER STYLE PREFERENCE: {style}. Prioritize pieces that match this aesthetic."

GENDER_CONTEXT_TEMPLATE = (
    "\nUSER GENDER: {gender}. Men's and women's fashion differ significantly; "
    "choose pieces and styling appropriate for this context."
)

BODY_CONTEXT_TEMPLATE = "\nUSER BODY TYPE: {body_type}. Consider proportion and fit for this body type."


OUTFIT_USER_PROMPT_TEMPLATE = """Suggest a complete outfit from the user's wardrobe below.
{profile_context}

WARDROBE (each item has an id - use these exact IDs in your response):
{wardrobe}

CURRENT WEATHER:
- City: {city}
- Temperature: {temperature}°{unit}
- Condition: {condition}
- Description: {description}

RULES:
1. Use color theory: complementary, analogous, or monochromatic schemes.
2. Apply layering principles for the temperature (add layers if cold, lighter if warm).
3. Respect proportion rules: balance fitted and loose pieces.
4. Ensure the outfit is complete (e.g. top + bottom + optional outerwear/accessories).
5. Consider the weather when selecting items (e.g. coat for cold, shorts for heat).

Respond with ONLY a valid JSON object, no other text:
{{
  "item_ids": ["uuid1", "uuid2", ...],
  "explanation": "2-3 sentences explaining why this outfit works (color harmony, layering, proportion, weather appropriateness)"
}}

Pick only IDs that exist in the wardrobe list. Return valid JSON only."""


DEFAULT_EXPLANATION = "No explanation provided."

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


# ---------------------------------------------------------------------------
# Stylist Service
# ---------------------------------------------------------------------------

class OutfitStylist:
    """
    The styling service that builds prompts and validates model output.

    Like the other core services, it holds no state beyond its model
    client, so one instance per request is fine.
    """

    def __init__(self, model_client: LanguageModelClient) -> None:
        self._model_client = model_client

    async def suggest_outfit(
        self,
        wardrobe: list[ClothingItem],
        weather: WeatherReport,
        profile: Optional[UserProfile] = None,
    ) -> OutfitSuggestion:
        """
        Ask the model for an outfit and return only the pieces that exist.

        Raises OutfitGenerationError if the model returns nothing usable.
        """
        if not wardrobe:
            raise ValueError("Wardrobe must contain at least one item")

        user_prompt = self.build_prompt(wardrobe, weather, profile)

        raw_response = await self._model_client.complete(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=user_prompt,
        )

        return self.parse_response(raw_response, wardrobe)

    def build_prompt(
        self,
        wardrobe: list[ClothingItem],
        weather: WeatherReport,
        profile: Optional[UserProfile] = None,
    ) -> str:
        """Render the outfit request for this wardrobe, weather and profile."""
        return OUTFIT_USER_PROMPT_TEMPLATE.format(
            profile_context=self._build_profile_context(profile),
            wardrobe="\n".join(item.describe() for item in wardrobe),
            city=weather.city,
            temperature=weather.temperature,
            unit=weather.unit,
            condition=weather.condition,
            description=weather.description,
        )

    def parse_response(
        self,
        raw_response: str,
        wardrobe: list[ClothingItem],
    ) -> OutfitSuggestion:
        """
        Validate the model's reply against the wardrobe.

        The reply may be wrapped in prose or markdown fences, so we take
        the outermost {...} span. Unknown ids are dropped, the model's
        order is kept and repeats are ignored.
        """
        if not raw_response or not raw_response.strip():
            raise OutfitGenerationError("Outfit generator returned no content")

        parsed = self._extract_json(raw_response)

        raw_ids = parsed.get("item_ids")
        if not isinstance(raw_ids, list):
            raw_ids = []

        explanation = parsed.get("explanation")
        if not isinstance(explanation, str) or not explanation.strip():
            explanation = DEFAULT_EXPLANATION

        by_id = {item.id: item for item in wardrobe}
        chosen: list[ClothingItem] = []
        seen: set[str] = set()

        for item_id in raw_ids:
            if not isinstance(item_id, str) or item_id in seen:
                continue
            item = by_id.get(item_id)
            if item is None:
                logger.warning("Model suggested unknown item", extra={"item_id": item_id})
                continue
            seen.add(item_id)
            chosen.append(item)

        return OutfitSuggestion(items=chosen, explanation=explanation.strip())

    def _extract_json(self, raw_response: str) -> dict[str, Any]:
        """Pull the first-to-last brace span out of the reply and parse it."""
        match = _JSON_OBJECT.search(raw_response)
        if not match:
            logger.error("No JSON object in model response", extra={"response": raw_response[:200]})
            raise OutfitGenerationError("Invalid response from outfit generator")

        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.error("Model response JSON parse error", extra={"error": str(e)})
            raise OutfitGenerationError("Invalid response from outfit generator")

        if not isinstance(parsed, dict):
            raise OutfitGenerationError("Invalid response from outfit generator")

        return parsed

    def _build_profile_context(self, profile: Optional[UserProfile]) -> str:
        if profile is None:
            return ""

        context = ""
        if profile.style_preference:
            context += STYLE_CONTEXT_TEMPLATE.format(style=profile.style_preference)
        if profile.gender:
            context += GENDER_CONTEXT_TEMPLATE.format(gender=profile.gender)
        if profile.body_type:
            context += BODY_CONTEXT_TEMPLATE.format(body_type=profile.body_type)
        return context
