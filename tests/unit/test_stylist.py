"""
Unit tests for the outfit stylist.

A fake language model stands in for Claude, so these tests cover prompt
construction and reply validation without network access.
"""

import pytest

from styleai.core.wardrobe.models import ClothingItem, UserProfile, WeatherReport
from styleai.core.wardrobe.stylist import (
    DEFAULT_EXPLANATION,
    SYSTEM_PROMPT,
    OutfitGenerationError,
    OutfitStylist,
)


class FakeModelClient:
    """Returns a canned reply and records what it was asked."""

    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.reply


@pytest.fixture
def wardrobe() -> list[ClothingItem]:
    return [
        ClothingItem(id="shirt-1", user_id="user-1", item_type="shirt", color="white"),
        ClothingItem(id="pants-1", user_id="user-1", item_type="pants", color="navy"),
        ClothingItem(id="coat-1", user_id="user-1", item_type="coat", season="winter"),
    ]


@pytest.fixture
def weather() -> WeatherReport:
    return WeatherReport(
        city="London",
        temperature=9,
        unit="C",
        condition="Rain",
        description="light rain",
    )


# ---------------------------------------------------------------------------
# Prompt Construction
# ---------------------------------------------------------------------------

class TestBuildPrompt:

    def test_prompt_lists_every_item(self, wardrobe, weather):
        prompt = OutfitStylist(FakeModelClient("")).build_prompt(wardrobe, weather)

        for item in wardrobe:
            assert item.describe() in prompt

    def test_prompt_includes_weather(self, wardrobe, weather):
        prompt = OutfitStylist(FakeModelClient("")).build_prompt(wardrobe, weather)

        assert "- City: London" in prompt
        assert "- Temperature: 9°C" in prompt
        assert "- Condition: Rain" in prompt
        assert "- Description: light rain" in prompt

    def test_prompt_asks_for_json(self, wardrobe, weather):
        prompt = OutfitStylist(FakeModelClient("")).build_prompt(wardrobe, weather)

        assert '"item_ids"' in prompt
        assert "Return valid JSON only." in prompt

    def test_profile_context_only_for_set_fields(self, wardrobe, weather):
        profile = UserProfile(user_id="user-1", style_preference="streetwear", body_type="tall")

        prompt = OutfitStylist(FakeModelClient("")).build_prompt(wardrobe, weather, profile)

        assert "USER STYLE PREFERENCE: streetwear" in prompt
        assert "USER BODY TYPE: tall" in prompt
        assert "USER GENDER" not in prompt

    def test_no_profile_means_no_context(self, wardrobe, weather):
        prompt = OutfitStylist(FakeModelClient("")).build_prompt(wardrobe, weather, None)

        assert "USER STYLE PREFERENCE" not in prompt


# ---------------------------------------------------------------------------
# Reply Validation
# ---------------------------------------------------------------------------

class TestParseResponse:

    def test_plain_json_reply(self, wardrobe):
        stylist = OutfitStylist(FakeModelClient(""))

        suggestion = stylist.parse_response(
            '{"item_ids": ["shirt-1", "pants-1"], "explanation": "Crisp and simple."}',
            wardrobe,
        )

        assert suggestion.item_ids == ["shirt-1", "pants-1"]
        assert suggestion.explanation == "Crisp and simple."

    def test_json_inside_markdown_fence(self, wardrobe):
        reply = 'Here you go:\n```json\n{"item_ids": ["coat-1"], "explanation": "Warm."}\n```'

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.item_ids == ["coat-1"]

    def test_unknown_ids_are_dropped_and_order_kept(self, wardrobe):
        reply = '{"item_ids": ["pants-1", "ghost", "shirt-1"], "explanation": "Ok."}'

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.item_ids == ["pants-1", "shirt-1"]

    def test_duplicate_ids_are_removed(self, wardrobe):
        reply = '{"item_ids": ["shirt-1", "shirt-1", "pants-1"], "explanation": "Ok."}'

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.item_ids == ["shirt-1", "pants-1"]

    def test_non_string_ids_are_ignored(self, wardrobe):
        reply = '{"item_ids": [1, null, "coat-1"], "explanation": "Ok."}'

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.item_ids == ["coat-1"]

    def test_non_list_item_ids_means_empty_outfit(self, wardrobe):
        reply = '{"item_ids": "shirt-1", "explanation": "Ok."}'

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.items == []

    @pytest.mark.parametrize("explanation", ['null', '42', '"   "'])
    def test_unusable_explanation_falls_back(self, wardrobe, explanation):
        reply = '{"item_ids": ["shirt-1"], "explanation": %s}' % explanation

        suggestion = OutfitStylist(FakeModelClient("")).parse_response(reply, wardrobe)

        assert suggestion.explanation == DEFAULT_EXPLANATION

    def test_empty_reply_is_an_error(self, wardrobe):
        with pytest.raises(OutfitGenerationError, match="returned no content"):
            OutfitStylist(FakeModelClient("")).parse_response("   ", wardrobe)

    def test_reply_without_json_is_an_error(self, wardrobe):
        with pytest.raises(OutfitGenerationError, match="Invalid response"):
            OutfitStylist(FakeModelClient("")).parse_response("Wear the coat.", wardrobe)

    def test_broken_json_is_an_error(self, wardrobe):
        with pytest.raises(OutfitGenerationError, match="Invalid response"):
            OutfitStylist(FakeModelClient("")).parse_response('{"item_ids": ["a",}', wardrobe)


# ---------------------------------------------------------------------------
# End to End (with fake model)
# ---------------------------------------------------------------------------

class TestSuggestOutfit:

    @pytest.mark.asyncio
    async def test_sends_system_and_user_prompt(self, wardrobe, weather):
        client = FakeModelClient('{"item_ids": ["coat-1"], "explanation": "Rain."}')

        suggestion = await OutfitStylist(client).suggest_outfit(wardrobe, weather)

        assert suggestion.item_ids == ["coat-1"]
        assert len(client.calls) == 1
        system_prompt, user_prompt = client.calls[0]
        assert system_prompt == SYSTEM_PROMPT
        assert "coat-1" in user_prompt

    @pytest.mark.asyncio
    async def test_empty_wardrobe_is_rejected_before_calling_model(self, weather):
        client = FakeModelClient("{}")

        with pytest.raises(ValueError):
            await OutfitStylist(client).suggest_outfit([], weather)

        assert client.calls == []
