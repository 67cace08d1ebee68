"""
Anthropic Claude API client wrapper.

This module provides a thin wrapper around the Anthropic SDK that:
1. Implements our LanguageModelClient protocol
2. Handles API-specific details (message format, content blocks)
3. Provides consistent error handling
4. Enables easy mocking for tests
"""

import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
from anthropic import APIError, RateLimitError

from styleai.core.wardrobe.stylist import LanguageModelClient


logger = logging.getLogger(__name__)


class AnthropicClientError(Exception):
    """Raised when API calls fail."""
    pass


class RateLimitExceeded(AnthropicClientError):
    """Raised when we hit rate limits."""
    pass


@dataclass
class AnthropicConfig:
    """
    Configuration for the Anthropic client.

    Validated at construction so a bad setting fails at request setup,
    not halfway through an API call.
    """
    api_key: str
    model: str = "claude-sonnet-4-6"
    max_tokens: int = 512
    temperature: float = 0.7

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("API key is required")
        if self.max_tokens < 1:
            raise ValueError("max_tokens must be positive")
        if not 0 <= self.temperature <= 1:
            raise ValueError("temperature must be between 0 and 1")


class AnthropicTextClient(LanguageModelClient):
    """
    Implementation of LanguageModelClient using Claude.

    This class knows about Anthropic's API format but nothing about
    clothing. It sends a prompt and hands back the text.
    """

    def __init__(self, config: AnthropicConfig, client: Optional[anthropic.Anthropic] = None) -> None:
        self._config = config
        self._client = client or anthropic.Anthropic(api_key=config.api_key)

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Send a single-turn request to Claude and return its text."""
        if not user_prompt:
            raise ValueError("user_prompt is required")

        try:
            response = self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ],
            )

            return self._extract_text_response(response)

        except RateLimitError as e:
            logger.warning("Rate limit hit", extra={"error": str(e)})
            raise RateLimitExceeded("API rate limit exceeded. Please try again later.")
        except APIError as e:
            logger.error(
                "API error",
                extra={"error": str(e), "status": getattr(e, "status_code", None)}
            )
            raise AnthropicClientError(f"API error: {e.message}")

    def _extract_text_response(self, response) -> str:
        """Extract text content from API response."""
        if not response.content:
            return ""

        text_blocks = [
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        ]

        return "\n".join(text_blocks)
