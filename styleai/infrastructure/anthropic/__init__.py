"""
Anthropic Claude API client wrapper.

Implements the LanguageModelClient protocol from core.wardrobe.stylist.
"""

from .client import (
    AnthropicClientError,
    AnthropicConfig,
    AnthropicTextClient,
    RateLimitExceeded,
)

__all__ = [
    "AnthropicClientError",
    "AnthropicConfig",
    "AnthropicTextClient",
    "RateLimitExceeded",
]
