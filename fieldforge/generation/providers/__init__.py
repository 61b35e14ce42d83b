"""LLM provider adapters for field generation.

Usage:
    from fieldforge.generation.providers import create_client
    client = create_client(ForgeConfig(provider="google"))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...core.exceptions import ConfigurationError
from .anthropic import AnthropicClient
from .base import LLMAPIError, LLMClient, LLMResponse
from .google import GoogleClient
from .openai import OpenAIClient

if TYPE_CHECKING:
    from ...core.config import ForgeConfig


def create_client(config: ForgeConfig) -> LLMClient:
    """Build the adapter named by ``config.provider``.

    SDK clients are created lazily on the first call, so this never needs
    an API key up front.
    """
    if config.provider == "openai":
        return OpenAIClient(api_key=config.api_key, base_url=config.base_url)
    if config.provider == "anthropic":
        return AnthropicClient(api_key=config.api_key)
    if config.provider == "google":
        return GoogleClient(api_key=config.api_key)
    raise ConfigurationError(f"Unknown generation provider: {config.provider!r}")


__all__ = [
    "AnthropicClient",
    "GoogleClient",
    "LLMAPIError",
    "LLMClient",
    "LLMResponse",
    "OpenAIClient",
    "create_client",
]
