"""
Provider Stream Translators

This layer turns provider-specific streaming chunks into the canonical
stream events consumed by StreamAggregator. Each translator reads SDK
objects or dicts duck-typed; provider SDKs are never imported here.
"""

from typing import Dict, Type

from .anthropic import AnthropicStreamTranslator
from .base import StreamTranslator
from .google import GoogleStreamTranslator
from .openai import OpenAIStreamTranslator

TRANSLATORS: Dict[str, Type[StreamTranslator]] = {
    "openai": OpenAIStreamTranslator,
    "anthropic": AnthropicStreamTranslator,
    "google": GoogleStreamTranslator,
    # OpenAI-compatible APIs
    "groq": OpenAIStreamTranslator,
    "deepseek": OpenAIStreamTranslator,
    "xai": OpenAIStreamTranslator,
    "gemini": GoogleStreamTranslator,
}


def get_translator(provider: str) -> StreamTranslator:
    """
    Create a fresh translator for a provider.

    Args:
        provider: Provider name (case-insensitive)

    Returns:
        New StreamTranslator instance

    Raises:
        ValueError: If the provider has no translator
    """
    translator_cls = TRANSLATORS.get((provider or "").lower())
    if translator_cls is None:
        raise ValueError(
            f"No stream translator for provider '{provider}'. "
            f"Available: {', '.join(sorted(TRANSLATORS))}"
        )
    return translator_cls()


__all__ = [
    "StreamTranslator",
    "OpenAIStreamTranslator",
    "AnthropicStreamTranslator",
    "GoogleStreamTranslator",
    "TRANSLATORS",
    "get_translator",
]
