"""
Usage normalization module.

Provider usage payloads arrive in whatever shape the upstream adapter
forwards (OpenAI, Anthropic, Google, camelCase GraphQL-style dicts, or SDK
objects). This module reduces them to a single TokenUsage model that the
aggregator attaches to the completed conversation.
"""

from typing import Any, Dict, Optional

from ...models.usage import TokenUsage

_PROMPT_FIELDS = ("prompt_tokens", "promptTokens", "input_tokens", "inputTokens", "prompt_token_count")
_COMPLETION_FIELDS = (
    "completion_tokens", "completionTokens", "output_tokens", "outputTokens", "candidates_token_count"
)
_TOTAL_FIELDS = ("total_tokens", "totalTokens", "total_token_count")


def usage_to_dict(usage_data: Any) -> Dict[str, Any]:
    """Convert an SDK usage object or mapping to a plain dict."""
    if usage_data is None:
        return {}
    if isinstance(usage_data, dict):
        return usage_data
    if hasattr(usage_data, "model_dump"):
        return usage_data.model_dump()
    if hasattr(usage_data, "to_dict"):
        return usage_data.to_dict()
    return dict(getattr(usage_data, "__dict__", {}))


def _first_int(usage: Dict[str, Any], names) -> int:
    for name in names:
        value = usage.get(name)
        if value:
            return int(value)
    return 0


def extract_cache_info(usage: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract cache information from provider usage data.

    Args:
        usage: Raw usage data from provider

    Returns:
        Dict with cache information or empty dict
    """
    cache_info = {}

    # OpenAI cache info in prompt_tokens_details
    details = usage.get("prompt_tokens_details")
    if isinstance(details, dict) and details.get("cached_tokens") is not None:
        cache_info["cached_tokens"] = details["cached_tokens"]
    if usage.get("cached_tokens") is not None:
        cache_info["cached_tokens"] = usage["cached_tokens"]

    # Anthropic cache info (None values come through from SDK objects)
    for name in ("cache_creation_input_tokens", "cache_read_input_tokens"):
        if usage.get(name) is not None:
            cache_info[name] = usage[name]

    # Google
    if usage.get("cached_content_token_count") is not None:
        cache_info["cached_tokens"] = usage["cached_content_token_count"]

    return cache_info


def normalize_usage(
    usage_data: Any,
    model: Optional[str] = None,
    provider: Optional[str] = None,
) -> Optional[TokenUsage]:
    """
    Normalize usage data into a TokenUsage.

    Args:
        usage_data: Raw usage data from provider (dict or SDK object)
        model: Model identifier to attach
        provider: Provider / model service to attach

    Returns:
        TokenUsage, or None when no usage data was given
    """
    usage = usage_to_dict(usage_data)
    if not usage:
        return None

    prompt_tokens = _first_int(usage, _PROMPT_FIELDS)
    completion_tokens = _first_int(usage, _COMPLETION_FIELDS)
    total_tokens = _first_int(usage, _TOTAL_FIELDS)

    # Ensure total_tokens is accurate
    if total_tokens == 0:
        total_tokens = prompt_tokens + completion_tokens

    return TokenUsage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=total_tokens,
        model=model,
        provider=provider,
        cache_info=extract_cache_info(usage),
    )
