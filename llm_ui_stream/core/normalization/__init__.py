"""Normalization layer for provider payloads.

This layer handles:
- Usage data normalization across providers
"""

from .usage import normalize_usage, usage_to_dict

__all__ = ["normalize_usage", "usage_to_dict"]
