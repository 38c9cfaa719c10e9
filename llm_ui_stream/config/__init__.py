"""Configuration for streaming behaviour."""

from .constants import (
    DEFAULT_SMOOTHING_DELAY_MS,
    MAX_BUFFER_NO_BREAK,
    MAX_WORD_LENGTH,
)
from .options import StreamingOptions, normalize_chunking_strategy

__all__ = [
    "StreamingOptions",
    "normalize_chunking_strategy",
    "DEFAULT_SMOOTHING_DELAY_MS",
    "MAX_BUFFER_NO_BREAK",
    "MAX_WORD_LENGTH",
]
