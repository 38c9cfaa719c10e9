"""
Streaming configuration models.

This module provides the construction-time options for the stream
aggregator: smoothing, chunking strategy, pacing delay and model metadata.
"""

import os
from typing import Any, Callable, Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .constants import (
    CHUNKING_STRATEGIES,
    CHUNKING_STRATEGY_ALIASES,
    DEFAULT_CHUNKING_STRATEGY,
    DEFAULT_SMOOTHING_DELAY_MS,
    DEFAULT_TOOL_RESULT_SEPARATOR,
    ENV_PREFIX,
    MAX_BUFFER_NO_BREAK,
    MAX_WORD_LENGTH,
)

# A custom chunker receives the whole buffer and returns (chunks, remainder)
CustomChunker = Callable[[str], Any]
ChunkingStrategy = Union[str, CustomChunker]

_TRUE_VALUES = {"1", "true", "yes", "on"}


def normalize_chunking_strategy(strategy: ChunkingStrategy) -> ChunkingStrategy:
    """Return the canonical strategy name, or the callable unchanged."""
    if callable(strategy):
        return strategy
    if not isinstance(strategy, str):
        raise ValueError(f"Chunking strategy must be a string or callable, got {type(strategy).__name__}")

    name = strategy.strip().lower()
    name = CHUNKING_STRATEGY_ALIASES.get(name, name)
    if name not in CHUNKING_STRATEGIES:
        raise ValueError(
            f"Unknown chunking strategy '{strategy}'. "
            f"Expected one of {', '.join(CHUNKING_STRATEGIES)} or a callable"
        )
    return name


class StreamingOptions(BaseModel):
    """
    Options for UI-focused streaming.

    Smoothing queues text into chunks and paces their emission so that the
    UI receives at most one message update per ``smoothing_delay`` ms.
    """
    smoothing_enabled: bool = Field(default=True, description="Chunk and pace text; False passes raw tokens through")
    chunking_strategy: ChunkingStrategy = Field(
        default=DEFAULT_CHUNKING_STRATEGY,
        description="'character', 'word', 'sentence' or a custom chunker callable"
    )
    smoothing_delay: float = Field(
        default=DEFAULT_SMOOTHING_DELAY_MS, ge=0.0,
        description="Minimum interval between message updates in milliseconds"
    )

    # Opaque metadata attached to emitted messages
    model: Optional[str] = Field(None, description="Model identifier")
    model_name: Optional[str] = Field(None, description="Provider model name")
    model_service: Optional[str] = Field(None, description="Model service / provider")

    # Segmentation thresholds
    max_word_length: int = Field(default=MAX_WORD_LENGTH, ge=1, description="Force-flush words longer than this")
    max_buffer_no_break: int = Field(
        default=MAX_BUFFER_NO_BREAK, ge=1,
        description="Force a break after this many characters without whitespace"
    )

    tool_result_separator: str = Field(
        default=DEFAULT_TOOL_RESULT_SEPARATOR,
        description="Inserted before content that resumes after tool calls"
    )
    debug: bool = Field(default=False, description="Verbose debug logging")

    model_config = {"arbitrary_types_allowed": True, "protected_namespaces": ()}

    @field_validator('chunking_strategy', mode='before')
    def validate_chunking_strategy(cls, v):
        return normalize_chunking_strategy(v)

    @property
    def uses_custom_chunker(self) -> bool:
        return callable(self.chunking_strategy)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides) -> "StreamingOptions":
        """
        Build options from environment variables (and a .env file if present).

        Recognized variables (with the default prefix): LLM_UI_STREAM_SMOOTHING_ENABLED,
        LLM_UI_STREAM_CHUNKING_STRATEGY, LLM_UI_STREAM_SMOOTHING_DELAY,
        LLM_UI_STREAM_MAX_WORD_LENGTH, LLM_UI_STREAM_MAX_BUFFER_NO_BREAK and
        LLM_UI_STREAM_DEBUG. Keyword overrides win over the environment.
        """
        load_dotenv()

        values: Dict[str, Any] = {}
        enabled = os.getenv(f"{prefix}SMOOTHING_ENABLED")
        if enabled is not None:
            values["smoothing_enabled"] = enabled.strip().lower() in _TRUE_VALUES
        strategy = os.getenv(f"{prefix}CHUNKING_STRATEGY")
        if strategy:
            values["chunking_strategy"] = strategy
        delay = os.getenv(f"{prefix}SMOOTHING_DELAY")
        if delay:
            values["smoothing_delay"] = float(delay)
        max_word = os.getenv(f"{prefix}MAX_WORD_LENGTH")
        if max_word:
            values["max_word_length"] = int(max_word)
        max_no_break = os.getenv(f"{prefix}MAX_BUFFER_NO_BREAK")
        if max_no_break:
            values["max_buffer_no_break"] = int(max_no_break)
        debug = os.getenv(f"{prefix}DEBUG")
        if debug is not None:
            values["debug"] = debug.strip().lower() in _TRUE_VALUES

        values.update(overrides)
        return cls(**values)
