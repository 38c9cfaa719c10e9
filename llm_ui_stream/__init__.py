"""
LLM UI Stream - Paced, UI-ready streaming for LLM responses.

This package turns the low-level event stream of an LLM response (token
deltas, tool-call fragments, completion, errors) into events a chat UI
can render directly:
- Character / word / sentence chunking of token deltas
- Smoothed emission of message updates at a fixed cadence
- Tool-call lifecycle tracking (preparing, executing, ready, completed, failed)
- Timing metrics (TTFT, throughput, inter-token delay) and usage normalization

Provider translators for OpenAI, Anthropic and Google streams are included.
"""

__version__ = "0.1.0"

from .config.options import StreamingOptions
from .errors import ChunkingError, InvalidStreamEventError, StreamingError
from .models.events import StreamEvent, parse_stream_event
from .models.tool_calls import ToolCallInfo, ToolCallRecord, ToolExecutionStatus
from .models.ui_events import (
    ContextWindowUpdateEvent,
    ConversationCompletedEvent,
    ConversationStartedEvent,
    MessageUpdateEvent,
    ReasoningUpdateEvent,
    StreamingMessage,
    StreamMetrics,
    ToolUpdateEvent,
    UIErrorEvent,
    UIEvent,
)
from .models.usage import ContextWindowUsage, TokenUsage
from .providers import StreamTranslator, get_translator
from .streaming import SegmentationBuffer, StreamAggregator, StreamingHelper

__all__ = [
    # Core
    "StreamAggregator",
    "SegmentationBuffer",
    "StreamingOptions",
    "StreamingHelper",

    # Input events
    "StreamEvent",
    "parse_stream_event",
    "ToolCallInfo",

    # UI events
    "UIEvent",
    "ConversationStartedEvent",
    "MessageUpdateEvent",
    "ToolUpdateEvent",
    "ConversationCompletedEvent",
    "UIErrorEvent",
    "ContextWindowUpdateEvent",
    "ReasoningUpdateEvent",
    "StreamingMessage",
    "StreamMetrics",
    "ToolCallRecord",
    "ToolExecutionStatus",

    # Usage
    "ContextWindowUsage",
    "TokenUsage",

    # Providers
    "StreamTranslator",
    "get_translator",

    # Errors
    "StreamingError",
    "ChunkingError",
    "InvalidStreamEventError",
]
