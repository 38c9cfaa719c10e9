"""Data models for stream events, UI events, tool calls and usage."""

from .events import (
    ContextWindowEvent,
    ReasoningDeltaEvent,
    ReasoningEndEvent,
    ReasoningStartEvent,
    StreamCompleteEvent,
    StreamErrorEvent,
    StreamEvent,
    StreamMessageEvent,
    StreamStartEvent,
    StreamTokenEvent,
    ToolCallCompleteEvent,
    ToolCallDeltaEvent,
    ToolCallParsedEvent,
    ToolCallStartEvent,
    parse_stream_event,
)
from .tool_calls import ToolCallInfo, ToolCallRecord, ToolExecutionStatus
from .ui_events import (
    ContextWindowUpdateEvent,
    ConversationCompletedEvent,
    ConversationStartedEvent,
    ErrorInfo,
    MessageUpdateEvent,
    ReasoningUpdateEvent,
    StreamingMessage,
    StreamMetrics,
    ToolUpdateEvent,
    UIErrorEvent,
    UIEvent,
)
from .usage import ContextWindowUsage, TokenUsage

__all__ = [
    # Stream events
    "StreamEvent",
    "StreamStartEvent",
    "StreamTokenEvent",
    "StreamMessageEvent",
    "ToolCallStartEvent",
    "ToolCallDeltaEvent",
    "ToolCallParsedEvent",
    "ToolCallCompleteEvent",
    "StreamCompleteEvent",
    "StreamErrorEvent",
    "ContextWindowEvent",
    "ReasoningStartEvent",
    "ReasoningDeltaEvent",
    "ReasoningEndEvent",
    "parse_stream_event",
    
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
    "ErrorInfo",
    
    # Tool calls and usage
    "ToolCallInfo",
    "ToolCallRecord",
    "ToolExecutionStatus",
    "ContextWindowUsage",
    "TokenUsage",
]
