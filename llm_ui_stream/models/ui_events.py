"""UI-focused events emitted by the stream aggregator.

These are the high-level, paced events a UI renders: conversation lifecycle,
message text updates, tool-call status and context-window occupancy.
"""

from dataclasses import asdict, dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .tool_calls import ToolCallRecord, ToolExecutionStatus
from .usage import ContextWindowUsage, TokenUsage


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StreamMetrics:
    """Timing metrics snapshot. All durations are in milliseconds.

    Attributes:
        elapsed_time: Time since the stream started
        conversation_duration: Time since the aggregator was created
        throughput: Message characters per second over elapsed_time
        ttft: Time to first token, if a token was received
        token_count: Number of token events received
        avg_token_delay: Mean delay between consecutive tokens
        streaming_throughput: Characters per second excluding TTFT
        llm_tokens: Token count reported by the provider on completion
        total_time: Set on the final snapshot only
    """
    elapsed_time: float = 0.0
    conversation_duration: float = 0.0
    throughput: int = 0
    ttft: Optional[float] = None
    token_count: Optional[int] = None
    avg_token_delay: Optional[int] = None
    streaming_throughput: Optional[int] = None
    llm_tokens: Optional[int] = None
    total_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class StreamingMessage:
    """Assistant message as it is being streamed."""
    message: str = ""
    role: str = "assistant"
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())
    id: Optional[str] = None
    model: Optional[str] = None
    model_name: Optional[str] = None
    model_service: Optional[str] = None
    tokens: Optional[int] = None
    throughput: Optional[int] = None
    completion_time: Optional[float] = None  # seconds
    tool_calls: List[ToolCallRecord] = field(default_factory=list)
    reasoning: Optional[str] = None
    reasoning_signature: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            f.name: getattr(self, f.name) for f in fields(self)
            if getattr(self, f.name) is not None and f.name != "tool_calls"
        }
        if self.tool_calls:
            data["tool_calls"] = [tool_call.to_dict() for tool_call in self.tool_calls]
        return data


@dataclass
class ErrorInfo:
    """Error payload of a terminal UI error event."""
    message: str
    code: Optional[str] = None
    recoverable: bool = False


@dataclass
class UIEvent:
    """Base class for all UI events."""
    type: str = ""  # Will be set by subclasses

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, ToolExecutionStatus):
                value = value.value
            elif hasattr(value, "to_dict"):
                value = value.to_dict()
            elif hasattr(value, "model_dump"):
                value = value.model_dump()
            elif is_dataclass(value):
                value = asdict(value)
            data[f.name] = value
        return data


@dataclass
class ConversationStartedEvent(UIEvent):
    """Emitted when a conversation round starts."""
    type: str = field(default="conversation_started", init=False)
    conversation_id: str = ""
    timestamp: datetime = field(default_factory=utc_now)
    model: Optional[str] = None

    def __post_init__(self):
        self.type = "conversation_started"


@dataclass
class MessageUpdateEvent(UIEvent):
    """Emitted at a paced rate while the message text grows."""
    type: str = field(default="message_update", init=False)
    message: StreamingMessage = field(default_factory=StreamingMessage)
    is_streaming: bool = True
    metrics: StreamMetrics = field(default_factory=StreamMetrics)

    def __post_init__(self):
        self.type = "message_update"


@dataclass
class ToolUpdateEvent(UIEvent):
    """Emitted on every tool-call lifecycle transition."""
    type: str = field(default="tool_update", init=False)
    tool_call: Optional[ToolCallRecord] = None
    status: ToolExecutionStatus = ToolExecutionStatus.PREPARING
    result: Optional[Any] = None
    error: Optional[str] = None

    def __post_init__(self):
        self.type = "tool_update"


@dataclass
class ConversationCompletedEvent(UIEvent):
    """Terminal event carrying the final message and metrics."""
    type: str = field(default="conversation_completed", init=False)
    message: StreamingMessage = field(default_factory=StreamingMessage)
    metrics: StreamMetrics = field(default_factory=StreamMetrics)
    context_window: Optional[ContextWindowUsage] = None
    usage: Optional[TokenUsage] = None

    def __post_init__(self):
        self.type = "conversation_completed"


@dataclass
class UIErrorEvent(UIEvent):
    """Terminal event emitted when the upstream stream fails."""
    type: str = field(default="error", init=False)
    error: ErrorInfo = field(default_factory=lambda: ErrorInfo(message=""))
    conversation_id: str = ""
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.type = "error"


@dataclass
class ContextWindowUpdateEvent(UIEvent):
    """Pass-through of the latest context window occupancy."""
    type: str = field(default="context_window", init=False)
    usage: Optional[ContextWindowUsage] = None
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.type = "context_window"


@dataclass
class ReasoningUpdateEvent(UIEvent):
    """Accumulated reasoning content."""
    type: str = field(default="reasoning_update", init=False)
    content: str = ""
    format: str = "markdown"
    is_complete: bool = False

    def __post_init__(self):
        self.type = "reasoning_update"
