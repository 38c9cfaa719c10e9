"""Event models for the low-level stream.

This module defines the canonical events a provider translator produces and
the stream aggregator consumes. Every provider's wire format is reduced to
these types before it reaches the UI layer.
"""

from typing import Any, Dict, Mapping, Optional, Type
from dataclasses import dataclass, field

from pydantic import ValidationError

from .tool_calls import ToolCallInfo
from .usage import ContextWindowUsage
from ..errors import InvalidStreamEventError


@dataclass
class StreamEvent:
    """Base class for all stream events."""
    type: str = ""  # Will be set by subclasses
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StreamStartEvent(StreamEvent):
    """Event emitted when a conversation round starts streaming."""
    type: str = field(default="start", init=False)
    conversation_id: str = ""

    def __post_init__(self):
        self.type = "start"


@dataclass
class StreamTokenEvent(StreamEvent):
    """Event emitted for each incremental text fragment."""
    type: str = field(default="token", init=False)
    token: str = ""

    def __post_init__(self):
        self.type = "token"


@dataclass
class StreamMessageEvent(StreamEvent):
    """Authoritative snapshot of the full message so far."""
    type: str = field(default="message", init=False)
    message: str = ""

    def __post_init__(self):
        self.type = "message"


@dataclass
class ToolCallStartEvent(StreamEvent):
    """A tool call has been announced."""
    type: str = field(default="tool_call_start", init=False)
    tool_call: Optional[ToolCallInfo] = None

    def __post_init__(self):
        self.type = "tool_call_start"


@dataclass
class ToolCallDeltaEvent(StreamEvent):
    """A fragment of a tool call's arguments."""
    type: str = field(default="tool_call_delta", init=False)
    tool_call_id: str = ""
    argument_delta: str = ""

    def __post_init__(self):
        self.type = "tool_call_delta"


@dataclass
class ToolCallParsedEvent(StreamEvent):
    """A tool call's arguments are complete and parsed."""
    type: str = field(default="tool_call_parsed", init=False)
    tool_call: Optional[ToolCallInfo] = None

    def __post_init__(self):
        self.type = "tool_call_parsed"


@dataclass
class ToolCallCompleteEvent(StreamEvent):
    """A tool call finished executing (successfully or not)."""
    type: str = field(default="tool_call_complete", init=False)
    tool_call: Optional[ToolCallInfo] = None
    result: Optional[Any] = None
    error: Optional[str] = None

    def __post_init__(self):
        self.type = "tool_call_complete"


@dataclass
class StreamCompleteEvent(StreamEvent):
    """Event emitted when the provider stream completes successfully."""
    type: str = field(default="complete", init=False)
    message_id: Optional[str] = None
    conversation_id: Optional[str] = None
    tokens: Optional[int] = None
    usage: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self.type = "complete"


@dataclass
class StreamErrorEvent(StreamEvent):
    """Event emitted when the provider stream fails."""
    type: str = field(default="error", init=False)
    error: str = ""
    code: Optional[str] = None

    def __post_init__(self):
        self.type = "error"


@dataclass
class ContextWindowEvent(StreamEvent):
    """Context window occupancy update."""
    type: str = field(default="context_window", init=False)
    usage: Optional[ContextWindowUsage] = None

    def __post_init__(self):
        self.type = "context_window"
        if isinstance(self.usage, Mapping):
            self.usage = ContextWindowUsage(**self.usage)


@dataclass
class ReasoningStartEvent(StreamEvent):
    """The model started emitting reasoning / thinking content."""
    type: str = field(default="reasoning_start", init=False)
    format: str = "markdown"

    def __post_init__(self):
        self.type = "reasoning_start"


@dataclass
class ReasoningDeltaEvent(StreamEvent):
    """A fragment of reasoning content."""
    type: str = field(default="reasoning_delta", init=False)
    content: str = ""
    format: str = "markdown"

    def __post_init__(self):
        self.type = "reasoning_delta"


@dataclass
class ReasoningEndEvent(StreamEvent):
    """Reasoning finished; carries the full content and optional signature."""
    type: str = field(default="reasoning_end", init=False)
    full_content: str = ""
    signature: Optional[str] = None

    def __post_init__(self):
        self.type = "reasoning_end"


EVENT_TYPES: Dict[str, Type[StreamEvent]] = {
    "start": StreamStartEvent,
    "token": StreamTokenEvent,
    "message": StreamMessageEvent,
    "tool_call_start": ToolCallStartEvent,
    "tool_call_delta": ToolCallDeltaEvent,
    "tool_call_parsed": ToolCallParsedEvent,
    "tool_call_complete": ToolCallCompleteEvent,
    "complete": StreamCompleteEvent,
    "error": StreamErrorEvent,
    "context_window": ContextWindowEvent,
    "reasoning_start": ReasoningStartEvent,
    "reasoning_delta": ReasoningDeltaEvent,
    "reasoning_end": ReasoningEndEvent,
}

# camelCase keys produced by JSON adapters
_KEY_ALIASES = {
    "conversationId": "conversation_id",
    "toolCall": "tool_call",
    "toolCallId": "tool_call_id",
    "argumentDelta": "argument_delta",
    "messageId": "message_id",
    "fullContent": "full_content",
}

_REQUIRED_FIELDS = {
    "start": ("conversation_id",),
    "token": ("token",),
    "message": ("message",),
    "tool_call_start": ("tool_call",),
    "tool_call_delta": ("tool_call_id", "argument_delta"),
    "tool_call_parsed": ("tool_call",),
    "tool_call_complete": ("tool_call",),
    "error": ("error",),
    "context_window": ("usage",),
}


def _to_tool_call(value: Any, event_type: str) -> ToolCallInfo:
    if isinstance(value, ToolCallInfo):
        return value
    if isinstance(value, Mapping):
        if not value.get("id"):
            raise InvalidStreamEventError(f"'{event_type}' tool call is missing an id", event_type)
        return ToolCallInfo(
            id=str(value["id"]),
            name=value.get("name") or "",
            arguments=value.get("arguments") or "",
        )
    raise InvalidStreamEventError(f"'{event_type}' tool call must be a mapping", event_type)


def parse_stream_event(data: Mapping[str, Any]) -> StreamEvent:
    """Convert a dict-shaped event (camelCase or snake_case keys) to a typed event.

    Typed events are returned as-is once their required fields are checked.

    Raises:
        InvalidStreamEventError: if the type is unknown or a required field is missing
    """
    if isinstance(data, StreamEvent):
        for name in _REQUIRED_FIELDS.get(data.type, ()):
            if getattr(data, name, None) is None:
                raise InvalidStreamEventError(f"'{data.type}' event is missing '{name}'", data.type)
        return data
    if not isinstance(data, Mapping):
        raise InvalidStreamEventError(f"Stream event must be a mapping, got {type(data).__name__}")

    event_type = data.get("type")
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise InvalidStreamEventError(f"Unknown stream event type: {event_type!r}", event_type)

    kwargs = {_KEY_ALIASES.get(key, key): value for key, value in data.items() if key != "type"}

    for name in _REQUIRED_FIELDS.get(event_type, ()):
        if kwargs.get(name) is None:
            raise InvalidStreamEventError(f"'{event_type}' event is missing '{name}'", event_type)

    if "tool_call" in kwargs:
        kwargs["tool_call"] = _to_tool_call(kwargs["tool_call"], event_type)
    if event_type == "context_window" and not isinstance(kwargs["usage"], ContextWindowUsage):
        try:
            kwargs["usage"] = ContextWindowUsage(**kwargs["usage"])
        except (ValidationError, TypeError) as e:
            raise InvalidStreamEventError(f"'context_window' usage is invalid: {e}", event_type) from e

    known = event_cls.__dataclass_fields__
    extra = {key: value for key, value in kwargs.items() if key not in known}
    kwargs = {key: value for key, value in kwargs.items() if key in known and known[key].init}
    if extra:
        kwargs["metadata"] = {**kwargs.get("metadata", {}), **extra}
    return event_cls(**kwargs)
