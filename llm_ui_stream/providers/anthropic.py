"""Anthropic messages stream translator."""

from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..models.events import (
    ReasoningDeltaEvent,
    ReasoningEndEvent,
    ReasoningStartEvent,
    StreamCompleteEvent,
    StreamEvent,
    StreamTokenEvent,
    ToolCallDeltaEvent,
    ToolCallParsedEvent,
    ToolCallStartEvent,
)
from ..models.tool_calls import ToolCallInfo
from .base import StreamTranslator, get_field

THINKING_FORMAT = "thinking_tag"


class AnthropicStreamTranslator(StreamTranslator):
    """
    Translate Anthropic ``messages.create(stream=True)`` events.

    Content blocks are tracked by index: ``thinking`` blocks become
    reasoning events, ``tool_use`` blocks become tool-call events and
    ``text`` deltas become tokens. Usage from ``message_start`` and
    ``message_delta`` is merged; ``message_stop`` completes the stream.
    """

    provider = "anthropic"

    def __init__(self):
        super().__init__()
        self._blocks: Dict[int, Dict[str, Any]] = {}
        self._last_tool: Optional[ToolCallInfo] = None
        self.message_id: Optional[str] = None
        self.stop_reason: Optional[str] = None

    def reset(self) -> None:
        super().reset()
        self._blocks = {}
        self._last_tool = None
        self.message_id = None
        self.stop_reason = None

    def translate(self, chunk: Any) -> List[StreamEvent]:
        event_type = get_field(chunk, "type")

        if event_type == "message_start":
            message = get_field(chunk, "message")
            self.message_id = get_field(message, "id")
            usage = get_field(message, "usage")
            if usage:
                self._merge_usage(usage)
            return []

        if event_type == "content_block_start":
            return self._block_start(get_field(chunk, "index", 0), get_field(chunk, "content_block"))

        if event_type == "content_block_delta":
            return self._block_delta(get_field(chunk, "index", 0), get_field(chunk, "delta"))

        if event_type == "content_block_stop":
            return self._block_stop(get_field(chunk, "index", 0))

        if event_type == "message_delta":
            usage = get_field(chunk, "usage")
            if usage:
                self._merge_usage(usage)
            self.stop_reason = get_field(get_field(chunk, "delta"), "stop_reason") or self.stop_reason
            return []

        if event_type == "message_stop":
            return self.finish()

        return []

    def finish(self) -> List[StreamEvent]:
        if self.finished:
            return []
        self.finished = True
        return [StreamCompleteEvent(message_id=self.message_id, usage=self.usage)]

    def _block_start(self, index: int, block: Any) -> List[StreamEvent]:
        block_type = get_field(block, "type")
        state: Dict[str, Any] = {"type": block_type}
        self._blocks[index] = state

        if block_type == "thinking":
            state["thinking"] = ""
            state["signature"] = ""
            return [ReasoningStartEvent(format=THINKING_FORMAT)]

        if block_type == "tool_use":
            info = ToolCallInfo(id=get_field(block, "id", ""), name=get_field(block, "name", ""))
            state["tool"] = info
            self._last_tool = info
            return [ToolCallStartEvent(tool_call=replace(info))]

        return []

    def _block_delta(self, index: int, delta: Any) -> List[StreamEvent]:
        delta_type = get_field(delta, "type")
        state = self._blocks.get(index, {})

        if delta_type == "text_delta":
            text = get_field(delta, "text")
            return [StreamTokenEvent(token=text)] if text else []

        if delta_type == "thinking_delta":
            thinking = get_field(delta, "thinking") or ""
            state["thinking"] = state.get("thinking", "") + thinking
            return [ReasoningDeltaEvent(content=thinking, format=THINKING_FORMAT)] if thinking else []

        if delta_type == "signature_delta":
            state["signature"] = state.get("signature", "") + (get_field(delta, "signature") or "")
            return []

        if delta_type == "input_json_delta":
            tool = state.get("tool") or self._last_tool
            partial = get_field(delta, "partial_json") or ""
            if tool is None or not partial:
                return []
            tool.arguments += partial
            return [ToolCallDeltaEvent(tool_call_id=tool.id, argument_delta=partial)]

        return []

    def _block_stop(self, index: int) -> List[StreamEvent]:
        state = self._blocks.pop(index, None)
        if state is None:
            return []

        if state["type"] == "thinking":
            return [ReasoningEndEvent(
                full_content=state.get("thinking", ""),
                signature=state.get("signature") or None,
            )]

        if state["type"] == "tool_use":
            tool = replace(state["tool"])
            # Tools without input stream no JSON at all
            tool.arguments = tool.arguments or "{}"
            return [ToolCallParsedEvent(tool_call=tool)]

        return []
