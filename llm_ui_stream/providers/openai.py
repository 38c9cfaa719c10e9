"""OpenAI chat-completions stream translator (also serves OpenAI-compatible APIs)."""

import uuid
from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..models.events import (
    StreamCompleteEvent,
    StreamEvent,
    StreamTokenEvent,
    ToolCallDeltaEvent,
    ToolCallParsedEvent,
    ToolCallStartEvent,
)
from ..models.tool_calls import ToolCallInfo
from .base import StreamTranslator, get_field

_TOOL_FINISH_REASONS = ("tool_calls", "function_call")


class OpenAIStreamTranslator(StreamTranslator):
    """Translate ``chat.completions`` chunks (``choices[0].delta``) into stream events."""

    provider = "openai"

    def __init__(self):
        super().__init__()
        self._tool_calls: Dict[int, ToolCallInfo] = {}
        self._tools_parsed = False
        self.message_id: Optional[str] = None
        self.finish_reason: Optional[str] = None

    def reset(self) -> None:
        super().reset()
        self._tool_calls = {}
        self._tools_parsed = False
        self.message_id = None
        self.finish_reason = None

    def translate(self, chunk: Any) -> List[StreamEvent]:
        events: List[StreamEvent] = []

        if self.message_id is None:
            self.message_id = get_field(chunk, "id")

        # Usage arrives on the final chunk (Groq nests it under x_groq)
        usage = get_field(chunk, "usage") or get_field(get_field(chunk, "x_groq"), "usage")
        if usage:
            self._merge_usage(usage)

        choices = get_field(chunk, "choices") or []
        if not choices:
            return events

        choice = choices[0]
        delta = get_field(choice, "delta")

        content = get_field(delta, "content")
        if content:
            events.append(StreamTokenEvent(token=content))

        for tool_delta in get_field(delta, "tool_calls") or []:
            events.extend(self._translate_tool_delta(tool_delta))

        finish_reason = get_field(choice, "finish_reason")
        if finish_reason:
            self.finish_reason = finish_reason
            if finish_reason in _TOOL_FINISH_REASONS:
                events.extend(self._parsed_events())

        return events

    def finish(self) -> List[StreamEvent]:
        if self.finished:
            return []
        self.finished = True

        events = self._parsed_events()
        events.append(StreamCompleteEvent(message_id=self.message_id, usage=self.usage))
        return events

    def _translate_tool_delta(self, tool_delta: Any) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        index = get_field(tool_delta, "index", 0) or 0
        function = get_field(tool_delta, "function")
        name = get_field(function, "name")

        info = self._tool_calls.get(index)
        if info is None:
            info = ToolCallInfo(
                id=get_field(tool_delta, "id") or f"tool_{uuid.uuid4().hex[:12]}_{index}",
                name=name or "",
            )
            self._tool_calls[index] = info
            events.append(ToolCallStartEvent(tool_call=replace(info)))
        elif name:
            info.name = name

        arguments = get_field(function, "arguments")
        if arguments:
            info.arguments += arguments
            events.append(ToolCallDeltaEvent(tool_call_id=info.id, argument_delta=arguments))
        return events

    def _parsed_events(self) -> List[StreamEvent]:
        if self._tools_parsed or not self._tool_calls:
            return []
        self._tools_parsed = True
        return [
            ToolCallParsedEvent(tool_call=replace(self._tool_calls[index]))
            for index in sorted(self._tool_calls)
        ]
