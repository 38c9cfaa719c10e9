"""Google Gemini stream translator."""

import json
import uuid
from typing import Any, List, Mapping

from ..models.events import (
    ReasoningDeltaEvent,
    ReasoningEndEvent,
    ReasoningStartEvent,
    StreamCompleteEvent,
    StreamEvent,
    StreamTokenEvent,
    ToolCallParsedEvent,
    ToolCallStartEvent,
)
from ..models.tool_calls import ToolCallInfo
from .base import StreamTranslator, get_field


class GoogleStreamTranslator(StreamTranslator):
    """
    Translate Gemini ``generate_content_stream`` responses.

    Gemini delivers function calls whole, so each one yields a
    ``tool_call_start`` immediately followed by ``tool_call_parsed``.
    Parts flagged ``thought`` are reported as reasoning.
    """

    provider = "google"

    def __init__(self):
        super().__init__()
        self._thinking = ""
        self._in_thought = False

    def reset(self) -> None:
        super().reset()
        self._thinking = ""
        self._in_thought = False

    def translate(self, chunk: Any) -> List[StreamEvent]:
        events: List[StreamEvent] = []

        usage = get_field(chunk, "usage_metadata") or get_field(chunk, "usageMetadata")
        if usage:
            self._merge_usage(usage)

        candidates = get_field(chunk, "candidates") or []
        if not candidates:
            return events

        content = get_field(candidates[0], "content")
        for part in get_field(content, "parts") or []:
            text = get_field(part, "text")
            function_call = get_field(part, "function_call") or get_field(part, "functionCall")

            if get_field(part, "thought") and text:
                if not self._in_thought:
                    self._in_thought = True
                    self._thinking = ""
                    events.append(ReasoningStartEvent(format="markdown"))
                self._thinking += text
                events.append(ReasoningDeltaEvent(content=text, format="markdown"))
                continue

            events.extend(self._end_thought())

            if text:
                events.append(StreamTokenEvent(token=text))
            if function_call:
                events.extend(self._function_call_events(function_call))

        return events

    def finish(self) -> List[StreamEvent]:
        if self.finished:
            return []
        self.finished = True
        events = self._end_thought()
        events.append(StreamCompleteEvent(usage=self.usage))
        return events

    def _end_thought(self) -> List[StreamEvent]:
        if not self._in_thought:
            return []
        self._in_thought = False
        return [ReasoningEndEvent(full_content=self._thinking)]

    def _function_call_events(self, function_call: Any) -> List[StreamEvent]:
        args = get_field(function_call, "args") or {}
        if isinstance(args, Mapping):
            args = dict(args)

        info = ToolCallInfo(
            id=get_field(function_call, "id") or f"google_tool_{uuid.uuid4().hex[:12]}",
            name=get_field(function_call, "name") or "",
            arguments=json.dumps(args),
        )
        return [
            ToolCallStartEvent(tool_call=ToolCallInfo(id=info.id, name=info.name)),
            ToolCallParsedEvent(tool_call=info),
        ]
