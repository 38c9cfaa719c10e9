"""
Stream aggregation for UI consumption.

StreamAggregator turns the canonical low-level stream (tokens, tool-call
fragments, completion, errors) into paced, semantically complete UI events.
Text is optionally cut into chunks by a SegmentationBuffer and released at
most once per ``smoothing_delay`` ms by a single self re-arming timer; tool
calls are tracked through their lifecycle; timing metrics are attached to
every message update and to the terminal event.
"""

import threading
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Union

from ..config.options import StreamingOptions
from ..core.normalization.usage import normalize_usage
from ..errors import InvalidStreamEventError
from ..models.events import (
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
from ..models.tool_calls import ToolCallRecord, ToolExecutionStatus
from ..models.ui_events import (
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
from ..models.usage import ContextWindowUsage
from ..observability.logging import StreamLogger
from .chunk_buffer import SegmentationBuffer
from .scheduler import Clock, DefaultScheduler, Scheduler, TimerHandle, monotonic_ms
from .timing import TimingState

UIEventSink = Callable[[UIEvent], None]


class StreamAggregator:
    """Adapter that transforms low-level stream events into paced UI events.

    Events must be fed sequentially from one producer. The only deferred work
    is the pacing timer; at most one is armed at a time, and ``complete``,
    ``error``, ``reset`` and ``dispose`` cancel it.
    """

    def __init__(
        self,
        on_event: UIEventSink,
        conversation_id: str = "",
        options: Optional[StreamingOptions] = None,
        *,
        clock: Optional[Clock] = None,
        scheduler: Optional[Scheduler] = None,
        logger: Optional[StreamLogger] = None,
        **overrides: Any,
    ) -> None:
        """Initialize the aggregator.

        Args:
            on_event: Sink receiving every UI event
            conversation_id: Initial conversation id (replaced by ``start`` events)
            options: Streaming options; keyword overrides are applied on top
            clock: Millisecond clock (defaults to a monotonic clock)
            scheduler: Timer scheduler (defaults to asyncio loop or threading timers)
            logger: Structured logger
        """
        if options is None:
            options = StreamingOptions(**overrides)
        elif overrides:
            options = StreamingOptions(**{**options.model_dump(), **overrides})

        self.on_event = on_event
        self.options = options
        self.conversation_id = conversation_id
        self._clock = clock or monotonic_ms
        self._scheduler = scheduler or DefaultScheduler()
        self.logger = logger or StreamLogger(
            "aggregator", conversation_id=conversation_id or None, debug_enabled=options.debug
        )

        # Serializes handle_event with timer callbacks fired from other threads
        self._lock = threading.RLock()
        self._timer: Optional[TimerHandle] = None
        self._timer_generation = 0
        self._disposed = False

        self._handlers = {
            "start": self._handle_start,
            "token": self._handle_token,
            "message": self._handle_message,
            "tool_call_start": self._handle_tool_call_start,
            "tool_call_delta": self._handle_tool_call_delta,
            "tool_call_parsed": self._handle_tool_call_parsed,
            "tool_call_complete": self._handle_tool_call_complete,
            "complete": self._handle_complete,
            "error": self._handle_error,
            "context_window": self._handle_context_window,
            "reasoning_start": self._handle_reasoning_start,
            "reasoning_delta": self._handle_reasoning_delta,
            "reasoning_end": self._handle_reasoning_end,
        }

        self._init_session()

    def _init_session(self) -> None:
        self._current_message = ""
        self._is_streaming = False
        self._tool_calls: Dict[str, ToolCallRecord] = {}
        self._chunk_queue: Deque[str] = deque()
        self._chunk_buffer: Optional[SegmentationBuffer] = None
        if self.options.smoothing_enabled:
            self._chunk_buffer = SegmentationBuffer(
                self.options.chunking_strategy,
                max_word_length=self.options.max_word_length,
                max_buffer_no_break=self.options.max_buffer_no_break,
                logger=StreamLogger(
                    "chunk_buffer",
                    conversation_id=self.conversation_id or None,
                    debug_enabled=self.options.debug
                ),
            )
        self._timing = TimingState(conversation_start=self._clock())
        self._last_update_time: Optional[float] = None
        self._context_window: Optional[ContextWindowUsage] = None
        self._usage_data: Optional[Any] = None
        self._final_metrics: Optional[StreamMetrics] = None
        self._message_id: Optional[str] = None

        self._reasoning_content = ""
        self._reasoning_format: Optional[str] = None
        self._reasoning_signature: Optional[str] = None

        self._tool_calls_in_progress = False
        self._resume_after_tools = False

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def handle_event(self, event: Union[StreamEvent, Mapping[str, Any]]) -> None:
        """Process one stream event and emit the resulting UI events."""
        with self._lock:
            if self._disposed:
                self.logger.warning("Event received after dispose, ignoring", event_type=_event_type(event))
                return

            try:
                event = parse_stream_event(event)
            except InvalidStreamEventError as e:
                self.logger.warning(f"Dropping invalid stream event: {e}", event_type=e.event_type)
                return

            handler = self._handlers.get(event.type)
            if handler is None:
                self.logger.warning("Unknown stream event type, ignoring", event_type=event.type)
                return
            handler(event)

    def set_usage_data(self, usage: Any) -> None:
        """Set usage data reported natively by the provider."""
        with self._lock:
            self._usage_data = usage
            self.logger.debug("Usage data set")

    def reset(self) -> None:
        """Cancel the pending timer and clear all session state.

        A reset aggregator accepts a new stream. Disposal is final and is not undone here.
        """
        with self._lock:
            self._cancel_timer()
            self._init_session()

    def dispose(self) -> None:
        """Cancel the pending timer, clear all session state and stop accepting events."""
        with self._lock:
            self._cancel_timer()
            self._tool_calls.clear()
            self._chunk_queue.clear()
            if self._chunk_buffer:
                self._chunk_buffer.reset()
            self._disposed = True

    @property
    def current_message(self) -> str:
        return self._current_message

    @property
    def is_streaming(self) -> bool:
        return self._is_streaming

    @property
    def tool_calls(self) -> List[ToolCallRecord]:
        return [record.snapshot() for record in self._tool_calls.values()]

    @property
    def context_window(self) -> Optional[ContextWindowUsage]:
        return self._context_window

    @property
    def pending_chunks(self) -> int:
        """Number of chunks waiting for paced emission."""
        return len(self._chunk_queue)

    @property
    def final_metrics(self) -> Optional[StreamMetrics]:
        return self._final_metrics

    @property
    def completion_time(self) -> Optional[float]:
        """Total completion time in milliseconds."""
        return self._final_metrics.total_time if self._final_metrics else None

    @property
    def ttft(self) -> Optional[float]:
        """Time to first token in milliseconds."""
        return self._final_metrics.ttft if self._final_metrics else None

    @property
    def throughput(self) -> Optional[int]:
        """Streaming throughput (chars/second, excluding TTFT)."""
        return self._final_metrics.streaming_throughput if self._final_metrics else None

    # ------------------------------------------------------------------
    # event handlers
    # ------------------------------------------------------------------
    def _handle_start(self, event: StreamStartEvent) -> None:
        if event.conversation_id:
            self.conversation_id = event.conversation_id
            self.logger.bind(event.conversation_id)
        self.logger.debug("Handle start", active_tool_calls=len(self._tool_calls))

        self._is_streaming = True
        self._timing.start_stream(self._clock())

        # Only a new round clears tool calls; multi-round tool calling sends one start
        if self._tool_calls:
            self.logger.debug("Tool calls still active at start", count=len(self._tool_calls))
        self._tool_calls.clear()
        self._tool_calls_in_progress = False
        self._resume_after_tools = False

        self._emit(ConversationStartedEvent(
            conversation_id=self.conversation_id,
            model=self.options.model,
        ))

    def _handle_token(self, event: StreamTokenEvent) -> None:
        token = event.token or ""
        self._timing.record_token(self._clock())

        # Resuming after tool calls: separate new content from what came before
        if self._resume_after_tools and not self._tool_calls_in_progress:
            self._resume_after_tools = False
            self._append_tool_result_separator()

        if self._chunk_buffer:
            chunks = self._chunk_buffer.add_token(token)
            self._chunk_queue.extend(chunks)
            self._schedule_chunk_emission()
        else:
            self._current_message += token
            self._schedule_message_update()

    def _handle_message(self, event: StreamMessageEvent) -> None:
        # Authoritative snapshot: overwrite only, pacing is untouched
        self._current_message = event.message or ""

    def _handle_tool_call_start(self, event: ToolCallStartEvent) -> None:
        tool_call = event.tool_call
        self.logger.debug("Tool call start", tool_call_id=tool_call.id, name=tool_call.name)

        # Show all preceding text before the tool indicators
        self._flush_pending_text()

        record = self._tool_calls.get(tool_call.id)
        if record is None:
            record = ToolCallRecord(id=tool_call.id, name=tool_call.name)
            self._tool_calls[tool_call.id] = record
            self._mark_tool_activity()
            self._emit_tool_update(record)
        else:
            self._mark_tool_activity()
            self._transition(record, ToolExecutionStatus.PREPARING)

    def _handle_tool_call_delta(self, event: ToolCallDeltaEvent) -> None:
        record = self._tool_calls.get(event.tool_call_id)
        if record is None:
            self.logger.warning("Tool call delta for unknown tool id, ignoring", tool_call_id=event.tool_call_id)
            return

        if record.status not in (ToolExecutionStatus.PREPARING, ToolExecutionStatus.EXECUTING):
            self.logger.warning(
                "Tool call delta after arguments were final, ignoring",
                tool_call_id=record.id,
                status=record.status.value
            )
            return

        record.arguments += event.argument_delta or ""
        self.logger.debug("Tool call delta", tool_call_id=record.id, arguments_length=len(record.arguments))
        self._transition(record, ToolExecutionStatus.EXECUTING)

    def _handle_tool_call_parsed(self, event: ToolCallParsedEvent) -> None:
        tool_call = event.tool_call
        record = self._get_or_synthesize(tool_call, "parsed")

        if not record.status.can_transition_to(ToolExecutionStatus.READY):
            self._reject_transition(record, ToolExecutionStatus.READY)
            return

        # Final, complete arguments replace whatever was accumulated
        record.arguments = tool_call.arguments or ""
        if tool_call.name:
            record.name = tool_call.name
        self._transition(record, ToolExecutionStatus.READY)

    def _handle_tool_call_complete(self, event: ToolCallCompleteEvent) -> None:
        tool_call = event.tool_call
        record = self._get_or_synthesize(tool_call, "complete")
        status = ToolExecutionStatus.FAILED if event.error else ToolExecutionStatus.COMPLETED

        if not record.status.can_transition_to(status):
            self._reject_transition(record, status)
        else:
            record.result = event.result
            record.error = event.error
            if tool_call.arguments and not record.arguments:
                record.arguments = tool_call.arguments
            self._transition(record, status)

        if self._tool_calls and all(r.status.is_terminal for r in self._tool_calls.values()):
            self._tool_calls_in_progress = False
            self.logger.debug("All tool calls complete, ready to resume content streaming")

    def _handle_complete(self, event: StreamCompleteEvent) -> None:
        self.logger.debug("Handle complete", active_tool_calls=len(self._tool_calls))
        self._cancel_timer()

        # Never lose buffered text: drain the whole queue, then the buffer
        if self._chunk_queue:
            self._current_message += "".join(self._chunk_queue)
            self._chunk_queue.clear()
        if self._chunk_buffer:
            self._current_message += "".join(self._chunk_buffer.flush())

        self._is_streaming = False
        if event.usage is not None:
            self._usage_data = event.usage
        if event.message_id:
            self._message_id = event.message_id

        now = self._clock()
        metrics = self._timing.snapshot(
            now, len(self._current_message), llm_tokens=event.tokens, final=True
        )
        self._final_metrics = metrics

        completed = ConversationCompletedEvent(
            message=self._build_message(now, final=True, tokens=event.tokens),
            metrics=metrics,
            context_window=self._context_window.model_copy() if self._context_window else None,
            usage=normalize_usage(self._usage_data, model=self.options.model, provider=self.options.model_service),
        )
        self.logger.log_streaming_metrics(metrics.to_dict(), len(self._current_message))
        self._emit(completed)

    def _handle_error(self, event: StreamErrorEvent) -> None:
        self._cancel_timer()
        self._is_streaming = False
        self.logger.debug("Handle error", error_msg=event.error)

        self._emit(UIErrorEvent(
            error=ErrorInfo(message=event.error, code=event.code, recoverable=False),
            conversation_id=self.conversation_id,
        ))

    def _handle_context_window(self, event: ContextWindowEvent) -> None:
        self._context_window = event.usage
        self.logger.debug(
            "Context window",
            used_tokens=event.usage.used_tokens,
            max_tokens=event.usage.max_tokens,
            percentage=event.usage.percentage
        )
        self._emit(ContextWindowUpdateEvent(usage=event.usage))

    def _handle_reasoning_start(self, event: ReasoningStartEvent) -> None:
        self._reasoning_format = event.format
        self._reasoning_content = ""

    def _handle_reasoning_delta(self, event: ReasoningDeltaEvent) -> None:
        self._reasoning_content += event.content or ""
        self._reasoning_format = event.format
        self._emit(ReasoningUpdateEvent(
            content=self._reasoning_content,
            format=event.format,
            is_complete=False,
        ))

    def _handle_reasoning_end(self, event: ReasoningEndEvent) -> None:
        self._reasoning_content = event.full_content or self._reasoning_content
        self._reasoning_signature = event.signature
        self._emit(ReasoningUpdateEvent(
            content=self._reasoning_content,
            format=self._reasoning_format or "markdown",
            is_complete=True,
        ))

    # ------------------------------------------------------------------
    # tool-call helpers
    # ------------------------------------------------------------------
    def _get_or_synthesize(self, tool_call, stage: str) -> ToolCallRecord:
        record = self._tool_calls.get(tool_call.id)
        if record is None:
            self.logger.warning(
                f"Tool call {stage} for untracked tool id, creating entry",
                tool_call_id=tool_call.id
            )
            record = ToolCallRecord(
                id=tool_call.id,
                name=tool_call.name,
                arguments=tool_call.arguments or "",
                synthesized=True,
            )
            self._tool_calls[tool_call.id] = record
            self._mark_tool_activity()
        return record

    def _mark_tool_activity(self) -> None:
        self._tool_calls_in_progress = True
        self._resume_after_tools = True

    def _transition(self, record: ToolCallRecord, status: ToolExecutionStatus) -> None:
        if not record.status.can_transition_to(status):
            self._reject_transition(record, status)
            return
        record.status = status
        self._emit_tool_update(record)

    def _reject_transition(self, record: ToolCallRecord, status: ToolExecutionStatus) -> None:
        self.logger.warning(
            "Ignoring backward tool call transition",
            tool_call_id=record.id,
            current=record.status.value,
            requested=status.value
        )

    def _emit_tool_update(self, record: ToolCallRecord) -> None:
        self._emit(ToolUpdateEvent(
            tool_call=record.snapshot(),
            status=record.status,
            result=record.result,
            error=record.error,
        ))

    # ------------------------------------------------------------------
    # text helpers
    # ------------------------------------------------------------------
    def _flush_pending_text(self) -> None:
        """Move queued and buffered text into the message and publish it."""
        if self._chunk_queue:
            self._current_message += "".join(self._chunk_queue)
            self._chunk_queue.clear()
        if self._chunk_buffer:
            self._current_message += "".join(self._chunk_buffer.flush())
        self._cancel_timer()
        if self._current_message:
            self._emit_message_update(True)

    def _append_tool_result_separator(self) -> None:
        separator = self.options.tool_result_separator
        if not separator:
            return

        if self._chunk_buffer:
            # Keep ordering: buffered text first, then the separator, through the queue
            self._chunk_queue.extend(self._chunk_buffer.flush())
            text_so_far = self._current_message + "".join(self._chunk_queue)
            if text_so_far and not text_so_far.endswith(separator):
                self._chunk_queue.append(separator)
        elif self._current_message and not self._current_message.endswith(separator):
            self._current_message += separator
        self.logger.debug("Resuming content after tool calls")

    # ------------------------------------------------------------------
    # pacing
    # ------------------------------------------------------------------
    def _ready_to_emit(self, now: float) -> bool:
        if self._last_update_time is None:
            return True
        return now - self._last_update_time >= self.options.smoothing_delay

    def _remaining_wait(self, now: float) -> float:
        if self._last_update_time is None:
            return 0.0
        return max(self.options.smoothing_delay - (now - self._last_update_time), 0.0)

    def _schedule_message_update(self) -> None:
        """Unsmoothed mode: publish now, or once the pacing interval has elapsed."""
        now = self._clock()
        if self._ready_to_emit(now):
            self._emit_message_update(True)
            return

        if self._timer is None:
            self._arm_timer(self._remaining_wait(now), lambda: self._emit_message_update(True))

    def _schedule_chunk_emission(self) -> None:
        # A running timer drains the queue on its own
        if self._timer is not None:
            return
        if not self._chunk_queue:
            return

        now = self._clock()
        if self._ready_to_emit(now):
            self._emit_next_chunk()
            return

        self._arm_timer(self._remaining_wait(now), self._emit_next_chunk)

    def _emit_next_chunk(self) -> None:
        if not self._chunk_queue:
            return

        self._current_message += self._chunk_queue.popleft()
        self._emit_message_update(True)

        if self._chunk_queue:
            self._arm_timer(self.options.smoothing_delay, self._emit_next_chunk)

    def _arm_timer(self, delay_ms: float, callback: Callable[[], None]) -> None:
        self._timer_generation += 1
        generation = self._timer_generation

        def fire() -> None:
            with self._lock:
                # Stale timers (cancelled or superseded) do nothing
                if generation != self._timer_generation or self._timer is None:
                    return
                self._timer = None
                callback()

        self._timer = self._scheduler.call_later(delay_ms, fire)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._timer_generation += 1

    # ------------------------------------------------------------------
    # emission
    # ------------------------------------------------------------------
    def _emit_message_update(self, is_streaming: bool) -> None:
        now = self._clock()
        self._last_update_time = now
        self._cancel_timer()

        self._emit(MessageUpdateEvent(
            message=self._build_message(now),
            is_streaming=is_streaming,
            metrics=self._timing.snapshot(now, len(self._current_message)),
        ))

    def _build_message(self, now: float, final: bool = False, tokens: Optional[int] = None) -> StreamingMessage:
        message = StreamingMessage(
            message=self._current_message,
            model=self.options.model,
            model_name=self.options.model_name,
            model_service=self.options.model_service,
        )

        # Timing metadata once streaming has started
        if self._timing.stream_start is not None:
            elapsed = now - self._timing.stream_start
            message.throughput = round(len(self._current_message) / elapsed * 1000) if elapsed > 0 else 0
            if elapsed > 0:
                message.completion_time = elapsed / 1000

        if final:
            message.id = self._message_id
            message.tokens = tokens
            message.tool_calls = [record.snapshot() for record in self._tool_calls.values()]
            if self._reasoning_content:
                message.reasoning = self._reasoning_content
                message.reasoning_signature = self._reasoning_signature
        return message

    def _emit(self, event: UIEvent) -> None:
        self.on_event(event)


def _event_type(event: Any) -> Optional[str]:
    if isinstance(event, StreamEvent):
        return event.type
    if isinstance(event, Mapping):
        return event.get("type")
    return None
