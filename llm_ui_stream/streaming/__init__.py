"""Streaming layer: segmentation, pacing and UI event aggregation.

This layer handles:
- Cutting token deltas into character / word / sentence chunks
- Paced emission of message updates on a timer
- Tool-call lifecycle tracking and final metrics
- Feeding provider streams through translators
"""

from .aggregator import StreamAggregator, UIEventSink
from .chunk_buffer import ChunkerResult, SegmentationBuffer
from .helpers import StreamingHelper
from .scheduler import (
    AsyncioScheduler,
    Clock,
    DefaultScheduler,
    Scheduler,
    ThreadingScheduler,
    TimerHandle,
    monotonic_ms,
)
from .timing import TimingState

__all__ = [
    "StreamAggregator",
    "UIEventSink",
    "SegmentationBuffer",
    "ChunkerResult",
    "StreamingHelper",
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "ThreadingScheduler",
    "DefaultScheduler",
    "Clock",
    "monotonic_ms",
    "TimingState",
]
