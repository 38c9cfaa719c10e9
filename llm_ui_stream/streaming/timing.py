"""Timing state and derived streaming metrics."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..models.ui_events import StreamMetrics


@dataclass
class TimingState:
    """Timestamps (ms, from the aggregator's clock) collected while streaming.

    Append-only during a stream; reset when a new round starts.
    """
    conversation_start: float
    stream_start: Optional[float] = None
    first_token: Optional[float] = None
    last_token: Optional[float] = None
    token_delays: List[float] = field(default_factory=list)
    token_count: int = 0

    def start_stream(self, now: float) -> None:
        self.stream_start = now
        self.first_token = None
        self.last_token = None
        self.token_delays = []
        self.token_count = 0

    def record_token(self, now: float) -> None:
        if self.first_token is None:
            self.first_token = now
        if self.last_token is not None:
            self.token_delays.append(now - self.last_token)
        self.last_token = now
        self.token_count += 1

    @property
    def ttft(self) -> Optional[float]:
        if self.first_token is None or self.stream_start is None:
            return None
        return self.first_token - self.stream_start

    @property
    def avg_token_delay(self) -> Optional[float]:
        if not self.token_delays:
            return None
        return sum(self.token_delays) / len(self.token_delays)

    def snapshot(
        self,
        now: float,
        message_length: int,
        llm_tokens: Optional[int] = None,
        final: bool = False,
    ) -> StreamMetrics:
        """Compute metrics as of ``now`` for a message of ``message_length`` characters."""
        elapsed = now - self.stream_start if self.stream_start is not None else 0.0
        metrics = StreamMetrics(
            elapsed_time=elapsed,
            conversation_duration=now - self.conversation_start,
            throughput=round(message_length / elapsed * 1000) if elapsed > 0 else 0,
            ttft=self.ttft,
            token_count=self.token_count or None,
            llm_tokens=llm_tokens,
        )

        if self.avg_token_delay is not None:
            metrics.avg_token_delay = round(self.avg_token_delay)

        # Throughput once tokens were flowing (excludes TTFT)
        if metrics.ttft is not None:
            streaming_time = now - self.first_token
            if streaming_time > 0:
                metrics.streaming_throughput = round(message_length / streaming_time * 1000)

        if final:
            metrics.total_time = elapsed
        return metrics
