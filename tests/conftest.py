"""Shared pytest fixtures for LLM UI Stream tests."""

import pytest
from unittest.mock import Mock
from typing import List

from llm_ui_stream import StreamAggregator, StreamingOptions
from llm_ui_stream.models.ui_events import UIEvent
from tests.helpers.fake_timers import ManualClock, ManualScheduler


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: end-to-end tests")
    config.addinivalue_line("markers", "slow: tests that depend on wall-clock timing")


class EventSink:
    """Collects UI events in arrival order."""

    def __init__(self):
        self.events: List[UIEvent] = []

    def __call__(self, event: UIEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> List[UIEvent]:
        return [e for e in self.events if e.type == event_type]

    @property
    def types(self) -> List[str]:
        return [e.type for e in self.events]

    @property
    def messages(self) -> List[str]:
        """Message text of every message_update, in order."""
        return [e.message.message for e in self.of_type("message_update")]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def clock():
    """Manual millisecond clock."""
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    """Manual scheduler bound to the clock fixture."""
    return ManualScheduler(clock)


@pytest.fixture
def sink():
    """Recording UI event sink."""
    return EventSink()


@pytest.fixture
def make_aggregator(sink, clock, scheduler):
    """Factory for aggregators wired to the manual clock and scheduler."""
    def _make(**overrides) -> StreamAggregator:
        options = StreamingOptions(**overrides)
        return StreamAggregator(sink, "conv-1", options, clock=clock, scheduler=scheduler)
    return _make


@pytest.fixture
def mock_logger():
    """Mock StreamLogger recording calls."""
    return Mock()
