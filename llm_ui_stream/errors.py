"""
Exception types for the streaming layer.

Errors coming from the upstream provider are not raised here: they arrive
as ``error`` stream events and are surfaced to the UI as terminal events.
"""

from typing import Optional


class StreamingError(Exception):
    """Base class for errors raised by llm_ui_stream."""


class ChunkingError(StreamingError):
    """A custom chunker failed or returned a malformed result."""

    def __init__(self, message: str, buffer_length: int = 0):
        super().__init__(message)
        self.buffer_length = buffer_length


class InvalidStreamEventError(StreamingError, ValueError):
    """A raw stream event could not be converted to a typed event."""

    def __init__(self, message: str, event_type: Optional[str] = None):
        super().__init__(message)
        self.event_type = event_type
