"""Helpers for feeding provider streams into a StreamAggregator."""

from __future__ import annotations

from typing import Any, AsyncIterable, Iterable, Optional

from ..models.events import StreamErrorEvent, StreamStartEvent
from ..providers.base import StreamTranslator
from .aggregator import StreamAggregator


class StreamingHelper:
    """Helper for common streaming patterns across providers."""

    @staticmethod
    async def pump(
        stream: AsyncIterable[Any],
        translator: StreamTranslator,
        aggregator: StreamAggregator,
        conversation_id: Optional[str] = None
    ) -> str:
        """Translate an async provider stream into aggregator events.

        Args:
            stream: Async iterator of raw provider chunks
            translator: StreamTranslator for the provider
            aggregator: Aggregator receiving the canonical events
            conversation_id: If given, a ``start`` event is fed first

        Returns:
            Final accumulated message text

        Raises:
            Exception: Whatever the stream raised, after an ``error`` event was fed
        """
        if conversation_id is not None:
            aggregator.handle_event(StreamStartEvent(conversation_id=conversation_id))

        try:
            async for chunk in stream:
                for event in translator.translate(chunk):
                    aggregator.handle_event(event)
        except Exception as e:
            aggregator.handle_event(_error_event(e))
            raise

        for event in translator.finish():
            aggregator.handle_event(event)
        return aggregator.current_message

    @staticmethod
    def pump_sync(
        stream: Iterable[Any],
        translator: StreamTranslator,
        aggregator: StreamAggregator,
        conversation_id: Optional[str] = None
    ) -> str:
        """Synchronous variant of :meth:`pump` for plain iterables."""
        if conversation_id is not None:
            aggregator.handle_event(StreamStartEvent(conversation_id=conversation_id))

        try:
            for chunk in stream:
                for event in translator.translate(chunk):
                    aggregator.handle_event(event)
        except Exception as e:
            aggregator.handle_event(_error_event(e))
            raise

        for event in translator.finish():
            aggregator.handle_event(event)
        return aggregator.current_message


def _error_event(error: Exception) -> StreamErrorEvent:
    code = getattr(error, "code", None) or type(error).__name__
    return StreamErrorEvent(error=str(error) or type(error).__name__, code=str(code))
