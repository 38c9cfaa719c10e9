"""
Base Stream Translator Interface

This module defines the abstract base class for provider stream translators.
A translator turns one provider's raw streaming chunks into the canonical
StreamEvent variants understood by StreamAggregator.

Translators read SDK objects or plain dicts duck-typed and never import the
provider SDKs themselves.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from ..core.normalization.usage import usage_to_dict
from ..models.events import StreamEvent


class StreamTranslator(ABC):
    """
    Abstract base class for provider stream translators.

    A translator is stateful for the duration of one response stream:
    it accumulates tool-call arguments, usage data and block state across
    chunks. Create a new translator (or call ``reset``) for each stream.

    Translators should NOT contain:
    - Pacing or chunking logic (that belongs to StreamAggregator)
    - Network or SDK calls
    """

    provider: str = ""

    def __init__(self):
        self.usage: Optional[Dict[str, Any]] = None
        self.finished = False

    @abstractmethod
    def translate(self, chunk: Any) -> List[StreamEvent]:
        """
        Translate one raw provider chunk.

        Args:
            chunk: Raw chunk from the provider SDK (object or dict)

        Returns:
            Zero or more canonical stream events, in order
        """
        pass

    def finish(self) -> List[StreamEvent]:
        """
        Produce the events that close the stream.

        Called once after the provider stream is exhausted. Translators that
        already emitted ``complete`` from an in-band stop chunk return [].

        Returns:
            Trailing events (typically a single ``complete``)
        """
        return []

    def reset(self) -> None:
        """Clear per-stream state so the translator can be reused."""
        self.usage = None
        self.finished = False

    def _merge_usage(self, usage: Any) -> None:
        usage_dict = {k: v for k, v in usage_to_dict(usage).items() if v is not None}
        if not usage_dict:
            return
        self.usage = {**(self.usage or {}), **usage_dict}


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from an SDK object or a mapping."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)
