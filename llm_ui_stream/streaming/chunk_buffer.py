"""
Segmentation buffer for streaming text.

This module cuts an incrementally arriving LLM token stream into emittable
chunks: grapheme clusters, words, sentences, or whatever a caller-supplied
chunker decides. Usage:

    buf = SegmentationBuffer("sentence")
    for token in stream:
        for chunk in buf.add_token(token):
            push_to_ui(chunk)
    for chunk in buf.flush():
        push_to_ui(chunk)
"""

from typing import Any, List, Mapping, NamedTuple, Optional, Tuple

import regex

from ..config.constants import MAX_BUFFER_NO_BREAK, MAX_WORD_LENGTH
from ..config.options import ChunkingStrategy, normalize_chunking_strategy
from ..errors import ChunkingError
from ..observability.logging import StreamLogger

# One extended grapheme cluster (base character plus combining marks, emoji sequences...)
_GRAPHEME = regex.compile(r"\X")

# Word-like runs (letters, marks, digits, connectors, inner apostrophes) and everything else
_WORD_SEGMENTS = regex.compile(r"(?P<word>\w+(?:['’]\w+)*)|(?P<other>\W+)")

# Terminator followed by whitespace; full-width CJK terminators need no whitespace
_SENTENCE_BOUNDARY = regex.compile(r"[.?!]+\s+|[。！？]+\s*")

_WHITESPACE = regex.compile(r"\s")


class ChunkerResult(NamedTuple):
    """Return value of a custom chunker."""
    chunks: List[str]
    remainder: str


class SegmentationBuffer:
    """
    Breaks streaming token deltas into character, word or sentence chunks.

    The buffer always holds exactly the unconsumed suffix of the text fed so
    far: nothing returned as a chunk stays in it, and nothing is dropped.
    """

    def __init__(
        self,
        strategy: ChunkingStrategy = "word",
        max_word_length: int = MAX_WORD_LENGTH,
        max_buffer_no_break: int = MAX_BUFFER_NO_BREAK,
        logger: Optional[StreamLogger] = None,
    ):
        """
        Initialize the segmentation buffer.

        Args:
            strategy: "character", "word", "sentence", or a callable taking the
                buffer and returning (chunks, remainder)
            max_word_length: Flush "words" longer than this many characters
            max_buffer_no_break: Force a break after this many characters with no whitespace
            logger: Structured logger (defaults to the chunk_buffer component logger)
        """
        strategy = normalize_chunking_strategy(strategy)
        if callable(strategy):
            self._custom_chunker = strategy
            self.strategy = "custom"
        else:
            self._custom_chunker = None
            self.strategy = strategy

        self.max_word_length = max_word_length
        self.max_buffer_no_break = max_buffer_no_break
        self.logger = logger or StreamLogger("chunk_buffer")
        self.buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet returned as a chunk."""
        return self.buffer

    def add_token(self, token: str) -> List[str]:
        """Feed one LLM delta; receive zero or more complete chunks."""
        if token:
            self.buffer += token

        if self._custom_chunker:
            return self._flush_custom()

        # Emergency bailout for giant uninterrupted text
        forced = self._flush_long_runs()

        if self.strategy == "character":
            fresh = self._flush_graphemes()
        elif self.strategy == "word":
            fresh = self._flush_words()
        else:
            fresh = self._flush_sentences()

        return [chunk for chunk in forced + fresh if chunk]

    def flush(self) -> List[str]:
        """Call when the stream closes to emit the final remainder."""
        if not self.buffer:
            return []

        if self._custom_chunker:
            # Nothing will call the chunker again, so its remainder is emitted too
            try:
                chunks, remainder = self._run_custom_chunker(self.buffer)
            except Exception as e:
                self.logger.error(
                    "Custom chunker failed on flush, emitting whole buffer",
                    error=e,
                    buffer_length=len(self.buffer)
                )
                chunks, remainder = [self.buffer], ""
            self.buffer = ""
            return [chunk for chunk in [*chunks, remainder] if chunk]

        remaining = self.buffer
        self.buffer = ""
        return [remaining]

    def reset(self) -> None:
        """Drop any buffered text."""
        self.buffer = ""

    # -- character ------------------------------------------------------
    def _flush_graphemes(self) -> List[str]:
        segments = _GRAPHEME.findall(self.buffer)

        # A lone cluster may still be extended by combining marks in the next token
        if len(segments) <= 1:
            return []

        self.buffer = segments[-1]
        return segments[:-1]

    # -- word -----------------------------------------------------------
    def _flush_words(self) -> List[str]:
        chunks: List[str] = []
        lead_non_word = ""
        word = ""
        tail_non_word = ""

        for match in _WORD_SEGMENTS.finditer(self.buffer):
            segment = match.group()
            if match.lastgroup == "word":
                if lead_non_word:
                    chunks.append(lead_non_word)
                    lead_non_word = ""
                if word and tail_non_word:
                    # Previous word finished
                    chunks.append(word + tail_non_word)
                    word = tail_non_word = ""
                word += segment
                if len(word) > self.max_word_length:
                    # Force-break a huge "word" (URLs, hashes, base64...)
                    chunks.append(word + tail_non_word)
                    word = tail_non_word = ""
            elif word:
                tail_non_word += segment
            else:
                lead_non_word += segment

        self.buffer = lead_non_word + word + tail_non_word
        return chunks

    # -- sentence -------------------------------------------------------
    def _flush_sentences(self) -> List[str]:
        boundaries = [match.end() for match in _SENTENCE_BOUNDARY.finditer(self.buffer)]
        if not boundaries:
            return []

        last = boundaries[-1]
        confirmed = self.buffer[:last]
        self.buffer = self.buffer[last:]

        sentences = []
        start = 0
        for end in boundaries:
            sentences.append(confirmed[start:end])
            start = end
        return sentences

    # -- long-run bailout -----------------------------------------------
    def _flush_long_runs(self) -> List[str]:
        chunks = []
        limit = self.max_buffer_no_break
        while len(self.buffer) > limit and not _WHITESPACE.search(self.buffer):
            chunks.append(self.buffer[:limit])
            self.buffer = self.buffer[limit:]
        return chunks

    # -- custom ---------------------------------------------------------
    def _flush_custom(self) -> List[str]:
        try:
            chunks, remainder = self._run_custom_chunker(self.buffer)
        except Exception as e:
            self.logger.error(
                "Custom chunker failed, flushing whole buffer to avoid data loss",
                error=e,
                buffer_length=len(self.buffer)
            )
            everything = self.buffer
            self.buffer = ""
            return [everything] if everything else []

        self.buffer = remainder
        return [chunk for chunk in chunks if chunk]

    def _run_custom_chunker(self, text: str) -> Tuple[List[str], str]:
        result = self._custom_chunker(text)
        return self._coerce_result(result, len(text))

    @staticmethod
    def _coerce_result(result: Any, buffer_length: int) -> Tuple[List[str], str]:
        """Accept a ChunkerResult, a (chunks, remainder) pair or a mapping."""
        if isinstance(result, Mapping):
            chunks = result.get("chunks")
            remainder = result.get("remainder", "")
        elif isinstance(result, (tuple, list)) and len(result) == 2:
            chunks, remainder = result
        elif hasattr(result, "chunks") and hasattr(result, "remainder"):
            chunks, remainder = result.chunks, result.remainder
        else:
            raise ChunkingError(
                f"Custom chunker returned {type(result).__name__}, expected (chunks, remainder)",
                buffer_length
            )

        if remainder is None:
            remainder = ""
        if isinstance(chunks, str) or not isinstance(chunks, (list, tuple)):
            raise ChunkingError("Custom chunker 'chunks' must be a list of strings", buffer_length)
        if not all(isinstance(chunk, str) for chunk in chunks) or not isinstance(remainder, str):
            raise ChunkingError("Custom chunker returned non-string text", buffer_length)

        return list(chunks), remainder
