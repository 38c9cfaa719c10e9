"""
Streaming defaults.

Central location for the thresholds and timings used by the segmentation
buffer and the stream aggregator. Values can be overridden per stream via
StreamingOptions.
"""

# Pacing
DEFAULT_SMOOTHING_DELAY_MS = 30.0

# Chunking
DEFAULT_CHUNKING_STRATEGY = "word"
CHUNKING_STRATEGIES = ("character", "word", "sentence")
CHUNKING_STRATEGY_ALIASES = {
    "char": "character",
    "chars": "character",
    "words": "word",
    "sentences": "sentence",
}

# Flush "words" longer than this many characters
MAX_WORD_LENGTH = 50

# Force a break after this many characters with no whitespace
MAX_BUFFER_NO_BREAK = 400

# Inserted before text that resumes after a round of tool calls
DEFAULT_TOOL_RESULT_SEPARATOR = "\n\n"

# Environment variable prefix used by StreamingOptions.from_env
ENV_PREFIX = "LLM_UI_STREAM_"
