"""
Structured logging utility for the streaming layer.

This module provides a consistent logging interface for the segmentation
buffer and the stream aggregator, ensuring structured logging with standard
fields like component and conversation_id. Loggers are passed in through
constructors rather than configured from the environment.
"""

import logging
from typing import Any, Dict, Optional


class StreamLogger:
    """Structured logger for streaming components."""
    
    def __init__(
        self,
        component: str,
        conversation_id: Optional[str] = None,
        debug_enabled: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize logger for a specific streaming component.
        
        Args:
            component: Name of the component (e.g., "aggregator", "chunk_buffer")
            conversation_id: Conversation the component is bound to, if known
            debug_enabled: Emit debug records (replaces ambient debug flags)
            logger: Underlying stdlib logger (defaults to llm_ui_stream.streaming.<component>)
        """
        self.component = component
        self.conversation_id = conversation_id
        self.debug_enabled = debug_enabled
        self.logger = logger or logging.getLogger(f"llm_ui_stream.streaming.{component}")
    
    def bind(self, conversation_id: Optional[str]) -> None:
        """Attach a conversation id to every subsequent record."""
        self.conversation_id = conversation_id
    
    def _format_message(self, message: str, **kwargs) -> str:
        """Format message with structured fields."""
        fields = [f"component={self.component}"]
        if self.conversation_id:
            fields.append(f"conversation_id={self.conversation_id}")
        
        for key, value in kwargs.items():
            if value is not None:
                fields.append(f"{key}={value}")
        
        return f"[{' '.join(fields)}] {message}"
    
    def debug(self, message: str, **kwargs):
        """Log debug message with structured fields (only when debug is enabled)."""
        if not self.debug_enabled:
            return
        self.logger.debug(self._format_message(message, **kwargs))
    
    def info(self, message: str, **kwargs):
        """Log info message with structured fields."""
        self.logger.info(self._format_message(message, **kwargs))
    
    def warning(self, message: str, **kwargs):
        """Log warning message with structured fields."""
        self.logger.warning(self._format_message(message, **kwargs))
    
    def error(self, message: str, error: Optional[Exception] = None, **kwargs):
        """Log error message with structured fields."""
        if error:
            kwargs['error_type'] = type(error).__name__
            kwargs['error_msg'] = str(error)
        
        self.logger.error(self._format_message(message, **kwargs), exc_info=error)
    
    def log_streaming_metrics(self, metrics: Dict[str, Any], message_length: int):
        """Log final streaming performance metrics."""
        self.info(
            "Streaming metrics",
            total_chars=message_length,
            duration_ms=int(metrics.get('total_time') or 0),
            ttft_ms=metrics.get('ttft'),
            tokens=metrics.get('token_count'),
            chars_per_second=metrics.get('throughput'),
        )
