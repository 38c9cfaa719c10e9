"""Logging helpers for the streaming layer."""

from .logging import StreamLogger

__all__ = ["StreamLogger"]
