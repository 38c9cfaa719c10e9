"""Core provider-agnostic helpers."""
