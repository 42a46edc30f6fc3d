"""Logging and timing helpers for interview sessions."""
from .logger import format_human, log_event
from .tracing import span

__all__ = ["format_human", "log_event", "span"]
