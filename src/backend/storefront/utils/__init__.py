"""Utility functions for logging context and performance tracking."""

from .logging_context import (
    bind_session_context,
    bind_wizard_context,
    log_context,
    log_performance,
)

__all__ = [
    "bind_session_context",
    "bind_wizard_context",
    "log_context",
    "log_performance",
]
