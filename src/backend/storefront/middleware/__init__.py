"""Middleware package for request processing and logging context injection."""

from .logging_middleware import LoggingMiddleware, SessionContextMiddleware, SESSION_HEADER

__all__ = ["LoggingMiddleware", "SessionContextMiddleware", "SESSION_HEADER"]
