"""
Logging Context Management Utilities

Provides helpers for adding and managing context in structured logs.
Context automatically appears in all log statements within the scope.
"""

import time
from contextlib import contextmanager
from typing import Optional

import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars


def bind_session_context(
    session_id: Optional[str] = None,
    user_id: Optional[str] = None,
    **kwargs
):
    """
    Bind session-related context to all logs.

    Args:
        session_id: Storefront session identifier
        user_id: Authenticated user identifier
        **kwargs: Additional context key-value pairs

    Example:
        ```python
        bind_session_context(session_id="3f2a...", user_id="user-1718000000000")
        logger.info("cart updated")  # Includes session_id, user_id
        ```
    """
    context = {}

    if session_id:
        context["session_id"] = session_id
    if user_id:
        context["user_id"] = user_id

    context.update(kwargs)
    bind_contextvars(**context)


def bind_wizard_context(
    wizard_id: str,
    wizard_step: Optional[int] = None,
    **kwargs
):
    """
    Bind negotiation wizard context for step tracking.

    Example:
        ```python
        bind_wizard_context(wizard_id="9b1c...", wizard_step=3)
        logger.info("requirement updated")
        ```
    """
    context = {"wizard_id": wizard_id}

    if wizard_step is not None:
        context["wizard_step"] = wizard_step

    context.update(kwargs)
    bind_contextvars(**context)


@contextmanager
def log_context(**context_vars):
    """
    Context manager for temporary logging context.

    Context is added on enter and removed on exit.

    Example:
        ```python
        with log_context(operation="transcription"):
            logger.info("uploading audio")  # Includes operation
        ```
    """
    bind_contextvars(**context_vars)

    try:
        yield
    finally:
        unbind_contextvars(*context_vars.keys())


@contextmanager
def log_performance(operation_name: str, logger=None):
    """
    Context manager for logging operation performance.

    Logs operation start, end, and duration.

    Example:
        ```python
        with log_performance("negotiation_join"):
            await asyncio.gather(...)
        ```
    """
    if logger is None:
        logger = structlog.get_logger()

    start_time = time.time()

    logger.info(f"{operation_name}_started", operation=operation_name)

    try:
        yield
    finally:
        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"{operation_name}_completed",
            operation=operation_name,
            duration_ms=duration_ms
        )
