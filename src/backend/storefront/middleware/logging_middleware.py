"""
Logging Middleware for Correlation ID and Request Tracking

Generates or extracts correlation IDs for every request, enabling
end-to-end request tracing across the storefront and its upstream calls.
"""

import uuid
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

from ..database.session_storage import validate_session_id

logger = structlog.get_logger(__name__)

SESSION_HEADER = "X-Session-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to inject correlation IDs and request context into all logs.

    Features:
    - Generates unique correlation_id for each request
    - Accepts correlation_id from X-Correlation-ID header
    - Binds correlation_id to contextvar for automatic inclusion in all logs
    - Adds correlation_id to response headers
    - Logs request/response timing
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_contextvars()

        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        client_ip = request.client.host if request.client else "unknown"

        bind_contextvars(
            correlation_id=correlation_id,
            request_method=request.method,
            request_path=request.url.path,
            client_ip=client_ip,
        )

        start_time = time.time()

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            query_params=dict(request.query_params),
        )

        try:
            response = await call_next(request)

            duration_ms = int((time.time() - start_time) * 1000)
            response.headers["X-Correlation-ID"] = correlation_id

            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

            return response

        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)

            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=duration_ms,
                exc_info=True,
            )

            # Re-raise to let FastAPI handle it
            raise

        finally:
            clear_contextvars()


class SessionContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware to bind the storefront session id from the X-Session-ID header
    to the logging context.

    Runs after LoggingMiddleware. Malformed ids are not bound; the routes
    reject them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        session_id = request.headers.get(SESSION_HEADER)

        if session_id:
            try:
                bind_contextvars(session_id=validate_session_id(session_id))
            except ValueError:
                logger.debug("invalid_session_header_ignored")

        return await call_next(request)
