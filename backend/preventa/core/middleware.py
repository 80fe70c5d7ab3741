"""Middleware for request logging and tracing."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

# Probe endpoints are polled constantly and would drown the log
QUIET_PATH_PREFIXES = ("/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every API request with timing and a request ID."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        quiet = request.url.path.startswith(QUIET_PATH_PREFIXES)
        start_time = time.perf_counter()

        if not quiet:
            logger.info("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
            )
            raise

        if not quiet:
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )

        response.headers["X-Request-ID"] = request_id
        return response
