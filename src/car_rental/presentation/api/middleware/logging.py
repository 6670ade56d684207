"""HTTP request/response logging middleware for FastAPI."""

import time
import logging
from typing import Callable, Optional, Set
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ....infrastructure.logging import (
    generate_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    get_logger
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Never written to logs
SENSITIVE_HEADERS = {
    'authorization',
    'cookie',
    'set-cookie',
    'x-api-key',
    'proxy-authorization',
}

DEFAULT_EXCLUDED_PATHS = {
    '/docs',
    '/redoc',
    '/openapi.json',
    '/favicon.ico'
}


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP exchange and tags it with a correlation ID.

    The ID is taken from the incoming ``X-Correlation-ID`` header when
    present, made available to all loggers for the duration of the
    request, and echoed back on the response.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths if exclude_paths is not None else DEFAULT_EXCLUDED_PATHS

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)
        start_time = time.perf_counter()

        try:
            logger.info(
                f"HTTP Request: {request.method} {request.url.path}",
                extra={
                    "request_method": request.method,
                    "request_path": request.url.path,
                    "request_query": str(request.query_params) if request.query_params else None,
                    "request_headers": sanitize_headers(request.headers),
                    "client_host": request.client.host if request.client else "unknown",
                }
            )

            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers[CORRELATION_HEADER] = correlation_id

            logger.log(
                _level_for_status(response.status_code),
                f"HTTP Response: {request.method} {request.url.path} -> "
                f"{response.status_code} ({duration_ms:.2f}ms)",
                extra={
                    "request_method": request.method,
                    "request_path": request.url.path,
                    "response_status": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                }
            )
            return response

        except Exception as exc:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_method": request.method,
                    "request_path": request.url.path,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                    "error_type": type(exc).__name__
                },
                exc_info=True
            )
            raise

        finally:
            clear_correlation_id()


def sanitize_headers(headers) -> dict:
    """Copy headers with sensitive values redacted."""
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def _level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO
