"""
PhD Hub - HTTP Middleware
Request correlation and timing, security headers, body size limit
"""

import logging
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from phdhub.core.logging_config import logger, request_id_var, user_id_var


# Liveness probes and API docs are not worth a log line each
QUIET_PATHS = {"/", "/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}

SLOW_REQUEST_MS = 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id (the caller's X-Request-ID when sent), log
    one line when it completes, and echo X-Request-ID and X-Response-Time
    on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = request_id_var.set(request_id)
        path = request.url.path
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {path} raised {type(exc).__name__}",
                exc_info=True,
                extra={"event_type": "http_request_error", "http_method": request.method, "http_path": path},
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            request_id_var.reset(token)
            user_id_var.set("")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if path not in QUIET_PATHS:
            status = response.status_code
            level = logging_level_for(status, duration_ms)
            logger.log(
                level,
                f"{request.method} {path} - {status} ({duration_ms:.2f}ms) [{request_id}]",
                extra={
                    "event_type": "http_request",
                    "http_method": request.method,
                    "http_path": path,
                    "http_status": status,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        return response


def logging_level_for(status: int, duration_ms: float) -> int:
    """ERROR for 5xx, WARNING for 4xx and slow requests, INFO otherwise"""
    if status >= 500:
        return logging.ERROR
    if status >= 400 or duration_ms > SLOW_REQUEST_MS:
        return logging.WARNING
    return logging.INFO


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Headers every JSON API response should carry"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject oversized bodies before they are read.
    File bytes go straight to object storage, so API bodies stay small.
    """

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            logger.warning(
                f"Request body too large: {content_length} bytes (max: {self.max_size})",
                extra={"event_type": "request_too_large", "http_path": request.url.path},
            )
            return JSONResponse(
                status_code=413,
                content={"error": "Request body too large", "code": "REQUEST_TOO_LARGE"},
            )

        return await call_next(request)
