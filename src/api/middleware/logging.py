"""Request logging middleware."""

import logging
import time
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.commons.telemetry.logger import (
    clear_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)

logger = get_logger(__name__)

# Polled by orchestrators every few seconds; only logged at DEBUG.
_HEALTH_PATHS = frozenset({"/health", "/health/live", "/health/ready"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its duration and a request ID.

    The request ID is taken from an inbound ``X-Request-ID`` header when
    present. It is bound to the log context for the duration of the request,
    so service log lines carry it too.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        """Process request with logging."""
        request_id = set_correlation_id(request.headers.get("X-Request-ID"))
        request.state.request_id = request_id

        path = request.url.path
        level = logging.DEBUG if path in _HEALTH_PATHS else logging.INFO
        set_log_context(method=request.method, path=path)

        start_time = time.perf_counter()
        logger.log(
            level,
            "Request started",
            extra={
                "request_id": request_id,
                "query": str(request.query_params),
                "content_length": request.headers.get("content-length"),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.warning(
                "Request raised",
                extra={
                    "request_id": request_id,
                    "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                },
            )
            raise
        finally:
            clear_log_context()

        logger.log(
            level,
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
