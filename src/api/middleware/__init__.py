"""API middleware components."""

from src.api.middleware.error_handler import (
    APIError,
    error_handler_middleware,
    request_validation_handler,
)
from src.api.middleware.logging import LoggingMiddleware
from src.api.middleware.upload_limit import upload_size_guard

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "upload_size_guard",
    "error_handler_middleware",
    "request_validation_handler",
]
