"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import (
    DomainException,
    PersistenceException,
    RemoteStoreException,
    UnexpectedException,
    UploadException,
    ValidationException,
    VideoNotFoundException,
)

logger = get_logger(__name__)

# Most specific first: UploadException is a RemoteStoreException.
_SERVER_ERRORS: list[tuple[type[DomainException], str]] = [
    (UploadException, "UPLOAD_ERROR"),
    (RemoteStoreException, "REMOTE_STORE_ERROR"),
    (PersistenceException, "PERSISTENCE_ERROR"),
    (UnexpectedException, "INTERNAL_ERROR"),
]


class APIError(Exception):
    """Base API error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code for clients.
            message: Human-readable error message.
            status_code: HTTP status code.
            details: Additional error details.
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response.

    Args:
        request: HTTP request.
        code: Error code.
        message: Error message.
        status_code: HTTP status code.
        details: Additional details.

    Returns:
        JSON error response.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        headers={"X-Request-ID": request_id},
        content={
            "message": message,
            "code": code,
            "details": details or {},
            "request_id": request_id,
        },
    )


def _handle_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle exception and return appropriate error response.

    Client-facing messages come from the exception's public message;
    internal reasons are only logged.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        JSON error response.
    """
    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return _build_error_response(
            request=request,
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
        )

    if isinstance(exc, ValidationException):
        logger.warning(f"Validation error: {exc}", extra={"field": exc.field})
        return _build_error_response(
            request=request,
            code="VALIDATION_ERROR",
            message=str(exc),
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": exc.field} if exc.field else None,
        )

    if isinstance(exc, VideoNotFoundException):
        logger.warning(f"Video not found: {exc.video_id}")
        return _build_error_response(
            request=request,
            code="VIDEO_NOT_FOUND",
            message=str(exc),
            status_code=status.HTTP_404_NOT_FOUND,
            details={"video_id": exc.video_id},
        )

    for exc_type, code in _SERVER_ERRORS:
        if isinstance(exc, exc_type):
            logger.error(
                f"{type(exc).__name__}: {exc}",
                extra={"error_code": code, "reason": exc.reason},
            )
            return _build_error_response(
                request=request,
                code=code,
                message=str(exc),
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def request_validation_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Render FastAPI request validation failures as a 400 error body."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in errors
    ]
    logger.warning("Request validation failed", extra={"fields": fields})
    return _build_error_response(
        request=request,
        code="VALIDATION_ERROR",
        message="Invalid request",
        status_code=status.HTTP_400_BAD_REQUEST,
        details={"fields": fields},
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)
