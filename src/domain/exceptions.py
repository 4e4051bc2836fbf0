"""Domain exceptions for the video asset server."""


class DomainException(Exception):
    """Base exception for domain errors.

    ``str(exc)`` is safe to show to API clients. ``reason`` holds internal
    detail for logs only.
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        self.message = message
        self.reason = reason
        super().__init__(message)


class ValidationException(DomainException):
    """Raised when client input is rejected before any side effect."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class VideoNotFoundException(DomainException):
    """Raised when a requested video is not found."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class RemoteStoreException(DomainException):
    """Raised when the remote asset store fails an operation."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        super().__init__(f"Remote asset store failed during {operation}", reason)


class UploadException(RemoteStoreException):
    """Raised when transferring or confirming an upload fails."""

    def __init__(self, reason: str) -> None:
        super().__init__("upload", reason)
        self.message = "Failed to upload video to the asset store"
        self.args = (self.message,)


class PersistenceException(DomainException):
    """Raised when the metadata store rejects a write."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        super().__init__(f"Failed to {operation} video metadata", reason)


class UnexpectedException(DomainException):
    """Raised for failures that fit no other category."""

    def __init__(self, reason: str) -> None:
        super().__init__("An unexpected error occurred", reason)
