"""Early rejection of oversized uploads."""

from starlette.middleware.base import RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import ValidationException

logger = get_logger(__name__)

# Room for the form fields and multipart boundaries around the file part.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def upload_size_guard(upload_path: str, max_file_bytes: int):
    """Build middleware that refuses an upload by its declared size.

    The multipart body is spooled in full before a route runs, so a file
    limit enforced only in the route applies after the bytes have arrived.
    This checks ``Content-Length`` first. Chunked requests carry no length
    and still hit the limit while the payload is buffered.

    Args:
        upload_path: Path of the upload route.
        max_file_bytes: Largest accepted file.

    Returns:
        An ``http`` middleware function.
    """
    limit = max_file_bytes + MULTIPART_OVERHEAD_BYTES

    async def guard(request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "POST" and request.url.path == upload_path:
            declared = request.headers.get("content-length")
            if declared and declared.isdigit() and int(declared) > limit:
                logger.warning(
                    "Upload rejected before reading body",
                    extra={"content_length": int(declared), "limit_bytes": limit},
                )
                raise ValidationException(
                    f"File exceeds the maximum size of "
                    f"{max_file_bytes // (1024 * 1024)} MB",
                    field="video",
                )
        return await call_next(request)

    return guard
