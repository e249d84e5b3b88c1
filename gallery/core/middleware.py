# gallery/core/middleware.py
import time

from fastapi import HTTPException, Request
from loguru import logger
from starlette.datastructures import Headers

from gallery.core.errors import PayloadTooLarge, error_response

# Room for multipart boundaries and the non-file form fields
MULTIPART_OVERHEAD = 64 * 1024


class BodySizeLimitMiddleware:
    """Reject request bodies that can't hold a file within the upload limit.

    A declared ``Content-Length`` over the limit is refused before the app
    runs. Bodies without one (chunked) are counted as they stream in and cut
    off as soon as they pass the limit.
    """

    def __init__(self, app, max_file_size: int):
        self.app = app
        self.max_body_size = max_file_size + MULTIPART_OVERHEAD

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit() and int(length) > self.max_body_size:
            logger.warning(
                "Rejected {} {}: body of {} bytes exceeds {}",
                scope["method"],
                scope["path"],
                length,
                self.max_body_size,
            )
            exc = PayloadTooLarge()
            response = error_response(exc.message, exc.status_code)
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(
                        "Rejected {} {}: streamed body exceeds {} bytes",
                        scope["method"],
                        scope["path"],
                        self.max_body_size,
                    )
                    # Raised mid-read; the exception handlers turn it into a 413
                    raise HTTPException(
                        status_code=PayloadTooLarge.status_code,
                        detail=PayloadTooLarge.default_message,
                    )
            return message

        await self.app(scope, limited_receive, send)


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "{} {} -> {} ({:.1f} ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response
