"""
Error taxonomy for the gallery API.

Every domain failure is a ``GalleryError`` carrying the HTTP status it maps to.
Handlers registered by ``setup_exception_handlers`` render all of them, plus
framework HTTP errors, request validation errors and unexpected exceptions,
as ``{"error": message}``.
"""

import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException


class GalleryError(Exception):
    """Base exception for gallery errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(GalleryError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class UnsupportedMediaType(InvalidInput):
    default_message = "Only image files allowed"


class DuplicateUsername(InvalidInput):
    default_message = "Username already exists"


class InvalidCredentials(GalleryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class Unauthenticated(GalleryError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class Forbidden(GalleryError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class NotFound(GalleryError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class PayloadTooLarge(GalleryError):
    status_code = 413
    default_message = "File too large"


class StorageFailure(GalleryError):
    """Storage backend failed. Backend detail is logged, never returned."""

    default_message = "Storage operation failed"


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(GalleryError)
    async def gallery_error_handler(request: Request, exc: GalleryError):
        logger.warning(
            "{} {} -> {} {}",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
        return error_response(exc.message, exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning("{} {} -> {} {}", request.method, request.url.path, exc.status_code, exc.detail)
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            message = f"{location}: {errors[0].get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        logger.warning("Validation error on {}: {}", request.url.path, message)
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on {} {}: {}: {}\n{}",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
            traceback.format_exc(),
        )
        return error_response("Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
