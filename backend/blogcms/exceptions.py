"""
Service-level errors and their translation to HTTP responses.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BlogError(Exception):
    """Base error raised by the service layer."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(BlogError):
    """Referenced post, comment or user does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(BlogError):
    """Caller lacks role or ownership for the operation."""
    status_code = status.HTTP_403_FORBIDDEN


class UnauthenticatedError(BlogError):
    """Credentials missing or invalid."""
    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(BlogError):
    """Malformed input, with a human-readable reason."""
    status_code = status.HTTP_400_BAD_REQUEST


async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    logger.debug(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.detail}")
    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(BlogError, blog_error_handler)
