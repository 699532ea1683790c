# src/app/exceptions.py
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.message
        self.code = code or self.code
        super().__init__(self.message)


class AuthenticationError(AppError):
    """Missing, malformed or unverifiable credential."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_TOKEN"
    message = "Invalid authentication token"


class TokenExpiredError(AuthenticationError):
    """Credential verified but past its expiry; clients refresh and retry."""
    code = "TOKEN_EXPIRED"
    message = "Token expired"


class AuthorizationError(AppError):
    """Caller is known but not permitted (allowlist, ownership, admin)."""
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Access denied"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_REQUEST"
    message = "Invalid request"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Resource was modified concurrently, please retry"


class UpstreamError(AppError):
    """Identity provider, datastore or content provider failure.

    The message given here is logged; callers only ever see the generic text.
    """
    code = "UPSTREAM_ERROR"
    message = "Internal server error"

    def __init__(self, detail: Optional[str] = None, code: Optional[str] = None):
        super().__init__(None, code)
        self.detail = detail


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if isinstance(exc, UpstreamError):
            logger.error(f"Upstream failure on {request.url.path}: {exc.detail}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return error_response(ValidationError(message))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    return app
