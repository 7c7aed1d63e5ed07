"""Application error taxonomy and the FastAPI handlers that render it."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.validation import format_errors

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error mapped to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """No valid session, or bad credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class AuthorizationError(AppError):
    """Authenticated, but the role is not allowed on this route."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    """Duplicate email or Google id. Reported as 400 to match existing clients."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class RateLimitError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests"

    def __init__(self, message: str | None = None, retry_after: int = 60):
        self.retry_after = retry_after
        super().__init__(
            message,
            details={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class GatewayError(AppError):
    """The external push gateway rejected a batch. The body is logged, not returned."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to send notification"

    def __init__(self, body: str, status_code: int | None = None):
        self.body = body
        self.gateway_status = status_code
        super().__init__()


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


def _error_body(message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if details:
        body.update(details)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own status code."""
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
    )
    if isinstance(exc, GatewayError):
        logger.error(f"Push gateway responded {exc.gateway_status}: {exc.body}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.details),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report pydantic failures as 400 naming the first failing field."""
    messages = format_errors(exc.errors())
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {messages}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(messages[0] if messages else "Invalid request", {"errors": messages}),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the full failure and return a generic message."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content=_error_body(error.message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
