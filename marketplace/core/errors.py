"""
Error taxonomy and FastAPI exception handlers.

Every failure leaves the service as a JSON body of one shape:

    {"error": "<machine token>", "message": "<human readable text>"}

Handlers are registered on the application in ``marketplace.main``.
"""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error carrying a machine token and an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_token = "internal_error"
    default_message = "An unexpected error occurred."

    def __init__(
        self,
        token: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.token = token or self.default_token
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_token = "unauthorized"
    default_message = "Authentication required."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_token = "forbidden"
    default_message = "You are not allowed to act on this resource."


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_token = "not_found"
    default_message = "Resource not found."


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_token = "conflict"
    default_message = "The resource is in a conflicting state."


class InvalidTransition(Conflict):
    default_token = "invalid_transition"

    def __init__(self, entity: str, old_status: str, new_status: str):
        super().__init__(
            message=f"Cannot move {entity} from '{old_status}' to '{new_status}'.",
            details={"entity": entity, "from": old_status, "to": new_status},
        )


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_token = "validation_error"
    default_message = "Request validation failed."


class Upstream(AppError):
    default_token = "upstream_error"
    default_message = "A backing service failed. Please try again."


def _envelope(token: str, message: str, status_code: int, **extra) -> JSONResponse:
    body = {"error": token, "message": message}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{exc.token} on {request.method} {request.url.path}: {exc.message}",
            exc_info=exc,
        )
    else:
        logger.info(
            f"{exc.token} ({exc.status_code}) on {request.method} {request.url.path}"
        )
    return _envelope(exc.token, exc.message, exc.status_code, **exc.details)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {errors}")
    return _envelope(
        "validation_error",
        "Request validation failed.",
        status.HTTP_400_BAD_REQUEST,
        validation_errors=errors,
    )


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    token = {
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
    }.get(exc.status_code, "http_error")
    return _envelope(token, str(exc.detail), exc.status_code)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Store errors are logged with the traceback but never echoed to the caller.
    logger.error(
        f"Database error on {request.method} {request.url.path}: {type(exc).__name__}",
        exc_info=exc,
    )
    return _envelope(
        Upstream.default_token,
        Upstream.default_message,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return _envelope(
        "rate_limited",
        f"Rate limit exceeded: {exc.detail}",
        status.HTTP_429_TOO_MANY_REQUESTS,
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
