"""
Application error taxonomy and the handlers that turn it into HTTP responses.

Every failure leaves the API in the same envelope:

    {"error": str, "details": str | list[str] (optional), "field": str (optional)}
"""

import logging
from typing import Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dating_api.api.validation import describe_errors

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP status and error envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Union[str, list[str], None] = None,
        field: Optional[str] = None,
    ):
        self.message = message or self.message
        self.details = details
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        if self.field is not None:
            body["field"] = self.field
        return body


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Validation Error"


class DuplicateKeyError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Duplicate field value entered"

    def __init__(self, field: str):
        super().__init__(field=field)


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class InvalidCredentialsError(AuthenticationError):
    # Same message for unknown email, deleted account and wrong password
    message = "Invalid email or password"


class InvalidTokenError(AuthenticationError):
    message = "Invalid token"


class TokenExpiredError(AuthenticationError):
    message = "Token expired"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class UnexpectedError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _json(status_code: int, body: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, UnexpectedError):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
    return _json(exc.status_code, exc.to_dict(), headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(details=describe_errors(exc.errors()))
    logger.info(f"Rejected {request.method} {request.url.path}: {error.details}")
    return _json(error.status_code, error.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Framework-level errors (unknown route, wrong method, ...)
    return _json(exc.status_code, {"error": str(exc.detail)}, getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "Internal server error", "details": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error envelope on every failure path of the app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
