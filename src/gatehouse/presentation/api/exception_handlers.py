"""Centralized exception handlers for the FastAPI application.

Domain and auth exceptions are mapped to HTTP responses with a
consistent error format.

Error Response Format:
    {
        "detail": "Human-readable error message",
        "code": "MACHINE_READABLE_ERROR_CODE"
    }

Request validation failures add an ``errors`` list with one entry per
offending field.

Usage:
    from gatehouse.presentation.api.exception_handlers import (
        setup_exception_handlers,
    )

    app = FastAPI()
    setup_exception_handlers(app)
"""

import logging
from enum import Enum
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gatehouse_auth import (
    AuthError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    InvalidSignatureError,
    InvalidTokenError,
    KeySetUnavailableError,
    MalformedTokenError,
    MissingTokenError,
    TokenExpiredError,
    WeakPasswordError,
)
from gatehouse_identity import (
    EmailAlreadyExistsError,
    InvalidEmailError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the ``code`` field."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    KEY_SET_UNAVAILABLE = "KEY_SET_UNAVAILABLE"
    AUTH_ERROR = "AUTH_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Exception Type to HTTP Status Mapping
# =============================================================================

# Most specific first; the first isinstance match wins.
EXCEPTION_TO_ERROR: list[tuple[type[Exception], int, ErrorCode]] = [
    # 400 Bad Request - validation and credential errors
    (InvalidEmailError, status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION_ERROR),
    (WeakPasswordError, status.HTTP_400_BAD_REQUEST, ErrorCode.VALIDATION_ERROR),
    (EmailAlreadyExistsError, status.HTTP_400_BAD_REQUEST, ErrorCode.DUPLICATE_EMAIL),
    (
        InvalidCredentialsError,
        status.HTTP_400_BAD_REQUEST,
        ErrorCode.INVALID_CREDENTIALS,
    ),
    (UserNotFoundError, status.HTTP_400_BAD_REQUEST, ErrorCode.USER_NOT_FOUND),
    # 401 Unauthorized - token errors
    (MissingTokenError, status.HTTP_401_UNAUTHORIZED, ErrorCode.NOT_AUTHENTICATED),
    (TokenExpiredError, status.HTTP_401_UNAUTHORIZED, ErrorCode.TOKEN_EXPIRED),
    (InvalidSignatureError, status.HTTP_401_UNAUTHORIZED, ErrorCode.INVALID_SIGNATURE),
    (MalformedTokenError, status.HTTP_401_UNAUTHORIZED, ErrorCode.MALFORMED_TOKEN),
    (InvalidTokenError, status.HTTP_401_UNAUTHORIZED, ErrorCode.INVALID_TOKEN),
    (
        InvalidRefreshTokenError,
        status.HTTP_401_UNAUTHORIZED,
        ErrorCode.INVALID_REFRESH_TOKEN,
    ),
    # 503 Service Unavailable - key set could not be fetched
    (
        KeySetUnavailableError,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode.KEY_SET_UNAVAILABLE,
    ),
]


def resolve_error(exc: Exception) -> tuple[int, ErrorCode]:
    """Determine HTTP status and error code for a handled exception."""
    for exc_type, status_code, code in EXCEPTION_TO_ERROR:
        if isinstance(exc, exc_type):
            return status_code, code

    if isinstance(exc, AuthError):
        return status.HTTP_400_BAD_REQUEST, ErrorCode.AUTH_ERROR

    return status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR


def _create_error_response(
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": message,
            "code": code,
            **extra,
        },
        headers=headers,
    )


def _format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    errors = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        message = error.get("msg", "Invalid value")
        # pydantic prefixes messages of ValueErrors raised in validators
        message = message.removeprefix("Value error, ")
        errors.append(
            {
                "type": "field",
                "msg": message,
                "path": ".".join(loc[1:]),
                "location": loc[0] if loc else "body",
            },
        )
    return errors


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application.

    Parameters
    ----------
    app
        The FastAPI application instance
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Report every invalid field at once with status 400."""
        errors = _format_validation_errors(exc)
        logger.warning(
            "Validation failed on %s %s: %s",
            request.method,
            request.url.path,
            [e["path"] for e in errors],
        )
        return _create_error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=errors[0]["msg"] if errors else "Validation failed",
            code=ErrorCode.VALIDATION_ERROR.value,
            errors=errors,
        )

    async def domain_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle auth and identity exceptions with structured response."""
        status_code, code = resolve_error(exc)
        message = getattr(exc, "message", None) or str(exc)

        logger.warning(
            "%s on %s %s: %s (code=%s)",
            type(exc).__name__,
            request.method,
            request.url.path,
            message,
            code.value,
        )

        headers = None
        if status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}

        return _create_error_response(
            status_code=status_code,
            message=message,
            code=code.value,
            headers=headers,
        )

    for exc_type in (
        AuthError,
        InvalidEmailError,
        EmailAlreadyExistsError,
        UserNotFoundError,
    ):
        app.add_exception_handler(exc_type, domain_exception_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unhandled exceptions with consistent error format."""
        logger.exception(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="An internal error occurred",
            code=ErrorCode.INTERNAL_ERROR.value,
        )
