"""Application exception classes and handlers."""

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from quirra.schemas.response_schema import ErrorResponse

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class TokenExpiredError(AppException):
    """Token has expired."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
            status_code=401,
        )


class TokenRevokedError(AppException):
    """Token was issued before a revoke-all request."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has been revoked",
            code="TOKEN_REVOKED",
            status_code=401,
        )


class InvalidTokenError(AppException):
    """Token is invalid."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(
            message=message,
            code="INVALID_TOKEN",
            status_code=401,
        )


# --- Authorization (403) ---


class AuthorizationError(AppException):
    """Insufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


# --- Bad Request (400) ---


class InvalidRecoveryCodeError(AppException):
    """Recovery email verification code was rejected."""

    def __init__(self, message: str = "Invalid or expired code") -> None:
        super().__init__(
            message=message,
            code="INVALID_RECOVERY_CODE",
            status_code=400,
        )


class InvalidSecurityFieldError(AppException):
    """Attempt to patch a security column that is not client-writable."""

    def __init__(self, field: str) -> None:
        super().__init__(
            message=f"Field '{field}' cannot be updated",
            code="INVALID_FIELD",
            status_code=400,
        )


class EmptyConversationError(AppException):
    """Nothing to summarize."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid input for summarization.",
            code="EMPTY_CONVERSATION",
            status_code=400,
        )


# --- Not Found (404) ---


class SessionNotFoundError(AppException):
    """Chat session not found."""

    def __init__(self, message: str = "Conversation not found") -> None:
        super().__init__(
            message=message,
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


class ShareNotFoundError(AppException):
    """Share link not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Not found",
            code="SHARE_NOT_FOUND",
            status_code=404,
        )


class LibraryItemNotFoundError(AppException):
    """Library item not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Library item not found",
            code="LIBRARY_ITEM_NOT_FOUND",
            status_code=404,
        )


class DeviceNotFoundError(AppException):
    """Registered device not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Device not found",
            code="DEVICE_NOT_FOUND",
            status_code=404,
        )


# --- Conflict (409) ---


class SessionAlreadyExistsError(AppException):
    """Chat session id already taken."""

    def __init__(self) -> None:
        super().__init__(
            message=(
                "A chat session with this ID already exists. "
                "Please try again with a new ID."
            ),
            code="SESSION_ALREADY_EXISTS",
            status_code=409,
        )


# --- Gone (410) ---


class ShareGoneError(AppException):
    """Share link revoked, expired or out of views."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="SHARE_GONE", status_code=410)


# --- Upstream providers (5xx) ---


class LLMNotConfiguredError(AppException):
    """No API key configured for a required model call."""

    def __init__(self, feature: str) -> None:
        super().__init__(
            message=f"Server configuration error: API key for {feature} is missing.",
            code="LLM_NOT_CONFIGURED",
            status_code=500,
        )


class ProviderError(AppException):
    """Model provider answered with an error status."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="PROVIDER_ERROR", status_code=502)


class ProviderUnavailableError(AppException):
    """Model provider could not be reached."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message=message, code="PROVIDER_UNAVAILABLE", status_code=503
        )


class ProviderTimeoutError(AppException):
    """Model provider did not answer in time."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="PROVIDER_TIMEOUT", status_code=504)


class AuthProviderError(AppException):
    """Auth provider admin/user API call failed."""

    def __init__(self, message: str) -> None:
        super().__init__(
            message=message, code="AUTH_PROVIDER_ERROR", status_code=502
        )


# --- Exception Handlers ---


def _error_body(status: int, message: str, code: str) -> dict:
    return ErrorResponse(status=status, message=message, code=code).model_dump()


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures as 400 with the first problem."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(
        status_code=400,
        content=_error_body(400, message, "VALIDATION_ERROR"),
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Pass database errors through as 500 with the store's message."""
    original = getattr(exc, "orig", None)
    message = str(original) if original is not None else str(exc)
    logger.error("Database error", path=request.url.path, error=message)
    return JSONResponse(
        status_code=500,
        content=_error_body(500, message, "DATABASE_ERROR"),
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Convert anything uncaught into a generic 500."""
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body(500, "An unexpected error occurred.", "INTERNAL_ERROR"),
    )
