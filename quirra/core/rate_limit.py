"""Request rate limiting."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from quirra.schemas.response_schema import ErrorResponse

limiter = Limiter(key_func=get_remote_address)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            status=429, message="Rate limit exceeded", code="RATE_LIMIT_EXCEEDED"
        ).model_dump(),
    )
