"""Unified API response schemas."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Error response with status, message, and error code."""

    status: int
    message: str
    code: str


class ApiResponse(BaseModel, Generic[T]):
    """Success response with status, message, and data (no code field)."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


def success_response(
    data: T, status: int = 200, message: str = "Success", **fields: Any
) -> dict:
    """Build a success response dict for returning from endpoints.

    Extra ``fields`` are placed at the top level next to ``data`` for routes
    whose clients read the payload directly from the body.
    """
    return {"status": status, "message": message, "data": data, **fields}
