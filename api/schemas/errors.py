"""Error detail payloads shared by the routers."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"


class ErrorResponse(BaseModel):
    error: dict[str, Any] = Field(
        ...,
        description="Error details containing code and message",
    )


def create_error_response(code: ErrorCode, message: str) -> dict[str, Any]:
    """Build the `detail` body of an HTTPException.

    Returns:
        dict: ``{"error": {"code": ..., "message": ...}}``
    """
    return ErrorResponse(error={"code": code.value, "message": message}).model_dump()
