"""Envelope schemas shared by every endpoint (OpenAPI documentation)."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class FieldError(BaseModel):
    field: str
    message: str
    errorCode: str


class ErrorEnvelope(BaseModel):
    """Error envelope; endpoint-specific fields may follow."""

    model_config = ConfigDict(extra="allow")

    success: bool = False
    message: str
    timestamp: str
    statusCode: int | None = None
    errors: list[FieldError] | None = None


class MessageEnvelope(BaseModel):
    """Success envelope with a free-form payload."""

    model_config = ConfigDict(extra="allow")

    success: bool = True
    message: str
    data: Any = None
    timestamp: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorEnvelope, "description": "Validation failed"},
    401: {"model": ErrorEnvelope, "description": "Missing or invalid token"},
    403: {"model": ErrorEnvelope, "description": "Access to another user's data"},
    404: {"model": ErrorEnvelope, "description": "Not found"},
}
