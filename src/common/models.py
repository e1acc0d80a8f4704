"""Shared Pydantic models used across services."""

from pydantic import BaseModel, field_validator


class HealthResponse(BaseModel):
    """Standard health check response."""

    status: str = "healthy"
    service: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
    status_code: int = 500


class ChatMessage(BaseModel):
    """Standard chat message format.

    Clients send loosely shaped history, so a missing role reads as the
    user and missing content as an empty turn.
    """

    role: str = "user"  # "user", "assistant"
    content: str = ""

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value: object) -> object:
        return "user" if value is None else value

    @field_validator("content", mode="before")
    @classmethod
    def _default_content(cls, value: object) -> object:
        return "" if value is None else value
