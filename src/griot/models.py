"""Pydantic models for the Griot Gazette API.

Request bodies accept the camelCase keys the page sends.  Results are
request-scoped values; nothing here is persisted.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from common.models import ChatMessage


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """A visitor's question plus the persona and recent conversation."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    voice_style: str | None = Field(
        default=None,
        validation_alias=AliasChoices("voiceStyle", "voice_style", "voice", "mode"),
    )
    topic: str | None = None
    history: list[ChatMessage] | None = None

    @field_validator("message", mode="before")
    @classmethod
    def _default_message(cls, value: object) -> object:
        return "" if value is None else value


class ChatResult(BaseModel):
    response: str


# ---------------------------------------------------------------------------
# Image transformation
# ---------------------------------------------------------------------------


class ImageTransformRequest(BaseModel):
    """Photo to transform, as a base64 ``data:`` URL."""

    image: str | None = None


class TransformResult(BaseModel):
    """Outcome of the image fallback chain."""

    success: bool
    transformed_image: str | None = None
    note: str | None = None
    strategy: str | None = None


# ---------------------------------------------------------------------------
# Voice
# ---------------------------------------------------------------------------


class VoiceRequest(BaseModel):
    """Text to read aloud and an optional ElevenLabs voice id."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    voice_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("voiceId", "voice_id"),
    )


class VoiceResult(BaseModel):
    audio_data_url: str
    voice_id: str
