"""Chat-completion adapters (OpenAI and Google Gemini).

Both adapters take the composed system prompt, the trimmed history and the
current message, and return the reply text (``None`` when the provider
answered without any text).
"""

from __future__ import annotations

from typing import Protocol, Sequence

import structlog

from common.models import ChatMessage

from griot.config import Settings
from griot.errors import ConfigurationMissing
from griot.persona import normalize_history

logger = structlog.get_logger(__name__)


class ChatClient(Protocol):
    """Anything that can answer one chat turn."""

    provider: str

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
    ) -> str | None: ...


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class OpenAIChatClient:
    """Chat completions through the ``openai`` async SDK."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_tokens: int = 150,
        temperature: float = 0.8,
    ) -> None:
        from openai import AsyncOpenAI

        self._client = AsyncOpenAI(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
    ) -> str | None:
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": m.role, "content": m.content} for m in history)
        messages.append({"role": "user", "content": message})

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------


def gemini_contents(history: Sequence[ChatMessage], message: str) -> list[dict[str, object]]:
    """Build an alternating Gemini ``contents`` list ending with *message*.

    Gemini rejects histories that do not alternate, so the history is
    normalized first.  A trailing user turn (typically a question whose
    answer never arrived) is dropped so the current message follows an
    assistant turn.
    """
    turns = normalize_history(history)
    if turns and turns[-1].role == "user":
        turns = turns[:-1]

    contents: list[dict[str, object]] = [
        {
            "role": "model" if m.role == "assistant" else "user",
            "parts": [{"text": m.content}],
        }
        for m in turns
    ]
    contents.append({"role": "user", "parts": [{"text": message}]})
    return contents


class GeminiChatClient:
    """Chat completions through the ``google-genai`` async client."""

    provider = "gemini"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        max_tokens: int = 150,
        temperature: float = 0.8,
    ) -> None:
        from google import genai

        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
    ) -> str | None:
        from google.genai import types

        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=self._temperature,
            max_output_tokens=self._max_tokens,
        )
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=gemini_contents(history, message),
            config=config,
        )
        return response.text


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def chat_credential(settings: Settings) -> tuple[str, str]:
    """Return ``(api_key, env_var_name)`` for the configured chat provider."""
    if settings.chat_provider.lower() == "gemini":
        return settings.google_api_key, "GOOGLE_API_KEY"
    return settings.openai_api_key, "OPENAI_API_KEY"


def build_chat_client(settings: Settings) -> ChatClient:
    """Instantiate the adapter selected by ``settings.chat_provider``."""
    api_key, env_var = chat_credential(settings)
    if not api_key:
        raise ConfigurationMissing(f"{env_var} is not configured", env_var=env_var)

    if settings.chat_provider.lower() == "gemini":
        logger.debug("chat_client_created", provider="gemini", model=settings.gemini_model)
        return GeminiChatClient(
            api_key,
            model=settings.gemini_model,
            max_tokens=settings.chat_max_tokens,
            temperature=settings.chat_temperature,
        )

    logger.debug("chat_client_created", provider="openai", model=settings.chat_model)
    return OpenAIChatClient(
        api_key,
        model=settings.chat_model,
        max_tokens=settings.chat_max_tokens,
        temperature=settings.chat_temperature,
    )
