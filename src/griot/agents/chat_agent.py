"""Persona chat agent.

One provider call per question, no fallback chain.  Every outcome is a
displayable message: a missing credential, a provider error and an empty
completion all come back as text so the page always has a reply to show.
"""

from __future__ import annotations

import structlog

from griot.config import Settings
from griot.models import ChatRequest
from griot.persona import compose_system_prompt, resolve_topic, resolve_voice_style, trim_history
from griot.providers.chat import ChatClient, build_chat_client, chat_credential

logger = structlog.get_logger(__name__)

EMPTY_COMPLETION_MESSAGE = "I apologize, I couldn't generate a response."


def setup_instructions(env_var: str) -> str:
    """Message shown when the chat credential is not configured."""
    return (
        "⚠️ Hey! The chatbot isn't set up yet. Add your API key to .env:\n\n"
        f"{env_var}=your_key_here\n\n"
        "Then restart the server."
    )


def connection_error_message(error: str) -> str:
    return (
        f"⚠️ Error connecting to AI: {error}\n\n"
        "Please check that your API key is valid and try again."
    )


class ChatAgent:
    """Answers history questions in the selected persona."""

    def __init__(self, settings: Settings, client: ChatClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> ChatClient:
        if self._client is None:
            self._client = build_chat_client(self._settings)
        return self._client

    async def respond(self, request: ChatRequest) -> str:
        """Return the assistant's reply text for *request*."""
        api_key, env_var = chat_credential(self._settings)
        if not api_key:
            logger.warning("chat_credential_missing", env_var=env_var)
            return setup_instructions(env_var)

        voice_style = resolve_voice_style(request.voice_style)
        topic = resolve_topic(request.topic)
        system_prompt = compose_system_prompt(
            voice_style, topic, max_words=self._settings.chat_max_words
        )
        history = trim_history(request.history, self._settings.chat_history_limit)

        try:
            client = self._get_client()
            reply = await client.complete(system_prompt, history, request.message)
        except Exception as exc:
            logger.warning(
                "chat_completion_failed",
                provider=self._settings.chat_provider,
                error=str(exc),
                exc_info=True,
            )
            return connection_error_message(str(exc) or exc.__class__.__name__)

        logger.info(
            "chat_completion_succeeded",
            provider=self._settings.chat_provider,
            voice_style=voice_style.value,
            topic=topic.value,
            history_turns=len(history),
        )
        return reply or EMPTY_COMPLETION_MESSAGE
