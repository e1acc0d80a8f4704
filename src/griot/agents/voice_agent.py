"""Text-to-speech agent: a single ElevenLabs call, no fallback chain."""

from __future__ import annotations

import structlog

from griot.config import Settings
from griot.errors import ConfigurationMissing, ValidationFailure
from griot.models import VoiceRequest, VoiceResult
from griot.orchestrator.fallback import Strategy, run_fallback
from griot.providers.base import ProviderResponse
from griot.providers.elevenlabs import ElevenLabsClient, to_audio_data_url

logger = structlog.get_logger(__name__)


def _has_audio(raw: object) -> bool:
    return isinstance(raw, ProviderResponse) and raw.ok and bool(raw.content)


def _describe_tts_failure(raw: object) -> str:
    if isinstance(raw, ProviderResponse) and not raw.ok:
        return f"ElevenLabs API error: {raw.describe()}"
    return "ElevenLabs API error: empty audio response"


class VoiceAgent:
    """Reads text aloud with the requested (or default) persona voice."""

    def __init__(self, settings: Settings, client: ElevenLabsClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> ElevenLabsClient:
        if self._client is None:
            self._client = ElevenLabsClient(
                self._settings.elevenlabs_api_key,
                base_url=self._settings.elevenlabs_base_url,
                model_id=self._settings.tts_model_id,
                stability=self._settings.tts_stability,
                similarity_boost=self._settings.tts_similarity_boost,
                timeout=self._settings.voice_timeout,
            )
        return self._client

    async def speak(self, request: VoiceRequest) -> VoiceResult:
        """Synthesize *request.text*.

        Raises ``ValidationFailure`` for empty text, ``ConfigurationMissing``
        without a credential and ``FallbackExhausted`` when the provider call
        fails.
        """
        if not request.text or not request.text.strip():
            raise ValidationFailure("Text is required")
        if not self._settings.elevenlabs_api_key:
            raise ConfigurationMissing(
                "ElevenLabs API key not configured. Please add ELEVENLABS_API_KEY to .env",
                env_var="ELEVENLABS_API_KEY",
            )

        voice_id = request.voice_id or self._settings.default_voice_id
        client = self._get_client()
        outcome = await run_fallback(
            [
                Strategy(
                    name=f"tts:{voice_id}",
                    call=lambda: client.synthesize(request.text or "", voice_id),
                    accept=_has_audio,
                    normalize=lambda raw: to_audio_data_url(raw.content),
                    describe_failure=_describe_tts_failure,
                    timeout=self._settings.voice_timeout,
                )
            ]
        )
        logger.info("tts_succeeded", voice_id=voice_id)
        return VoiceResult(audio_data_url=outcome.value, voice_id=voice_id)

    async def close(self) -> None:
        """Shut down the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
