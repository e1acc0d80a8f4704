"""ElevenLabs text-to-speech adapter."""

from __future__ import annotations

import base64

import httpx
import structlog

from griot.providers.base import ProviderClient, ProviderResponse

logger = structlog.get_logger(__name__)


class ElevenLabsClient(ProviderClient):
    """Calls ``/text-to-speech/{voice_id}`` and returns MPEG audio bytes."""

    provider = "elevenlabs"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.elevenlabs.io/v1",
        model_id: str = "eleven_monolingual_v1",
        stability: float = 0.5,
        similarity_boost: float = 0.75,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._api_key = api_key
        self._model_id = model_id
        self._stability = stability
        self._similarity_boost = similarity_boost

    def _auth_headers(self) -> dict[str, str]:
        return {"xi-api-key": self._api_key}

    async def synthesize(self, text: str, voice_id: str) -> ProviderResponse:
        logger.info("tts_request", voice_id=voice_id, chars=len(text))
        return await self._send(
            "POST",
            f"/text-to-speech/{voice_id}",
            json_body={
                "text": text,
                "model_id": self._model_id,
                "voice_settings": {
                    "stability": self._stability,
                    "similarity_boost": self._similarity_boost,
                },
            },
            headers={"Accept": "audio/mpeg"},
            expect_json=False,
        )


def to_audio_data_url(content: bytes, mime_type: str = "audio/mpeg") -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
