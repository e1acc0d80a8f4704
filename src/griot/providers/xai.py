"""xAI (Grok) adapter for image edit, vision captioning and generation."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from griot.providers.base import ProviderClient, ProviderResponse

logger = structlog.get_logger(__name__)


class XAIImageClient(ProviderClient):
    """Thin async client over the xAI images and chat-completions APIs."""

    provider = "xai"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.x.ai/v1",
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._api_key = api_key

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def edit_image(
        self,
        model: str,
        image_bytes: bytes,
        mime_type: str,
        prompt: str,
    ) -> ProviderResponse:
        """Upload the original image with an editing instruction (multipart)."""
        extension = mime_type.split("/")[-1] or "png"
        logger.info("image_edit_attempt", model=model, bytes=len(image_bytes))
        return await self._send(
            "POST",
            "/images/edits",
            data={"prompt": prompt, "model": model, "n": "1"},
            files={"image": (f"image.{extension}", image_bytes, mime_type)},
        )

    async def describe_image(
        self,
        model: str,
        image_data_url: str,
        instruction: str,
    ) -> ProviderResponse:
        """Ask a vision model to caption the image."""
        logger.info("vision_caption_attempt", model=model)
        body: dict[str, Any] = {
            "model": model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "image_url", "image_url": {"url": image_data_url}},
                        {"type": "text", "text": instruction},
                    ],
                }
            ],
        }
        return await self._send("POST", "/chat/completions", json_body=body)

    async def generate_image(self, model: str, prompt: str) -> ProviderResponse:
        """Generate a fresh image from a text prompt."""
        logger.info("image_generation_attempt", model=model, prompt_chars=len(prompt))
        body = {
            "model": model,
            "prompt": prompt,
            "n": 1,
            "response_format": "url",
        }
        return await self._send("POST", "/images/generations", json_body=body)


def extract_caption(payload: Any) -> str | None:
    """Return ``choices[0].message.content`` or ``None``."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str) and content.strip():
        return content
    return None
