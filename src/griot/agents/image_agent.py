"""Photo transformation agent.

Fallback plan, built fresh for every request:

1. ``edit:<model>`` for each configured edit model: upload the original
   photo with the editing instruction.
2. ``caption+generate``: caption the photo with the first vision model
   that answers, then generate a new image from the caption plus the
   instruction.

The first strategy that yields an image wins.  If all of them fail the
agent raises :class:`~griot.errors.FallbackExhausted` carrying every
attempt's failure; the API layer decides the status code.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import re
from dataclasses import dataclass
from typing import Awaitable, cast

import structlog

from griot.config import Settings
from griot.errors import ConfigurationMissing, ProviderTimeout, ValidationFailure
from griot.models import ImageTransformRequest, TransformResult
from griot.orchestrator.fallback import Strategy, first_success, run_fallback
from griot.providers.base import ImageReference, ProviderResponse, extract_image_reference
from griot.providers.xai import XAIImageClient, extract_caption

logger = structlog.get_logger(__name__)

_DATA_URL_RE = re.compile(r"^data:(image/[a-zA-Z+]+);base64,(.+)$")

def decode_base64(b64: str) -> bytes:
    """Decode standard or URL-safe base64, with or without padding."""
    cleaned = "".join(b64.split()).rstrip("=").replace("-", "+").replace("_", "/")
    return base64.b64decode(cleaned + "=" * (-len(cleaned) % 4), validate=True)


CAPTION_STRATEGY = "caption+generate"
GENERATION_NOTE = "Used generation fallback - edit endpoint not available"

EDIT_PROMPT = (
    "ONLY darken the skin pigmentation to a deep brown/black African skin tone. "
    "DO NOT change anything else. Keep the EXACT same: face structure, bone structure, "
    "eye shape, eye color, nose shape, nose size, lip shape, lip size, facial proportions, "
    "wrinkles, freckles, moles, hair, hairstyle, hair color, eyebrows, expression, pose, "
    "angle, lighting, clothing, background, and every other detail. This is a color "
    "adjustment ONLY - like applying a darker skin filter. The person must remain 100% "
    "recognizable as the same individual."
)

CAPTION_INSTRUCTION = (
    "FIRST state if this is a MAN or WOMAN. Then in under 350 characters total, describe: "
    "their gender, approximate age, face shape, eye shape, nose type, lip shape, facial hair "
    "(if any), hair style/color, expression, clothing, and pose. Start with "
    '"A [man/woman]..." Be very specific about gender.'
)

REGENERATION_SUFFIX = (
    " - but with dark African/black skin tone. Keep the EXACT same gender, face, features, "
    "hair, clothes, pose. Only change skin color to deep brown/black."
)


@dataclass(frozen=True)
class DecodedImage:
    """A validated upload."""

    data_url: str
    mime_type: str
    b64: str
    content: bytes


def _has_image(raw: object) -> bool:
    return (
        isinstance(raw, ProviderResponse)
        and raw.ok
        and extract_image_reference(raw.payload) is not None
    )


def _to_image_reference(raw: ProviderResponse) -> ImageReference:
    return cast(ImageReference, extract_image_reference(raw.payload))


def _has_caption(raw: object) -> bool:
    return isinstance(raw, ProviderResponse) and raw.ok and extract_caption(raw.payload) is not None


def _to_caption(raw: ProviderResponse) -> str:
    return cast(str, extract_caption(raw.payload))


def _describe_image_failure(raw: object) -> str:
    if isinstance(raw, ProviderResponse) and not raw.ok:
        return raw.describe()
    return "no image returned from API"


class ImageTransformAgent:
    """Runs the edit → alternate edit → caption-and-regenerate chain."""

    def __init__(self, settings: Settings, client: XAIImageClient | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> XAIImageClient:
        if self._client is None:
            self._client = XAIImageClient(
                self._settings.xai_api_key,
                base_url=self._settings.xai_base_url,
                timeout=self._settings.image_timeout,
            )
        return self._client

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, request: ImageTransformRequest) -> DecodedImage:
        """Check configuration and input before any provider is contacted."""
        if not self._settings.xai_api_key:
            raise ConfigurationMissing(
                "xAI API key not configured. Please add XAI_API_KEY to .env",
                env_var="XAI_API_KEY",
            )
        if not request.image:
            raise ValidationFailure("Image is required")

        match = _DATA_URL_RE.match(request.image)
        if match is None:
            raise ValidationFailure("Invalid image format. Expected base64 data URL.")

        mime_type, b64 = match.group(1), match.group(2)
        if len(b64) > self._settings.max_image_base64_chars:
            raise ValidationFailure("Image is too large. Please use an image under 3MB.")

        try:
            content = decode_base64(b64)
        except (binascii.Error, ValueError) as exc:
            raise ValidationFailure("Invalid image format. Expected base64 data URL.") from exc

        return DecodedImage(data_url=request.image, mime_type=mime_type, b64=b64, content=content)

    # ------------------------------------------------------------------
    # Plan
    # ------------------------------------------------------------------

    def build_plan(self, image: DecodedImage) -> list[Strategy[ImageReference]]:
        """Ordered strategies for one request."""
        client = self._get_client()
        plan: list[Strategy[ImageReference]] = []

        for model in self._settings.image_edit_models:

            def edit(model: str = model) -> Awaitable[ProviderResponse]:
                return client.edit_image(model, image.content, image.mime_type, EDIT_PROMPT)

            plan.append(
                Strategy(
                    name=f"edit:{model}",
                    call=edit,
                    accept=_has_image,
                    normalize=_to_image_reference,
                    describe_failure=_describe_image_failure,
                    timeout=self._settings.image_timeout,
                )
            )

        plan.append(
            Strategy(
                name=CAPTION_STRATEGY,
                call=lambda: self._caption_then_generate(image),
                accept=_has_image,
                normalize=_to_image_reference,
                describe_failure=lambda raw: f"generation {_describe_image_failure(raw)}",
            )
        )
        return plan

    def vision_plan(self, image: DecodedImage) -> list[Strategy[str]]:
        client = self._get_client()
        plan: list[Strategy[str]] = []
        for model in self._settings.vision_models:

            def describe(model: str = model) -> Awaitable[ProviderResponse]:
                return client.describe_image(model, image.data_url, CAPTION_INSTRUCTION)

            plan.append(
                Strategy(
                    name=f"vision:{model}",
                    call=describe,
                    accept=_has_caption,
                    normalize=_to_caption,
                    timeout=self._settings.vision_timeout,
                )
            )
        return plan

    async def _caption_then_generate(self, image: DecodedImage) -> ProviderResponse:
        captioned = await first_success(self.vision_plan(image))
        caption = captioned.value[: self._settings.caption_max_chars]
        logger.info("image_captioned", strategy=captioned.strategy, caption_chars=len(caption))

        model = self._settings.image_generation_model
        try:
            return await asyncio.wait_for(
                self._get_client().generate_image(model, f"{caption}{REGENERATION_SUFFIX}"),
                timeout=self._settings.image_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeout(
                f"generation timed out after {self._settings.image_timeout:g}s"
            ) from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def transform(self, request: ImageTransformRequest) -> TransformResult:
        """Validate, run the fallback plan and return the transformed image.

        Raises
        ------
        ConfigurationMissing, ValidationFailure
            Before any provider call.
        FallbackExhausted
            When every strategy failed.
        """
        image = self.validate(request)
        logger.info(
            "image_transform_started",
            mime_type=image.mime_type,
            base64_kb=round(len(image.b64) / 1024),
        )

        outcome = await run_fallback(self.build_plan(image))
        return TransformResult(
            success=True,
            transformed_image=outcome.value.as_str(),
            note=GENERATION_NOTE if outcome.strategy == CAPTION_STRATEGY else None,
            strategy=outcome.strategy,
        )

    async def close(self) -> None:
        """Shut down the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
