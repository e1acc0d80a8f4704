"""Shared plumbing for HTTP-backed provider adapters.

Adapters return a :class:`ProviderResponse` for every HTTP status so the
fallback orchestrator can decide whether a strategy succeeded.  Only
transport problems raise, and they are mapped onto the error taxonomy in
:mod:`griot.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from griot.errors import ProviderFailure, ProviderNetworkError, ProviderTimeout

logger = structlog.get_logger(__name__)

_DEFAULT_TIMEOUT = 120.0


# ---------------------------------------------------------------------------
# Normalized results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProviderResponse:
    """Raw outcome of one provider HTTP call."""

    status_code: int
    payload: Any = None
    text: str = ""
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def describe(self) -> str:
        """Short diagnostic used in aggregated failure messages."""
        return f"{self.status_code} - {self.text}".strip()


@dataclass(frozen=True)
class ImageUrl:
    """Image hosted by the provider."""

    url: str

    def as_str(self) -> str:
        return self.url


@dataclass(frozen=True)
class InlineImage:
    """Image returned inline as base64."""

    b64: str
    mime_type: str = "image/png"

    def as_str(self) -> str:
        return f"data:{self.mime_type};base64,{self.b64}"


ImageReference = ImageUrl | InlineImage


def extract_image_reference(payload: Any) -> ImageReference | None:
    """Normalize an image-returning provider payload.

    Looks at the first item of ``payload["data"]``; a ``url`` field wins
    over ``b64_json``.  Returns ``None`` when neither is present.
    """
    if not isinstance(payload, dict):
        return None
    items = payload.get("data")
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None

    first = items[0]
    if first.get("url"):
        return ImageUrl(first["url"])
    if first.get("b64_json"):
        return InlineImage(first["b64_json"])
    return None


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class ProviderClient:
    """Async HTTP client base with lazy ``httpx.AsyncClient`` creation."""

    provider = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy-initialise the shared ``httpx.AsyncClient``."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Shut down the underlying HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _auth_headers(self) -> dict[str, str]:
        return {}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        expect_json: bool = True,
    ) -> ProviderResponse:
        """Send one request and wrap the outcome.

        Non-2xx responses are returned, not raised, with the body read as
        text for diagnostics.
        """
        client = await self._get_client()
        url = f"{self._base_url}/{path.lstrip('/')}"
        request_headers = {**self._auth_headers(), **(headers or {})}

        try:
            response = await client.request(
                method,
                url,
                json=json_body,
                data=data,
                files=files,
                headers=request_headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning("provider_request_timeout", provider=self.provider, path=path)
            raise ProviderTimeout(f"{self.provider} request timed out") from exc
        except httpx.TransportError as exc:
            logger.warning(
                "provider_request_error",
                provider=self.provider,
                path=path,
                error=str(exc),
            )
            raise ProviderNetworkError(f"{self.provider} network error: {exc}") from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "provider_response_unreadable",
                provider=self.provider,
                path=path,
                error=str(exc),
            )
            raise ProviderFailure(f"{self.provider} returned an unreadable response: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "provider_http_error",
                provider=self.provider,
                path=path,
                status=response.status_code,
            )
            return ProviderResponse(status_code=response.status_code, text=response.text)

        if not expect_json:
            return ProviderResponse(status_code=response.status_code, content=response.content)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return ProviderResponse(
            status_code=response.status_code,
            payload=payload,
            text=response.text,
        )
