"""Shared test fixtures for the Griot Gazette."""

import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from griot.config import Settings
from griot.main import build_app


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        async def recording_handler(request: httpx.Request) -> httpx.Response:
            await request.aread()
            self.requests.append(request)
            result = handler(request)
            if hasattr(result, "__await__"):
                result = await result
            return result

        super().__init__(recording_handler)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content)


def multipart_model(request: httpx.Request) -> str | None:
    """Pull the ``model`` form field out of a multipart upload."""
    marker = b'name="model"\r\n\r\n'
    content = request.content
    start = content.find(marker)
    if start < 0:
        return None
    start += len(marker)
    end = content.find(b"\r\n", start)
    return content[start:end].decode()


class FakeChatClient:
    """Stands in for the SDK-backed chat adapters."""

    provider = "fake"

    def __init__(self, reply="Well... you see, that's history.", error=None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def complete(self, system_prompt, history, message):
        self.calls.append(
            {"system_prompt": system_prompt, "history": list(history), "message": message}
        )
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def settings():
    """Create test settings with every credential present."""
    return Settings(
        environment="testing",
        openai_api_key="test-key",
        google_api_key="",
        xai_api_key="test-xai-key",
        elevenlabs_api_key="test-eleven-key",
        chat_provider="openai",
    )


@pytest.fixture
def app(settings):
    """Create FastAPI app for testing."""
    return build_app(settings)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
