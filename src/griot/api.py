"""FastAPI application for the Griot Gazette.

Exposes REST endpoints for:
- Persona chat about Black history
- Photo transformation through the xAI fallback chain
- Text-to-speech through ElevenLabs
- Static facts, timeline and quiz content
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common import ErrorResponse, HealthResponse

from griot.agents.chat_agent import ChatAgent, connection_error_message
from griot.agents.image_agent import ImageTransformAgent
from griot.agents.voice_agent import VoiceAgent
from griot.config import Settings
from griot.content import ContentStore
from griot.errors import FailureKind, FallbackExhausted, GriotError
from griot.models import ChatRequest, ChatResult, ImageTransformRequest, VoiceRequest

logger = structlog.get_logger(__name__)

TIMEOUT_MESSAGE = (
    "Request timed out. The image processing took too long. "
    "Please try with a smaller image."
)
NETWORK_MESSAGE = "Network error. Please check your connection and try again."


# ---------------------------------------------------------------------------
# Application state container
# ---------------------------------------------------------------------------


class AppState:
    """Capability agents shared by the route handlers.

    Agents hold configuration and lazily-created HTTP clients only; every
    request builds its own fallback plan.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.chat_agent = ChatAgent(settings)
        self.image_agent = ImageTransformAgent(settings)
        self.voice_agent = VoiceAgent(settings)
        self.content = ContentStore()

    async def close(self) -> None:
        await self.image_agent.close()
        await self.voice_agent.close()


# ---------------------------------------------------------------------------
# Failure mapping
# ---------------------------------------------------------------------------


def image_failure_response(exc: FallbackExhausted, passthrough: bool) -> JSONResponse:
    """Map an exhausted image chain onto the HTTP contract.

    Timeouts and transport failures are always surfaced as 504 / 503.
    Other provider failures are a handled outcome (200 with
    ``success: false``) unless upstream status passthrough is enabled.
    """
    if exc.kind == FailureKind.TIMEOUT:
        return JSONResponse(status_code=504, content={"error": TIMEOUT_MESSAGE})
    if exc.kind == FailureKind.NETWORK:
        return JSONResponse(status_code=503, content={"error": NETWORK_MESSAGE})

    message = f"Unable to transform image. {exc.message}"
    if passthrough:
        status = exc.upstream_status
        if status is None or status < 400:
            status = 502
        return JSONResponse(status_code=status, content={"error": message})
    return JSONResponse(status_code=200, content={"success": False, "error": message})


def voice_failure_response(exc: FallbackExhausted) -> JSONResponse:
    if exc.kind == FailureKind.TIMEOUT:
        return JSONResponse(
            status_code=504,
            content={"error": "Voice generation timed out. Please try again."},
        )
    if exc.kind == FailureKind.NETWORK:
        return JSONResponse(status_code=503, content={"error": NETWORK_MESSAGE})
    detail = exc.terminal.detail if exc.terminal else exc.message
    return JSONResponse(status_code=500, content={"error": detail})


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or Settings()
    state = AppState(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await state.close()

    app = FastAPI(
        title="Griot Gazette",
        description=(
            "Backend for an interactive Black history newspaper: persona chat, "
            "photo transformation, text-to-speech and daily content."
        ),
        version=settings.service_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.app_state = state
    app.state.settings = settings

    # -------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service=settings.service_name,
            version=settings.service_version,
        )

    # -------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------

    @app.post("/chat", response_model=ChatResult, tags=["chat"])
    async def chat(req: ChatRequest) -> ChatResult:
        """Answer a question in the selected persona.

        Always 200: configuration and provider problems come back as a
        displayable ``response`` message.
        """
        return ChatResult(response=await state.chat_agent.respond(req))

    # -------------------------------------------------------------------
    # Image transformation
    # -------------------------------------------------------------------

    @app.post("/image/transform", tags=["image"])
    async def transform_image(req: ImageTransformRequest) -> Any:
        """Transform an uploaded photo, falling back across strategies."""
        try:
            result = await state.image_agent.transform(req)
        except FallbackExhausted as exc:
            logger.warning("image_transform_failed", kind=exc.kind.value, attempts=len(exc.failures))
            return image_failure_response(exc, settings.image_error_status_passthrough)

        body: dict[str, Any] = {"success": True, "transformedImage": result.transformed_image}
        if result.note:
            body["note"] = result.note
        return body

    # -------------------------------------------------------------------
    # Voice
    # -------------------------------------------------------------------

    @app.post("/voice", tags=["voice"])
    async def voice(req: VoiceRequest) -> Any:
        """Read text aloud; returns an ``audio/mpeg`` data URL."""
        try:
            result = await state.voice_agent.speak(req)
        except FallbackExhausted as exc:
            logger.warning("voice_failed", kind=exc.kind.value)
            return voice_failure_response(exc)

        return {
            "status": "success",
            "output": [result.audio_data_url],
            "audio_url": result.audio_data_url,
        }

    # -------------------------------------------------------------------
    # Static content
    # -------------------------------------------------------------------

    @app.get("/content", tags=["content"])
    async def content(
        content_type: str | None = Query(default=None, alias="type"),
        date: str | None = Query(default=None, description="Day key, e.g. 2-8"),
    ) -> dict[str, Any]:
        """Facts, the timeline for a day, or today's quiz."""
        if content_type == "facts":
            return {"facts": state.content.facts()}
        if content_type == "timeline":
            return {"events": state.content.timeline(date)}
        if content_type == "quiz":
            return {"questions": state.content.daily_quiz()}
        return state.content.overview()

    # -------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------

    @app.exception_handler(GriotError)
    async def griot_error_handler(request: Request, exc: GriotError) -> JSONResponse:
        logger.warning(
            "request_failed",
            error=exc.__class__.__name__,
            status=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = sorted({".".join(str(p) for p in err["loc"][1:]) or "body" for err in exc.errors()})
        logger.info("request_invalid", path=request.url.path, fields=fields)
        if request.url.path == "/chat":
            # the page renders whatever comes back in ``response``
            return JSONResponse(
                status_code=200,
                content=ChatResult(
                    response=connection_error_message("Invalid request body")
                ).model_dump(),
            )
        return JSONResponse(
            status_code=400,
            content={"error": f"Invalid request. Check the field(s): {', '.join(fields)}"},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "unhandled_exception", error=str(exc), path=request.url.path, exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="Unknown error occurred",
                status_code=500,
            ).model_dump(),
        )

    return app
