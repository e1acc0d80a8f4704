"""Entry point for the Griot Gazette service.

Creates the FastAPI application, configures logging, and starts the
uvicorn server.
"""

from __future__ import annotations

import structlog
import uvicorn
from fastapi import FastAPI

from common import setup_logging

from griot.api import create_app
from griot.config import Settings, get_settings
from griot.providers.chat import chat_credential

logger = structlog.get_logger(__name__)


def build_app(settings: Settings | None = None) -> FastAPI:
    """Construct the fully-configured application."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.environment)

    app = create_app(settings)

    chat_key, _ = chat_credential(settings)
    logger.info(
        "application_ready",
        service=settings.service_name,
        version=settings.service_version,
        chat_provider=settings.chat_provider,
        chat_configured=bool(chat_key),
        image_configured=bool(settings.xai_api_key),
        voice_configured=bool(settings.elevenlabs_api_key),
    )

    return app


def main() -> None:
    """Launch the Griot Gazette server."""
    settings = get_settings()
    app = build_app(settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
