"""Configuration management for the Griot Gazette service."""

from __future__ import annotations

from common.config import Settings as BaseSettings


class Settings(BaseSettings):
    """Griot Gazette configuration.

    Inherits the provider credentials and logging options from
    ``common.config.Settings`` and adds per-capability provider options.
    """

    # Service identity
    service_name: str = "griot-gazette"
    service_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8030

    # Chat
    chat_provider: str = "openai"
    chat_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-2.0-flash"
    chat_max_tokens: int = 150
    chat_temperature: float = 0.8
    chat_history_limit: int = 10
    chat_max_words: int = 30

    # Image transformation (xAI)
    xai_base_url: str = "https://api.x.ai/v1"
    image_edit_models: list[str] = ["grok-2-image-edit", "grok-2-image"]
    vision_models: list[str] = [
        "grok-2-vision",
        "grok-2-vision-1212",
        "grok-2-vision-latest",
    ]
    image_generation_model: str = "grok-2-image"
    max_image_base64_chars: int = 4 * 1024 * 1024
    caption_max_chars: int = 600
    image_error_status_passthrough: bool = False

    # Voice (ElevenLabs)
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    default_voice_id: str = "SAxJUlDKRc79XAyeWyMu"
    tts_model_id: str = "eleven_monolingual_v1"
    tts_stability: float = 0.5
    tts_similarity_boost: float = 0.75

    # Timeouts (seconds)
    image_timeout: float = 120
    vision_timeout: float = 60
    voice_timeout: float = 60


def get_settings() -> Settings:
    """Return a settings instance read from the current environment."""
    return Settings()
