"""Centralized configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Base settings shared across all services."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # LLM Providers
    openai_api_key: str = ""
    google_api_key: str = ""

    # Image Generation
    xai_api_key: str = ""

    # Speech
    elevenlabs_api_key: str = ""

    # Application
    log_level: str = "INFO"
    environment: str = "development"
