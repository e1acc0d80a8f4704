"""Common shared utilities for the Griot Gazette services."""

from common.config import Settings
from common.logging import setup_logging
from common.models import ChatMessage, ErrorResponse, HealthResponse

__all__ = ["Settings", "setup_logging", "HealthResponse", "ErrorResponse", "ChatMessage"]
