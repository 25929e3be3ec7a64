"""Gemini client singleton with async support.

Creates a cached genai.Client instance configured with the API key from
application settings. Uses a 30-second HTTP timeout so that a classification
plus several verification calls fit inside the per-item budget. Does NOT
configure HttpRetryOptions -- tenacity handles retries at the application
level to avoid double-retry behavior.
"""

from google import genai
from google.genai import types

from mollymemo.config import get_settings
from mollymemo.errors import ConfigurationError

_client: genai.Client | None = None


def get_gemini_client() -> genai.Client:
    """Return a cached Gemini client instance.

    Raises:
        ConfigurationError: gemini_api_key is not configured.
    """
    global _client
    if _client is None:
        settings = get_settings()
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")
        _client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=30_000),
        )
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None
