"""Notification sink client.

One AsyncWebClient per process, built on first use from ``slack_bot_token``.
Like the store and Gemini clients, an unset credential is a configuration
error rather than a client with an empty token.
"""

from slack_sdk.web.async_client import AsyncWebClient

from mollymemo.config import get_settings
from mollymemo.errors import ConfigurationError

# Seconds per Slack API call
SLACK_TIMEOUT = 10

_client: AsyncWebClient | None = None


async def get_slack_client() -> AsyncWebClient:
    """Return the cached notification client.

    Raises:
        ConfigurationError: slack_bot_token is not configured.
    """
    global _client
    if _client is None:
        token = get_settings().slack_bot_token
        if not token:
            raise ConfigurationError("SLACK_BOT_TOKEN not configured")
        _client = AsyncWebClient(token=token, timeout=SLACK_TIMEOUT)
    return _client


def reset_client() -> None:
    """Drop the cached client so the next call rebuilds it from settings."""
    global _client
    _client = None
