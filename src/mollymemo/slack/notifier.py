"""Processing outcome notifications.

All functions are fire-and-forget: they catch and log errors but never raise,
so a notification failure cannot change an item's persisted outcome.
"""

import logging

from slack_sdk.errors import SlackApiError

from mollymemo.config import get_settings
from mollymemo.models.item import Item
from mollymemo.slack.client import get_slack_client

logger = logging.getLogger(__name__)


async def send(recipient: str | None, text: str) -> bool:
    """Post ``text`` to a Slack channel or user. Returns True when delivered.

    Skipped without error when there is no recipient or no bot token.
    """
    if not recipient:
        return False
    if not get_settings().slack_bot_token:
        logger.debug("SLACK_BOT_TOKEN not configured, skipping notification")
        return False

    try:
        client = await get_slack_client()
        await client.chat_postMessage(channel=recipient, text=text)
    except SlackApiError as exc:
        error_code = exc.response.get("error", "") if exc.response else ""
        logger.warning("Failed to notify %s: %s", recipient, error_code, exc_info=True)
        return False
    return True


def format_processed(item: Item) -> str:
    title = item.title or item.source_url
    lines = [f"Saved: <{item.source_url}|{title}>"]
    if item.summary:
        lines.append(item.summary)
    if item.extracted_entities and item.extracted_entities.repos:
        lines.append("Repos: " + ", ".join(item.extracted_entities.repos))
    return "\n".join(lines)


def format_failed(item: Item) -> str:
    detail = item.error_message or "unknown error"
    return f"Failed to process <{item.source_url}>: {detail}"


async def notify_processed(item: Item) -> bool:
    """Tell the capturing user their item was processed."""
    return await send(item.notify_to, format_processed(item))


async def notify_failed(item: Item) -> bool:
    """Tell the capturing user their item failed, with the recorded reason."""
    return await send(item.notify_to, format_failed(item))
