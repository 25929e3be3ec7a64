"""Slack notification sink for processing outcomes."""

from mollymemo.slack.client import get_slack_client, reset_client
from mollymemo.slack.notifier import notify_failed, notify_processed, send

__all__ = [
    "get_slack_client",
    "notify_failed",
    "notify_processed",
    "reset_client",
    "send",
]
