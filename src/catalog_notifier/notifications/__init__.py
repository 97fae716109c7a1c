"""
Notifications module.

Filters detected notifications against the subscription config, renders them
and sends them to webhook channels (Slack).
"""

from catalog_notifier.notifications.models import DeliveryRecord, MessageSection, RenderedMessage
from catalog_notifier.notifications.filter import filter_notifications, subscriber_matches
from catalog_notifier.notifications.formatters import RENDERERS, render_message
from catalog_notifier.notifications.providers import (
    ChannelProvider,
    SlackWebhookProvider,
    get_provider,
)
from catalog_notifier.notifications.dispatcher import NotificationDispatcher, dispatch

__all__ = [
    "DeliveryRecord",
    "MessageSection",
    "RenderedMessage",
    "filter_notifications",
    "subscriber_matches",
    "RENDERERS",
    "render_message",
    "ChannelProvider",
    "SlackWebhookProvider",
    "get_provider",
    "NotificationDispatcher",
    "dispatch",
]
