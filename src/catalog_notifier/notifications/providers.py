"""
Channel providers for delivering rendered messages to webhooks.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from catalog_notifier.core.errors import DeliveryError
from catalog_notifier.core.notifier_config import Channel
from catalog_notifier.notifications.models import RenderedMessage

logger = logging.getLogger(__name__)


class ChannelProvider(ABC):
    """Base class for channel providers."""

    channel_type: str = ""

    @abstractmethod
    def build_payload(self, message: RenderedMessage) -> Dict[str, Any]:
        """
        Serialise a rendered message into the channel's wire format.

        The same payload is used for live delivery and dry-run previews.
        """
        pass

    def build_headers(self, channel: Channel, user_agent: Optional[str] = None) -> Dict[str, str]:
        """Headers sent with the request; channel headers win over defaults."""
        headers = {"Content-Type": "application/json"}
        if user_agent:
            headers["User-Agent"] = user_agent
        headers.update(channel.headers)
        return headers

    async def send(
        self,
        client: httpx.AsyncClient,
        channel: Channel,
        payload: Dict[str, Any],
        headers: Dict[str, str],
    ) -> None:
        """
        POST a payload to the channel webhook.

        Raises:
            DeliveryError: On a non-2xx response or a transport error
        """
        try:
            response = await client.post(channel.webhook, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                channel.webhook,
                f"Webhook returned HTTP {e.response.status_code}: {e.response.text}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(channel.webhook, f"Request failed: {e}") from e

        logger.info(f"Sent {self.channel_type} notification to {channel.webhook}")


class SlackWebhookProvider(ChannelProvider):
    """
    Slack incoming-webhook provider.

    Produces the legacy attachment format, which Slack and most
    Slack-compatible webhooks (Mattermost, Rocket.Chat) accept.
    """

    channel_type = "slack"

    def build_payload(self, message: RenderedMessage) -> Dict[str, Any]:
        attachment: Dict[str, Any] = {
            "color": message.color,
            "pretext": message.pretext,
            "fields": [
                {
                    "title": section.title,
                    "value": section.value,
                    "short": not section.is_full_width,
                }
                for section in message.sections
            ],
            "footer": message.footer,
        }
        if message.timestamp is not None:
            attachment["ts"] = message.timestamp

        return {
            "text": message.summary_text,
            "attachments": [attachment],
        }


PROVIDERS: Dict[str, ChannelProvider] = {
    SlackWebhookProvider.channel_type: SlackWebhookProvider(),
}


def get_provider(channel_type: str) -> Optional[ChannelProvider]:
    """Provider for a channel type, or None if the type is not supported."""
    return PROVIDERS.get(channel_type.lower())
