"""
Notification dispatcher - routes notifications to subscriber channels.
"""

import logging
from typing import List, Optional, Sequence

import httpx

from catalog_notifier.core.config import NotifierSettings, get_settings
from catalog_notifier.core.models import LifecycleStage, Notification
from catalog_notifier.core.notifier_config import SubscriptionConfig
from catalog_notifier.notifications.filter import subscriber_matches
from catalog_notifier.notifications.formatters import render_message
from catalog_notifier.notifications.models import DeliveryRecord
from catalog_notifier.notifications.providers import get_provider

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Dispatches notifications to every matching subscriber channel.

    Deliveries happen one at a time. The first failed delivery raises
    DeliveryError and nothing after it is attempted; deliveries made before
    it stay delivered.

    Usage:
        dispatcher = NotificationDispatcher(config)
        records = await dispatcher.dispatch(notifications, preview=True)
    """

    def __init__(
        self,
        config: SubscriptionConfig,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[NotifierSettings] = None,
    ):
        """
        Initialize notification dispatcher.

        Args:
            config: Subscription configuration
            client: Optional HTTP client (default: one is created per dispatch)
            settings: Runtime settings (default: global settings)
        """
        self.config = config
        self.client = client
        self.settings = settings or get_settings()

    async def dispatch(
        self,
        notifications: Sequence[Notification],
        preview: bool = False,
        stage: LifecycleStage = LifecycleStage.ACTIVE,
        action_url: Optional[str] = None,
    ) -> List[DeliveryRecord]:
        """
        Render and deliver (or preview) notifications.

        Args:
            notifications: Notifications to route
            preview: Build payloads without any network I/O
            stage: Lifecycle stage used for message wording
            action_url: Optional link included by formatters that support it

        Returns:
            One DeliveryRecord per channel message, in delivery order

        Raises:
            DeliveryError: On the first failed delivery (live mode only)
        """
        records: List[DeliveryRecord] = []
        client = self.client
        owns_client = False

        try:
            for notification in notifications:
                for name, subscriber in self.config.owners.items():
                    if not subscriber_matches(name, subscriber, notification, self.config.match_policy):
                        continue

                    for channel in subscriber.channels:
                        provider = get_provider(channel.type)
                        if provider is None:
                            logger.warning(
                                f"Unsupported channel type '{channel.type}' for {name}, skipping"
                            )
                            continue

                        message = render_message(self.config, notification, stage, action_url)
                        if message is None:
                            continue

                        payload = provider.build_payload(message)
                        headers = provider.build_headers(channel, self.settings.user_agent)
                        record = DeliveryRecord(
                            subscriber=name,
                            notification_kind=notification.kind,
                            channel_type=channel.type,
                            endpoint=channel.webhook,
                            headers=headers,
                            payload=payload,
                        )

                        if preview:
                            logger.info(f"[DRY RUN] Would send {notification.kind} to {channel.webhook}")
                        else:
                            if client is None:
                                client = httpx.AsyncClient(timeout=self.settings.http_timeout)
                                owns_client = True
                            await provider.send(client, channel, payload, headers)
                            record.delivered = True

                        records.append(record)
        finally:
            if owns_client:
                await client.aclose()

        delivered = sum(1 for r in records if r.delivered)
        logger.info(
            f"Dispatch complete: {len(records)} message(s), {delivered} delivered"
            + (" (preview)" if preview else "")
        )
        return records


async def dispatch(
    config: SubscriptionConfig,
    notifications: Sequence[Notification],
    preview: bool = False,
    stage: LifecycleStage = LifecycleStage.ACTIVE,
    action_url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[DeliveryRecord]:
    """
    Convenience function to dispatch with a one-off dispatcher.
    """
    dispatcher = NotificationDispatcher(config, client=client)
    return await dispatcher.dispatch(notifications, preview=preview, stage=stage, action_url=action_url)
