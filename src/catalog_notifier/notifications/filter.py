"""
Interest filter - decides which notifications anybody wants.
"""

import logging
from typing import List, Sequence

from catalog_notifier.core.models import Notification
from catalog_notifier.core.notifier_config import MatchPolicy, Subscriber, SubscriptionConfig

logger = logging.getLogger(__name__)


def subscriber_matches(
    name: str,
    subscriber: Subscriber,
    notification: Notification,
    policy: MatchPolicy = MatchPolicy.INTEREST,
) -> bool:
    """
    Check whether a subscriber should receive a notification.

    Args:
        name: Subscriber name (the key under ``owners`` in the config)
        subscriber: Subscriber configuration
        notification: Notification to check
        policy: INTEREST needs the kind to be listed; OWNERSHIP also needs
            the subscriber name among the resource owners

    Returns:
        True if the subscriber matches
    """
    if notification.kind not in subscriber.events:
        return False
    if policy == MatchPolicy.OWNERSHIP:
        return name in notification.resource.owner_ids()
    return True


def filter_notifications(
    config: SubscriptionConfig,
    notifications: Sequence[Notification],
) -> List[Notification]:
    """
    Keep notifications that at least one subscriber is interested in.

    Notifications whose resource has no owners are dropped first. Input order
    is preserved and each notification appears at most once.
    """
    filtered: List[Notification] = []

    for notification in notifications:
        if not notification.resource.owners:
            logger.debug(f"Dropping {notification.summary()}: resource has no owners")
            continue

        if any(
            subscriber_matches(name, subscriber, notification, config.match_policy)
            for name, subscriber in config.owners.items()
        ):
            filtered.append(notification)
        else:
            logger.debug(f"Dropping {notification.summary()}: no interested subscriber")

    logger.info(f"{len(filtered)}/{len(notifications)} notification(s) matched subscribers")
    return filtered
