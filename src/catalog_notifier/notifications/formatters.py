"""
Notification formatters - convert notifications to human-readable messages.

One formatter per notification kind. Formatters are pure: the same
notification, stage and action URL always give the same message, since the
only time they use is the notification's own timestamp.

Links use the ``<url|label>`` markup understood by Slack-compatible webhooks.
"""

import logging
from datetime import timezone
from typing import Callable, Dict, List, Optional

from catalog_notifier.core.models import (
    LifecycleStage,
    Notification,
    NotificationKind,
    Owner,
    ResourceRef,
)
from catalog_notifier.core.notifier_config import SubscriptionConfig
from catalog_notifier.notifications.models import MessageSection, RenderedMessage

logger = logging.getLogger(__name__)

FOOTER = "EventCatalog Notifier • eventcatalog.dev"
NO_OWNERS = "No owners assigned"

Formatter = Callable[
    [SubscriptionConfig, Notification, LifecycleStage, Optional[str]],
    RenderedMessage,
]


def format_owner_links(config: SubscriptionConfig, owners: List[Owner]) -> str:
    """Comma-joined team links, or a placeholder when there are no owners."""
    if not owners:
        return NO_OWNERS
    return ", ".join(
        f"<{config.catalog_url}/docs/teams/{owner.id}|{owner.id}>" for owner in owners
    )


def format_resource_link(
    config: SubscriptionConfig,
    resource: ResourceRef,
    bold: bool = True,
) -> str:
    """Deep link to a resource page, with its version when known."""
    collection = resource.type.collection
    label = f"*{resource.name}*" if bold else resource.name
    if resource.version:
        url = f"{config.catalog_url}/docs/{collection}/{resource.id}/{resource.version}"
        return f"<{url}|{label}> (v{resource.version})"
    return f"<{config.catalog_url}/docs/{collection}/{resource.id}|{label}>"


def format_timestamp(notification: Notification) -> str:
    ts = notification.metadata.timestamp
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.strftime("%B %d, %Y at %I:%M %p UTC")


def _unix_seconds(notification: Notification) -> int:
    ts = notification.metadata.timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp())


def build_consumer_added_message(
    config: SubscriptionConfig,
    notification: Notification,
    stage: LifecycleStage = LifecycleStage.ACTIVE,
    action_url: Optional[str] = None,
) -> RenderedMessage:
    """A service started (or asks to start) consuming an event."""
    is_draft = stage == LifecycleStage.DRAFT
    event = notification.resource
    service = notification.consumer

    if is_draft:
        summary = "🔄 EventCatalog - ✉️ Request to Add Event Consumer"
        pretext = "A request has been made to consume an event in your architecture"
        impact = (
            f"The *{service.name}* service is requesting to depend on "
            f"the *{event.name}* event."
        )
    else:
        summary = "🆕 EventCatalog - ✉️ New Event Consumer Added"
        pretext = "A new service has started consuming an event in your architecture"
        impact = f"The *{service.name}* service is now dependent on the *{event.name}* event."

    return RenderedMessage(
        summary_text=summary,
        pretext=pretext,
        color="good",
        sections=[
            MessageSection(title="📡 Event Being Consumed", value=format_resource_link(config, event)),
            MessageSection(title="⚙️ New Consumer Service", value=format_resource_link(config, service)),
            MessageSection(title="👥 Event Owners (Need to Know)", value=format_owner_links(config, event.owners)),
            MessageSection(title="👥 Consumer Team", value=format_owner_links(config, service.owners)),
            MessageSection(title="📅 When", value=format_timestamp(notification)),
            MessageSection(title="💼 Impact", value=impact, is_full_width=True),
        ],
        footer=FOOTER,
        timestamp=_unix_seconds(notification),
    )


def build_consumer_removed_message(
    config: SubscriptionConfig,
    notification: Notification,
    stage: LifecycleStage = LifecycleStage.ACTIVE,
    action_url: Optional[str] = None,
) -> RenderedMessage:
    """A service stopped (or asks to stop) consuming an event."""
    is_draft = stage == LifecycleStage.DRAFT
    event = notification.resource
    service = notification.consumer

    if is_draft:
        summary = "🔄 EventCatalog - 🗑️ Request to Remove Event Consumer"
        pretext = "A request has been made to remove an event consumer in your architecture"
        impact = (
            f"The *{service.name}* service is requesting to stop consuming the "
            f"*{event.name}* event. This may affect downstream processing."
        )
    else:
        summary = "🗑️ EventCatalog - ✉️ Event Consumer Removed"
        pretext = "A service has stopped consuming an event in your architecture"
        impact = (
            f"The *{service.name}* service is no longer dependent on the "
            f"*{event.name}* event. This may affect downstream processing."
        )

    return RenderedMessage(
        summary_text=summary,
        pretext=pretext,
        color="warning",
        sections=[
            MessageSection(title="📡 Event No Longer Consumed", value=format_resource_link(config, event)),
            MessageSection(title="⚙️ Service That Removed Consumption", value=format_resource_link(config, service)),
            MessageSection(title="👥 Event Owners (Need to Know)", value=format_owner_links(config, event.owners)),
            MessageSection(title="👥 Service Team", value=format_owner_links(config, service.owners)),
            MessageSection(title="📅 When", value=format_timestamp(notification)),
            MessageSection(title="💼 Impact", value=impact, is_full_width=True),
        ],
        footer=FOOTER,
        timestamp=_unix_seconds(notification),
    )


def build_schema_changed_message(
    config: SubscriptionConfig,
    notification: Notification,
    stage: LifecycleStage = LifecycleStage.ACTIVE,
    action_url: Optional[str] = None,
) -> RenderedMessage:
    """
    Schema of a consumed message changed (or is proposed to change).

    Includes the pre-rendered diff and, when action_url is given, a link to
    the change (e.g. the pull request).
    """
    is_draft = stage == LifecycleStage.DRAFT
    event = notification.resource
    service = notification.consumer
    diff = getattr(notification, "diff", "") or "No changes detected"

    if is_draft:
        summary = f"🔄 Proposed Schema Change: {event.name}"
        pretext = (
            f"A proposed change to the schema of {event.name} may impact "
            f"{service.name}, which consumes it. Please review the proposed "
            f"update and validate compatibility before it goes live."
        )
        change = "is proposed to be updated"
    else:
        summary = f"⚠️ Schema Change Detected: {event.name}"
        pretext = (
            f"The schema of {event.name} has been modified. This change is now "
            f"live and may impact {service.name}, which consumes it. Please "
            f"review the update and validate compatibility."
        )
        change = "has been updated"

    sections = [
        MessageSection(title="📧 Event Affected", value=format_resource_link(config, event, bold=False)),
        MessageSection(title="🏭 Consumer Service", value=format_resource_link(config, service, bold=False)),
        MessageSection(title="👥 Impacted Consumers", value=format_owner_links(config, service.owners)),
        MessageSection(title="👤 Event Owners", value=format_owner_links(config, event.owners)),
        MessageSection(title="📅 Changed At", value=format_timestamp(notification)),
        MessageSection(
            title="📋 Summary of Change",
            value=(
                f"The schema for {event.name} {change}. Consumers that rely on "
                f"strict typing or validation may need updates."
            ),
            is_full_width=True,
        ),
        MessageSection(title="📄 Schema Diff", value=diff, is_full_width=True),
    ]

    if action_url:
        sections.append(
            MessageSection(
                title="🔗 View Schema Changes",
                value=f"<{action_url}|View Schema Changes>",
            )
        )

    return RenderedMessage(
        summary_text=summary,
        pretext=pretext,
        color="warning",
        sections=sections,
        footer=FOOTER,
        timestamp=_unix_seconds(notification),
    )


RENDERERS: Dict[str, Formatter] = {
    NotificationKind.CONSUMER_ADDED.value: build_consumer_added_message,
    NotificationKind.CONSUMER_REMOVED.value: build_consumer_removed_message,
    NotificationKind.SUBSCRIBED_SCHEMA_CHANGED.value: build_schema_changed_message,
}


def render_message(
    config: SubscriptionConfig,
    notification: Notification,
    stage: LifecycleStage = LifecycleStage.ACTIVE,
    action_url: Optional[str] = None,
) -> Optional[RenderedMessage]:
    """
    Render a notification with the formatter registered for its kind.

    Returns:
        RenderedMessage, or None if no formatter handles this kind
    """
    formatter = RENDERERS.get(notification.kind)
    if formatter is None:
        logger.warning(f"No message found for notification {notification.kind}")
        return None
    return formatter(config, notification, LifecycleStage(stage), action_url)
