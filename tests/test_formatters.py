"""
Tests for message formatters and the Slack payload.
"""

import pytest

from catalog_notifier.core.models import LifecycleStage, ResourceRef
from catalog_notifier.notifications.formatters import (
    NO_OWNERS,
    build_consumer_added_message,
    build_consumer_removed_message,
    build_schema_changed_message,
    format_resource_link,
    render_message,
)
from catalog_notifier.notifications.providers import SlackWebhookProvider, get_provider

CONFIG = """
eventcatalog_url: https://catalog.example.com/
owners: {}
"""


@pytest.fixture
def config(make_config):
    return make_config(CONFIG)


class TestConsumerAddedMessage:

    def test_active_message(self, config, make_notification):
        message = build_consumer_added_message(config, make_notification())

        assert message.summary_text == "🆕 EventCatalog - ✉️ New Event Consumer Added"
        assert message.pretext == "A new service has started consuming an event in your architecture"
        assert message.color == "good"
        assert [s.title for s in message.sections] == [
            "📡 Event Being Consumed",
            "⚙️ New Consumer Service",
            "👥 Event Owners (Need to Know)",
            "👥 Consumer Team",
            "📅 When",
            "💼 Impact",
        ]
        assert message.section("📡 Event Being Consumed").value == (
            "<https://catalog.example.com/docs/events/PaymentComplete/0.0.2|*Payment Complete*> (v0.0.2)"
        )
        assert message.section("👥 Consumer Team").value == (
            "<https://catalog.example.com/docs/teams/dboyne|dboyne>"
        )
        assert message.section("📅 When").value == "July 23, 2025 at 09:49 AM UTC"
        assert message.section("💼 Impact").is_full_width

    def test_draft_wording_differs(self, config, make_notification):
        notification = make_notification()
        active = build_consumer_added_message(config, notification, LifecycleStage.ACTIVE)
        draft = build_consumer_added_message(config, notification, LifecycleStage.DRAFT)

        assert draft.summary_text == "🔄 EventCatalog - ✉️ Request to Add Event Consumer"
        assert draft.pretext != active.pretext
        assert draft.section("💼 Impact").value != active.section("💼 Impact").value

    def test_missing_owners_placeholder(self, config, make_notification):
        message = build_consumer_added_message(config, make_notification(consumer_owners=[]))
        assert message.section("👥 Consumer Team").value == NO_OWNERS

    def test_multiple_owners_are_joined(self, config, make_notification):
        notification = make_notification(resource_owners=["a-team", "b-team"])
        message = build_consumer_added_message(config, notification)

        assert message.section("👥 Event Owners (Need to Know)").value == (
            "<https://catalog.example.com/docs/teams/a-team|a-team>, "
            "<https://catalog.example.com/docs/teams/b-team|b-team>"
        )


class TestResourceLinks:

    @pytest.mark.parametrize("resource_type, segment", [
        ("event", "events"),
        ("command", "commands"),
        ("query", "queries"),
        ("service", "services"),
    ])
    def test_link_follows_resource_type(self, config, resource_type, segment):
        resource = ResourceRef(id="PlaceOrder", name="Place Order", version="1.0.0", type=resource_type)

        assert format_resource_link(config, resource) == (
            f"<https://catalog.example.com/docs/{segment}/PlaceOrder/1.0.0|*Place Order*> (v1.0.0)"
        )

    def test_link_without_version(self, config):
        resource = ResourceRef(id="PlaceOrder", name="Place Order", type="command")

        assert format_resource_link(config, resource, bold=False) == (
            "<https://catalog.example.com/docs/commands/PlaceOrder|Place Order>"
        )


class TestConsumerRemovedMessage:

    def test_active_and_draft(self, config, make_notification):
        notification = make_notification(kind="consumer-removed")
        active = build_consumer_removed_message(config, notification)
        draft = build_consumer_removed_message(config, notification, LifecycleStage.DRAFT)

        assert active.summary_text == "🗑️ EventCatalog - ✉️ Event Consumer Removed"
        assert draft.summary_text == "🔄 EventCatalog - 🗑️ Request to Remove Event Consumer"
        assert active.color == "warning"
        assert len(active.sections) == 6
        assert active.sections[0].title == "📡 Event No Longer Consumed"


class TestSchemaChangedMessage:

    def test_active_message(self, config, make_notification):
        notification = make_notification(kind="subscribed-schema-changed")
        message = build_schema_changed_message(config, notification)

        assert message.summary_text == "⚠️ Schema Change Detected: Payment Complete"
        assert message.section("📄 Schema Diff").value == notification.diff
        assert "has been updated" in message.section("📋 Summary of Change").value
        assert message.section("🔗 View Schema Changes") is None

    def test_draft_with_action_url(self, config, make_notification):
        notification = make_notification(kind="subscribed-schema-changed")
        message = build_schema_changed_message(
            config, notification, LifecycleStage.DRAFT, "https://github.com/org/repo/pull/42"
        )

        assert message.summary_text == "🔄 Proposed Schema Change: Payment Complete"
        assert "is proposed to be updated" in message.section("📋 Summary of Change").value
        assert message.section("🔗 View Schema Changes").value == (
            "<https://github.com/org/repo/pull/42|View Schema Changes>"
        )

    def test_empty_diff_placeholder(self, config, make_notification):
        notification = make_notification(kind="subscribed-schema-changed", diff="")
        message = build_schema_changed_message(config, notification)
        assert message.section("📄 Schema Diff").value == "No changes detected"


class TestRenderMessage:

    def test_dispatches_on_kind(self, config, make_notification):
        message = render_message(config, make_notification(kind="consumer-removed"))
        assert message.summary_text == "🗑️ EventCatalog - ✉️ Event Consumer Removed"

    def test_accepts_stage_value(self, config, make_notification):
        message = render_message(config, make_notification(), "draft")
        assert message.summary_text == "🔄 EventCatalog - ✉️ Request to Add Event Consumer"

    def test_unknown_kind(self, config, make_notification, caplog):
        assert render_message(config, make_notification(kind="order-created")) is None
        assert "No message found for notification order-created" in caplog.text

    def test_rendering_is_idempotent(self, config, make_notification):
        notification = make_notification(kind="subscribed-schema-changed")
        first = render_message(config, notification, LifecycleStage.DRAFT, "https://x")
        second = render_message(config, notification, LifecycleStage.DRAFT, "https://x")
        assert first == second


class TestSlackPayload:

    def test_payload_shape(self, config, make_notification):
        notification = make_notification()
        payload = SlackWebhookProvider().build_payload(render_message(config, notification))

        assert payload["text"] == "🆕 EventCatalog - ✉️ New Event Consumer Added"
        attachment = payload["attachments"][0]
        assert attachment["color"] == "good"
        assert attachment["footer"] == "EventCatalog Notifier • eventcatalog.dev"
        assert attachment["ts"] == 1753264141
        assert attachment["fields"][0]["short"] is True
        assert attachment["fields"][-1] == {
            "title": "💼 Impact",
            "value": "The *Payment Service* service is now dependent on the *Payment Complete* event.",
            "short": False,
        }

    def test_headers_merge_channel_headers(self, make_config):
        config = make_config(
            "owners:\n"
            "  team:\n"
            "    channels:\n"
            "      - webhook: https://hooks.example.com\n"
            "        headers:\n"
            "          Authorization: Bearer token\n"
        )
        channel = config.owners["team"].channels[0]
        headers = SlackWebhookProvider().build_headers(channel, "agent/1.0")

        assert headers == {
            "Content-Type": "application/json",
            "User-Agent": "agent/1.0",
            "Authorization": "Bearer token",
        }

    def test_provider_lookup(self):
        assert isinstance(get_provider("Slack"), SlackWebhookProvider)
        assert get_provider("teams") is None
