"""
Consumer-added and consumer-removed detection.

For every changed service file, the service is parsed at both ends of the
commit range and the ids in its ``receives`` list are compared:

    added   = after - before
    removed = before - after

One notification is produced per (service, event) pair.
"""

import logging
from typing import List, Optional

from catalog_notifier.catalog.models import ServiceDescriptor
from catalog_notifier.catalog.reader import CatalogReader
from catalog_notifier.core.errors import CatalogLookupError
from catalog_notifier.core.models import Notification, NotificationKind, ResourceType
from catalog_notifier.vcs.git import VersionControl

from .base import build_metadata, to_resource_ref
from .differ import diff_resource_across_commits

logger = logging.getLogger(__name__)


def _unique(ids: List[str]) -> List[str]:
    seen = set()
    result = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def find_added_receives(before: ServiceDescriptor, after: ServiceDescriptor) -> List[str]:
    """Event ids received after but not before, in declaration order."""
    before_ids = set(before.receive_ids())
    return [i for i in _unique(after.receive_ids()) if i not in before_ids]


def find_removed_receives(before: ServiceDescriptor, after: ServiceDescriptor) -> List[str]:
    """Event ids received before but not after, in declaration order."""
    after_ids = set(after.receive_ids())
    return [i for i in _unique(before.receive_ids()) if i not in after_ids]


class _ConsumerChangeDetector:
    """Shared implementation; subclasses pick the kind and the set difference."""

    kind: str = ""

    def __init__(
        self,
        catalog: CatalogReader,
        vcs: VersionControl,
        environment: Optional[str] = None,
    ):
        self.catalog = catalog
        self.vcs = vcs
        self.environment = environment

    def changed_event_ids(
        self, before: ServiceDescriptor, after: ServiceDescriptor
    ) -> List[str]:
        raise NotImplementedError

    def detect(
        self,
        catalog_path: str,
        changed_files: List[str],
        commit_range: str,
    ) -> List[Notification]:
        notifications: List[Notification] = []

        for file_path in changed_files:
            if not self.catalog.is_service(file_path):
                continue

            try:
                service = self.catalog.get_service_by_path(file_path)
            except CatalogLookupError as e:
                logger.warning(f"Skipping {file_path}: {e.message}")
                continue
            logger.debug(f"Comparing receives of service {service.id} across {commit_range}")

            snapshots = diff_resource_across_commits(self.vcs, file_path, commit_range)
            service_before = self.catalog.to_service(snapshots.before)
            service_after = self.catalog.to_service(snapshots.after)

            # Service added or deleted in this range: nothing to compare
            if service_before is None or service_after is None:
                logger.debug(f"No before/after pair for {file_path}, skipping")
                continue

            event_ids = self.changed_event_ids(service_before, service_after)
            if not event_ids:
                continue

            consumer_owners = self.catalog.get_owners_for_resource(service_after.id)
            consumer = to_resource_ref(service_after, ResourceType.SERVICE, consumer_owners)

            for event_id in event_ids:
                try:
                    event = self.catalog.get_event(event_id)
                except CatalogLookupError as e:
                    logger.warning(
                        f"Skipping {event_id} for service {service_after.id}: {e.message}"
                    )
                    continue

                event_owners = self.catalog.get_owners_for_resource(event.id)
                notifications.append(
                    Notification(
                        kind=self.kind,
                        resource=to_resource_ref(
                            event, ResourceType.for_collection(event.collection), event_owners
                        ),
                        consumer=consumer,
                        metadata=build_metadata(catalog_path, self.environment),
                    )
                )
                logger.info(f"Detected {self.kind}: {service_after.id} -> {event.id}")

        return notifications


class ConsumerAddedDetector(_ConsumerChangeDetector):
    """A service started receiving an event."""

    kind = NotificationKind.CONSUMER_ADDED.value

    def changed_event_ids(self, before, after):
        return find_added_receives(before, after)


class ConsumerRemovedDetector(_ConsumerChangeDetector):
    """A service stopped receiving an event."""

    kind = NotificationKind.CONSUMER_REMOVED.value

    def changed_event_ids(self, before, after):
        return find_removed_receives(before, after)
