"""
Subscribed-schema-changed detection.
"""

import logging
from typing import List, Optional

from catalog_notifier.catalog.reader import CatalogReader
from catalog_notifier.core.errors import CatalogLookupError
from catalog_notifier.core.models import (
    NotificationKind,
    ResourceType,
    SchemaChangeNotification,
)
from catalog_notifier.vcs.git import VersionControl

from .base import build_metadata, to_resource_ref
from .differ import diff_resource_across_commits, generate_schema_diff

logger = logging.getLogger(__name__)

SCHEMA_EXTENSIONS = (".json", ".avro", ".proto")


def is_schema(file_path: str) -> bool:
    return file_path.endswith(SCHEMA_EXTENSIONS)


class SubscribedSchemaChangedDetector:
    """
    Notifies every consumer of a message whose schema file changed.

    Each changed schema file is diffed against its own previous revision.
    Schemas without a previous revision (new files) produce nothing.
    """

    kind = NotificationKind.SUBSCRIBED_SCHEMA_CHANGED.value

    def __init__(
        self,
        catalog: CatalogReader,
        vcs: VersionControl,
        environment: Optional[str] = None,
    ):
        self.catalog = catalog
        self.vcs = vcs
        self.environment = environment

    def detect(
        self,
        catalog_path: str,
        changed_files: List[str],
        commit_range: str,
    ) -> List[SchemaChangeNotification]:
        notifications: List[SchemaChangeNotification] = []

        for file_path in changed_files:
            if not is_schema(file_path):
                continue

            try:
                message = self.catalog.get_message_by_schema_path(file_path)
                consumers = self.catalog.get_consumers_of_schema(file_path)
            except CatalogLookupError:
                logger.warning(f"Failed to find message for schema, skipping: {file_path}")
                continue

            snapshots = diff_resource_across_commits(self.vcs, file_path, commit_range)
            if not snapshots.has_both:
                logger.debug(f"No previous version of {file_path}, skipping")
                continue
            if snapshots.before == snapshots.after:
                continue

            if not consumers:
                logger.info(f"Schema of {message.id} changed but it has no consumers")
                continue

            diff = generate_schema_diff(snapshots.before, snapshots.after)
            message_ref = to_resource_ref(
                message,
                ResourceType.for_collection(message.collection),
                self.catalog.get_owners_for_resource(message.id),
            )

            for consumer in consumers:
                notifications.append(
                    SchemaChangeNotification(
                        kind=self.kind,
                        resource=message_ref,
                        consumer=to_resource_ref(
                            consumer,
                            ResourceType.SERVICE,
                            self.catalog.get_owners_for_resource(consumer.id),
                        ),
                        before=snapshots.before_trimmed,
                        after=snapshots.after_trimmed,
                        diff=diff,
                        metadata=build_metadata(catalog_path, self.environment),
                    )
                )
                logger.info(f"Detected {self.kind}: {message.id} consumed by {consumer.id}")

        return notifications
