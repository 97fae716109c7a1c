"""
Detector interface and helpers shared by the detectors.
"""

from datetime import datetime, timezone
from typing import List, Optional, Protocol

from catalog_notifier.catalog.models import CatalogResource
from catalog_notifier.core.models import (
    Notification,
    NotificationMetadata,
    Owner,
    ResourceRef,
    ResourceType,
)


class Detector(Protocol):
    """
    Turns the list of changed files into notifications of one kind.

    Implementations only read from the catalog and git, return an empty list
    when nothing changed, and skip (with a warning) files they cannot handle.
    """

    kind: str

    def detect(
        self,
        catalog_path: str,
        changed_files: List[str],
        commit_range: str,
    ) -> List[Notification]:
        ...


def build_metadata(catalog_path: str, environment: Optional[str] = None) -> NotificationMetadata:
    return NotificationMetadata(
        timestamp=datetime.now(timezone.utc),
        catalog_path=str(catalog_path),
        environment=environment,
    )


def to_resource_ref(
    resource: CatalogResource,
    resource_type: ResourceType,
    owners: List[Owner],
) -> ResourceRef:
    return ResourceRef(
        id=resource.id,
        name=resource.name,
        version=resource.version,
        type=resource_type,
        owners=owners,
    )
