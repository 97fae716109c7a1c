"""
Running detectors and collecting their notifications.
"""

import logging
from typing import List, Optional, Sequence

from catalog_notifier.catalog.reader import CatalogReader
from catalog_notifier.core.models import Notification
from catalog_notifier.vcs.git import VersionControl

from .base import Detector
from .consumers import ConsumerAddedDetector, ConsumerRemovedDetector
from .schema import SubscribedSchemaChangedDetector

logger = logging.getLogger(__name__)


def build_default_detectors(
    catalog: CatalogReader,
    vcs: VersionControl,
    environment: Optional[str] = None,
) -> List[Detector]:
    """All built-in detectors, in reporting order."""
    return [
        ConsumerAddedDetector(catalog, vcs, environment),
        ConsumerRemovedDetector(catalog, vcs, environment),
        SubscribedSchemaChangedDetector(catalog, vcs, environment),
    ]


def aggregate(
    detectors: Sequence[Detector],
    catalog_path: str,
    changed_files: List[str],
    commit_range: str,
) -> List[Notification]:
    """
    Run detectors in order and concatenate their notifications.

    Errors a detector does not handle itself propagate and abort the run.
    """
    notifications: List[Notification] = []

    for detector in detectors:
        found = detector.detect(catalog_path, changed_files, commit_range)
        logger.debug(f"{detector.__class__.__name__} produced {len(found)} notification(s)")
        notifications.extend(found)

    return notifications
