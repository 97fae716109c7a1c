"""
Change detectors: turn changed catalog files into notifications.
"""

from .aggregator import aggregate, build_default_detectors
from .base import Detector
from .consumers import ConsumerAddedDetector, ConsumerRemovedDetector
from .differ import (
    ResourceSnapshots,
    diff_resource_across_commits,
    generate_schema_diff,
    parse_commit_range,
)
from .schema import SubscribedSchemaChangedDetector

__all__ = [
    "aggregate",
    "build_default_detectors",
    "Detector",
    "ConsumerAddedDetector",
    "ConsumerRemovedDetector",
    "SubscribedSchemaChangedDetector",
    "ResourceSnapshots",
    "diff_resource_across_commits",
    "generate_schema_diff",
    "parse_commit_range",
]
