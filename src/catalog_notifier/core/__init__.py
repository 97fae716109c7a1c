"""
Core models, configuration and errors shared by every notifier component.
"""

from .errors import (
    CatalogLookupError,
    ConfigError,
    DeliveryError,
    GitError,
    NotifierError,
)
from .models import (
    LifecycleStage,
    Notification,
    NotificationKind,
    NotificationMetadata,
    Owner,
    ResourceRef,
    ResourceType,
    SchemaChangeNotification,
)
from .notifier_config import (
    Channel,
    MatchPolicy,
    Subscriber,
    SubscriptionConfig,
    load_config,
    parse_config,
    validate_catalog_directory,
)

__all__ = [
    "CatalogLookupError",
    "ConfigError",
    "DeliveryError",
    "GitError",
    "NotifierError",
    "LifecycleStage",
    "Notification",
    "NotificationKind",
    "NotificationMetadata",
    "Owner",
    "ResourceRef",
    "ResourceType",
    "SchemaChangeNotification",
    "Channel",
    "MatchPolicy",
    "Subscriber",
    "SubscriptionConfig",
    "load_config",
    "parse_config",
    "validate_catalog_directory",
]
