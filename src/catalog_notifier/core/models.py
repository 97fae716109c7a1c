"""
Notification data models.

A notification describes one change in the catalog: which resource (usually an
event) it concerns, which service is consuming or producing it, and when it
was detected. Owners come out of the catalog either as bare ids or as team /
user records; they are normalised to ``Owner`` as soon as a model is built so
nothing downstream has to care which shape it was.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


NOTIFICATION_SCHEMA_VERSION = "1.0.0"


class NotificationKind(str, Enum):
    """Kinds of change the detectors can report."""

    CONSUMER_ADDED = "consumer-added"
    CONSUMER_REMOVED = "consumer-removed"
    SUBSCRIBED_SCHEMA_CHANGED = "subscribed-schema-changed"


class LifecycleStage(str, Enum):
    """Whether a change is proposed (pull request) or live (merged)."""

    DRAFT = "draft"
    ACTIVE = "active"


class ResourceType(str, Enum):
    """Catalog resource types a notification can refer to."""

    EVENT = "event"
    COMMAND = "command"
    QUERY = "query"
    SERVICE = "service"

    @property
    def collection(self) -> str:
        """Catalog folder (and docs URL segment) holding this type."""
        return "queries" if self is ResourceType.QUERY else f"{self.value}s"

    @classmethod
    def for_collection(cls, collection: Optional[str]) -> "ResourceType":
        for member in cls:
            if member.collection == collection:
                return member
        return cls.EVENT


class Owner(BaseModel):
    """
    Owner of a catalog resource (a team or a user).

    Catalog team/user records carry more fields (email, role, slack urls...),
    those are kept as extras.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None

    @classmethod
    def coerce(cls, value: Any) -> "Owner":
        """Build an Owner from a bare id, a mapping or an Owner."""
        if isinstance(value, Owner):
            return value
        if isinstance(value, dict):
            if "id" not in value:
                raise ValueError(f"Owner record has no id: {value}")
            return cls(**{**value, "id": str(value["id"])})
        return cls(id=str(value))


def normalize_owners(values: Any) -> List[Owner]:
    """Normalise a list of owner ids/records, keeping order and duplicates."""
    if not values:
        return []
    return [Owner.coerce(v) for v in values]


class ResourceRef(BaseModel):
    """A catalog entity referenced by a notification."""

    id: str
    name: str
    version: Optional[str] = None
    type: ResourceType
    owners: List[Owner] = Field(default_factory=list)

    @field_validator("owners", mode="before")
    @classmethod
    def _normalize_owners(cls, v: Any) -> List[Owner]:
        return normalize_owners(v)

    def owner_ids(self) -> List[str]:
        return [owner.id for owner in self.owners]


class NotificationMetadata(BaseModel):
    """Where and when a notification was produced."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    catalog_path: str
    environment: Optional[str] = None


class Notification(BaseModel):
    """
    A single detected catalog change.

    Attributes:
        kind: What changed; selects the message formatter
        schema_version: Version of this record format
        resource: The catalog entity the change concerns (usually an event)
        consumer: The service consuming / producing the resource
        metadata: Detection timestamp, catalog path and environment
    """

    kind: str
    schema_version: str = NOTIFICATION_SCHEMA_VERSION
    resource: ResourceRef
    consumer: ResourceRef
    metadata: NotificationMetadata

    @field_validator("kind", mode="before")
    @classmethod
    def _kind_value(cls, v: Any) -> str:
        # Keep the raw string so unknown kinds survive until dispatch
        return v.value if isinstance(v, NotificationKind) else str(v)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return self.model_dump(mode="json")

    def summary(self) -> str:
        return f"{self.kind}: {self.consumer.id} -> {self.resource.id}"


class SchemaChangeNotification(Notification):
    """Notification for a changed message schema, with the diff attached."""

    before: str
    after: str
    diff: str
