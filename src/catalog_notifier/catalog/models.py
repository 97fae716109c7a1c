"""
Catalog resource models.
"""

from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from catalog_notifier.core.models import Owner, normalize_owners


class MessagePointer(BaseModel):
    """Reference from a service to a message it sends or receives."""

    model_config = ConfigDict(extra="allow")

    id: str
    version: Optional[str] = None


class CatalogResource(BaseModel):
    """Fields shared by every catalog resource (front matter of index.mdx)."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    version: Optional[str] = None
    owners: List[Owner] = Field(default_factory=list)

    # Where the resource was read from; None for resources parsed from text
    path: Optional[Path] = Field(default=None, exclude=True)
    collection: Optional[str] = Field(default=None, exclude=True)

    @field_validator("owners", mode="before")
    @classmethod
    def _normalize_owners(cls, v: Any) -> List[Owner]:
        return normalize_owners(v)

    @field_validator("id", "version", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        # YAML turns `version: 1.0` into a float
        return None if v is None else str(v)

    @model_validator(mode="after")
    def _default_name(self) -> "CatalogResource":
        if not self.name:
            self.name = self.id
        return self


class ServiceDescriptor(CatalogResource):
    """A service and the messages it sends / receives."""

    receives: List[MessagePointer] = Field(default_factory=list)
    sends: List[MessagePointer] = Field(default_factory=list)

    @field_validator("receives", "sends", mode="before")
    @classmethod
    def _pointers(cls, v: Any) -> List[Any]:
        if not v:
            return []
        return [{"id": str(item)} if not isinstance(item, dict) else item for item in v]

    def receive_ids(self) -> List[str]:
        return [r.id for r in self.receives]


class MessageResource(CatalogResource):
    """An event, command or query."""

    schema_path: Optional[str] = Field(default=None, alias="schemaPath")

    model_config = ConfigDict(extra="allow", populate_by_name=True)
