"""
Read-only access to an EventCatalog directory.

An EventCatalog keeps every resource in an ``index.mdx`` (or ``index.md``)
file whose YAML front matter holds the resource fields:

    services/InventoryService/index.mdx
    events/GetInventoryList/index.mdx
    events/GetInventoryList/schema.json
    domains/Orders/services/OrderService/index.mdx
    teams/payments.mdx
    users/dboyne.mdx

Older versions live under ``versioned/<version>/`` folders and are ignored;
the detectors compare git revisions instead.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

import yaml

from catalog_notifier.core.errors import CatalogLookupError
from catalog_notifier.core.models import Owner

from .models import CatalogResource, MessageResource, ServiceDescriptor

logger = logging.getLogger(__name__)

INDEX_FILES = ("index.mdx", "index.md")
MESSAGE_COLLECTIONS = ("events", "commands", "queries")
SERVICE_COLLECTION = "services"
OWNER_COLLECTIONS = ("teams", "users")
LATEST_VERSIONS = {"latest", "x", "*"}


class CatalogReader(Protocol):
    """Catalog queries the detectors rely on."""

    def is_service(self, file_path: str) -> bool:
        ...

    def get_service_by_path(self, file_path: str) -> ServiceDescriptor:
        ...

    def to_service(self, text: str) -> Optional[ServiceDescriptor]:
        ...

    def get_event(self, event_id: str) -> MessageResource:
        ...

    def get_owners_for_resource(self, resource_id: str) -> List[Owner]:
        ...

    def get_message_by_schema_path(self, schema_path: str) -> MessageResource:
        ...

    def get_consumers_of_schema(self, schema_path: str) -> List[ServiceDescriptor]:
        ...


def parse_front_matter(text: str) -> Optional[Dict[str, Any]]:
    """
    Extract the YAML front matter of an mdx/md document.

    Returns:
        Front matter mapping, or None if there is none or it is invalid
    """
    if not text or not text.strip():
        return None

    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != "---":
        return None

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            break
    else:
        return None

    try:
        data = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        logger.debug(f"Invalid front matter: {e}")
        return None

    return data if isinstance(data, dict) else None


def _collection_of(path: Path, root: Path) -> Optional[str]:
    """Name of the collection folder a resource file belongs to."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        return None
    if "versioned" in parts:
        return None
    # .../<collection>/<ResourceId>/index.mdx
    if len(parts) >= 3 and parts[-1] in INDEX_FILES:
        return parts[-3]
    return None


def _version_matches(wanted: Optional[str], actual: Optional[str]) -> bool:
    if not wanted or wanted in LATEST_VERSIONS or actual is None:
        return True
    if any(ch in wanted for ch in "^~><*x"):
        # semver ranges are treated as matching the current version
        return True
    return wanted == actual


class FileSystemCatalog:
    """
    CatalogReader backed by an EventCatalog directory on disk.

    The directory is scanned once, lazily, on first lookup.
    """

    def __init__(self, catalog_path: Union[str, Path]):
        self.root = Path(catalog_path).resolve()
        self._services: Optional[List[ServiceDescriptor]] = None
        self._messages: Optional[List[MessageResource]] = None
        self._owners: Dict[str, Owner] = {}

    # -- indexing ---------------------------------------------------------

    def _read_resource(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None
        data = parse_front_matter(text)
        if not data or "id" not in data:
            logger.debug(f"No resource front matter in {path}")
            return None
        return data

    def _scan(self) -> None:
        services: List[ServiceDescriptor] = []
        messages: List[MessageResource] = []

        for path in sorted(self.root.rglob("index.md*")):
            if path.name not in INDEX_FILES or "node_modules" in path.parts:
                continue
            collection = _collection_of(path, self.root)
            if collection != SERVICE_COLLECTION and collection not in MESSAGE_COLLECTIONS:
                continue

            data = self._read_resource(path)
            if data is None:
                continue

            try:
                if collection == SERVICE_COLLECTION:
                    services.append(
                        ServiceDescriptor(**{**data, "path": path, "collection": collection})
                    )
                else:
                    messages.append(
                        MessageResource(**{**data, "path": path, "collection": collection})
                    )
            except ValueError as e:
                logger.warning(f"Skipping invalid resource {path}: {e}")

        self._services = services
        self._messages = messages
        logger.debug(
            f"Indexed catalog {self.root}: {len(services)} services, {len(messages)} messages"
        )

    @property
    def services(self) -> List[ServiceDescriptor]:
        if self._services is None:
            self._scan()
        return self._services

    @property
    def messages(self) -> List[MessageResource]:
        if self._messages is None:
            self._scan()
        return self._messages

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.root / path
        return path.resolve()

    def _find_resource(self, resource_id: str) -> Optional[CatalogResource]:
        for resource in [*self.messages, *self.services]:
            if resource.id == resource_id:
                return resource
        return None

    # -- CatalogReader ----------------------------------------------------

    def is_service(self, file_path: str) -> bool:
        """True if the path is a service index file inside the catalog."""
        path = self._resolve(file_path)
        return path.name in INDEX_FILES and _collection_of(path, self.root) == SERVICE_COLLECTION

    def get_service_by_path(self, file_path: str) -> ServiceDescriptor:
        path = self._resolve(file_path)
        for service in self.services:
            if service.path == path:
                return service
        raise CatalogLookupError(
            "Service not found",
            f"No service is defined at {path}",
        )

    def to_service(self, text: str) -> Optional[ServiceDescriptor]:
        """Parse raw index.mdx text into a service, or None if it isn't one."""
        data = parse_front_matter(text)
        if not data or "id" not in data:
            return None
        try:
            return ServiceDescriptor(**data)
        except ValueError as e:
            logger.debug(f"Could not parse service: {e}")
            return None

    def get_event(self, event_id: str) -> MessageResource:
        for message in self.messages:
            if message.id == event_id:
                return message
        raise CatalogLookupError(
            "Message not found",
            f"No event, command or query with id '{event_id}' in {self.root}",
        )

    def _lookup_owner(self, owner: Owner) -> Owner:
        if owner.id in self._owners:
            return self._owners[owner.id]

        resolved = owner
        for collection in OWNER_COLLECTIONS:
            for suffix in (".mdx", ".md"):
                path = self.root / collection / f"{owner.id}{suffix}"
                if path.is_file():
                    data = self._read_resource(path)
                    if data:
                        resolved = Owner.coerce(data)
                    break
            if resolved is not owner:
                break

        self._owners[owner.id] = resolved
        return resolved

    def get_owners_for_resource(self, resource_id: str) -> List[Owner]:
        """Owners of a resource, enriched from teams/ and users/ when available."""
        resource = self._find_resource(resource_id)
        if resource is None:
            logger.debug(f"No resource '{resource_id}' found, assuming no owners")
            return []
        return [self._lookup_owner(owner) for owner in resource.owners]

    def get_message_by_schema_path(self, schema_path: str) -> MessageResource:
        """
        Message owning a schema file.

        A message declaring ``schemaPath`` owns the file that path resolves
        to from its own folder (``schema.json``, ``./schema.json`` and
        ``../shared/schema.json`` all work). A message without one owns any
        schema sitting next to its index file.
        """
        path = self._resolve(schema_path)
        for message in self.messages:
            if message.path is None:
                continue
            folder = message.path.parent
            if message.schema_path:
                if (folder / message.schema_path).resolve() == path:
                    return message
            elif folder == path.parent:
                return message
        raise CatalogLookupError(
            "Message not found for schema",
            f"No message owns the schema {path}",
        )

    def get_consumers_of_schema(self, schema_path: str) -> List[ServiceDescriptor]:
        message = self.get_message_by_schema_path(schema_path)
        consumers = []
        for service in self.services:
            for pointer in service.receives:
                if pointer.id == message.id and _version_matches(pointer.version, message.version):
                    consumers.append(service)
                    break
        return consumers
