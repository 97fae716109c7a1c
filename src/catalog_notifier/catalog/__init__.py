"""
Catalog access: services, messages, schemas and owners.
"""

from .models import MessagePointer, MessageResource, ServiceDescriptor
from .reader import CatalogReader, FileSystemCatalog, parse_front_matter

__all__ = [
    "MessagePointer",
    "MessageResource",
    "ServiceDescriptor",
    "CatalogReader",
    "FileSystemCatalog",
    "parse_front_matter",
]
