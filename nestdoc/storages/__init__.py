"""
Storages module
Document storage backends for nested-set trees
"""

from .exceptions import StoreUnavailableError
from .document import (
    BaseDocumentStore,
    InMemoryDocumentStore,
    MongoDocumentStore,
    create_store,
)

__all__ = [
    "StoreUnavailableError",
    "BaseDocumentStore",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "create_store",
]
