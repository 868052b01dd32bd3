"""
Document storage module
"""

from typing import Union

from ...schemas.types import StoreBackend
from .base import BaseDocumentStore, Document, OrderBy
from .filters import FilterMatcher, filter_documents
from .memory import InMemoryDocumentStore
from .mongo import MongoDocumentStore


def create_store(
    backend: Union[StoreBackend, str] = StoreBackend.MEMORY,
    **kwargs,
) -> BaseDocumentStore:
    """
    Factory function to create a document store instance.
    
    Args:
        backend: Storage backend ("memory" or "mongodb")
        **kwargs: Backend-specific arguments
        
    Returns:
        BaseDocumentStore instance
    """
    try:
        backend = StoreBackend(backend)
    except ValueError:
        raise ValueError(f"Unknown backend: {backend}")
    
    if backend == StoreBackend.MEMORY:
        return InMemoryDocumentStore(**kwargs)
    return MongoDocumentStore(**kwargs)


__all__ = [
    "BaseDocumentStore",
    "Document",
    "OrderBy",
    "FilterMatcher",
    "filter_documents",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "create_store",
]
