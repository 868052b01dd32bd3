"""
In-memory document store

Keeps documents in an insertion-ordered dict. Useful for tests, small
embedded trees and as the reference behavior for other backends.
"""

import copy
import threading
import uuid
from typing import Any, Dict, List, Optional

from ...exceptions import ValidationError
from .base import BaseDocumentStore, Document, OrderBy
from .filters import FilterMatcher, field_value, sort_key
from ...schemas.types import SortDirection


class InMemoryDocumentStore(BaseDocumentStore):
    """
    Document store backed by a Python dict
    
    Identities are uuid4 hex strings unless the inserted document already
    carries an ``_id``. Every read returns deep copies, so callers can
    mutate results freely.
    
    apply_coordinates() is atomic: the new documents are built aside and
    swapped in under the store lock, so a rebuild is either fully visible
    or not at all.
    
    Usage:
        >>> store = InMemoryDocumentStore()
        >>> node_id = store.insert({"item": "a", "parent": "0"})
        >>> store.find({"parent": "0"})
        [{'item': 'a', 'parent': '0', '_id': '...'}]
    """
    
    def __init__(self, documents: Optional[List[Document]] = None):
        """
        Initialize the store
        
        Args:
            documents: Optional documents to preload (in order)
        """
        self._documents: Dict[Any, Document] = {}
        self._lock = threading.Lock()
        self._matcher = FilterMatcher()
        for document in documents or []:
            self.insert(document)
    
    def insert(self, fields: Document) -> Any:
        document = copy.deepcopy(fields)
        identity = document.get(self.ID_FIELD)
        if identity is None:
            identity = uuid.uuid4().hex
        document[self.ID_FIELD] = identity
        
        with self._lock:
            if identity in self._documents:
                raise ValidationError(f"Duplicate identity: {identity!r}")
            self._documents[identity] = document
        return identity
    
    def find_one(self, filter: Optional[Document] = None) -> Optional[Document]:
        # Fast path for identity lookups
        if filter and set(filter) == {self.ID_FIELD} and not isinstance(filter[self.ID_FIELD], dict):
            with self._lock:
                document = self._documents.get(filter[self.ID_FIELD])
                return copy.deepcopy(document) if document is not None else None
        
        results = self.find(filter, limit=1)
        return results[0] if results else None
    
    def find(
        self,
        filter: Optional[Document] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Document]:
        with self._lock:
            results = [
                doc for doc in self._documents.values()
                if self._matcher.matches(doc, filter)
            ]
        
        # Stable sorts applied from the least significant key keep
        # insertion order as the final tiebreak
        for field, direction in reversed(self.normalize_order(order_by)):
            results.sort(
                key=lambda doc: sort_key(field_value(doc, field)),
                reverse=direction == SortDirection.DESC,
            )
        
        if skip:
            results = results[skip:]
        if limit:
            results = results[:limit]
        return copy.deepcopy(results)
    
    def update(self, identity: Any, document: Document) -> bool:
        replacement = copy.deepcopy(document)
        replacement[self.ID_FIELD] = identity
        with self._lock:
            if identity not in self._documents:
                return False
            self._documents[identity] = replacement
        return True
    
    def remove(self, filter: Document, single: bool = True) -> int:
        with self._lock:
            doomed = []
            for identity, doc in self._documents.items():
                if self._matcher.matches(doc, filter):
                    doomed.append(identity)
                    if single:
                        break
            for identity in doomed:
                del self._documents[identity]
        return len(doomed)
    
    def clear(self) -> None:
        with self._lock:
            self._documents.clear()
    
    def count(self, filter: Optional[Document] = None) -> int:
        with self._lock:
            if not filter:
                return len(self._documents)
            return sum(1 for doc in self._documents.values() if self._matcher.matches(doc, filter))
    
    def apply_coordinates(self, plan: Dict[Any, Document]) -> int:
        with self._lock:
            staged = {}
            for identity, fields in plan.items():
                current = self._documents.get(identity)
                if current is None:
                    # Removed since the plan was computed
                    continue
                staged[identity] = {**current, **copy.deepcopy(fields)}
            # Swap the whole generation in one step
            self._documents.update(staged)
        return len(staged)
    
    def __len__(self) -> int:
        return self.count()
