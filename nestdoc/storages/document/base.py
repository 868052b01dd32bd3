"""
Base document store class
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ...schemas.types import SortDirection


Document = Dict[str, Any]
OrderBy = Sequence[Tuple[str, Union[SortDirection, str]]]


class BaseDocumentStore(ABC):
    """
    Base class for document storage
    
    A DocumentStore is a flat collection of dict documents. Each document
    carries a store-assigned identity under ``ID_FIELD``. The tree layer
    never talks to a driver directly: every component receives a store
    instance and goes through this interface.
    
    Design Principles:
        1. Filters use MongoDB-style syntax on every backend
        2. Store-native (insertion) order is the final tiebreak of every scan
        3. Driver errors surface as StoreUnavailableError
    
    Subclasses must implement:
        - insert() / find_one() / find()
        - update() / remove()
        - clear()
    """
    
    ID_FIELD = "_id"
    
    def connect(self) -> bool:
        """Open the underlying connection. No-op by default."""
        return True
    
    def disconnect(self) -> bool:
        """Close the underlying connection. No-op by default."""
        return True
    
    @abstractmethod
    def insert(self, fields: Document) -> Any:
        """
        Insert a new document
        
        Args:
            fields: Document fields (ID_FIELD is assigned by the store)
            
        Returns:
            Identity of the inserted document
        """
        pass
    
    @abstractmethod
    def find_one(self, filter: Optional[Document] = None) -> Optional[Document]:
        """
        Get the first document matching a filter
        
        Args:
            filter: MongoDB-style filter
            
        Returns:
            Document copy if found, None otherwise
        """
        pass
    
    @abstractmethod
    def find(
        self,
        filter: Optional[Document] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Document]:
        """
        Get documents matching a filter
        
        Args:
            filter: MongoDB-style filter (None matches everything)
            order_by: Sequence of (field, direction) pairs
            limit: Maximum number of documents to return
            skip: Number of documents to skip
            
        Returns:
            Document copies; insertion order breaks ties
        """
        pass
    
    @abstractmethod
    def update(self, identity: Any, document: Document) -> bool:
        """
        Replace a document by identity
        
        Args:
            identity: Store identity of the document
            document: Full replacement document
            
        Returns:
            True if a document was replaced
        """
        pass
    
    @abstractmethod
    def remove(self, filter: Document, single: bool = True) -> int:
        """
        Delete documents matching a filter
        
        Args:
            filter: MongoDB-style filter
            single: Delete only the first match
            
        Returns:
            Number of documents removed
        """
        pass
    
    @abstractmethod
    def clear(self) -> None:
        """
        Remove every document from the store
        """
        pass
    
    def get(self, identity: Any) -> Optional[Document]:
        """
        Get a document by identity
        
        Args:
            identity: Store identity
            
        Returns:
            Document copy or None
        """
        return self.find_one({self.ID_FIELD: identity})
    
    def count(self, filter: Optional[Document] = None) -> int:
        """
        Count documents matching a filter
        
        Default implementation scans with find(). Subclasses can override
        with a native count.
        """
        return len(self.find(filter))
    
    def apply_coordinates(self, plan: Dict[Any, Document]) -> int:
        """
        Write a batch of partial field updates keyed by identity
        
        Used by the indexer to persist a whole rebuild at once. The default
        implementation merges and replaces documents one by one, so a
        failure midway leaves the earlier writes in place. Backends that
        can do better (atomic swap, bulk writes) override it.
        
        Args:
            plan: identity -> fields to set; identities no longer stored
                  are skipped
            
        Returns:
            Number of documents written
        """
        written = 0
        for identity, fields in plan.items():
            document = self.get(identity)
            if document is None:
                continue
            document.update(fields)
            if self.update(identity, document):
                written += 1
        return written
    
    @staticmethod
    def normalize_order(order_by: Optional[OrderBy]) -> List[Tuple[str, SortDirection]]:
        """
        Normalize an order_by spec to (field, SortDirection) pairs
        
        Accepts SortDirection members or their string values.
        """
        if not order_by:
            return []
        return [(field, SortDirection(direction)) for field, direction in order_by]
    
    # =========================================================================
    # Context Manager Support
    # =========================================================================
    
    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        return False
