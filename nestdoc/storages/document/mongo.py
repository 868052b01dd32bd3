"""
MongoDB Document Store Backend

Implementation of BaseDocumentStore for MongoDB.

Installation:
    pip install pymongo

Usage:
    store = MongoDocumentStore(database="shop", collection="categories")
    store.connect()
    tree = TreeModel(store)
"""

import logging
from typing import Any, Dict, List, Optional

from tenacity import (
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ...schemas.config import MongoStoreConfig, TreeConfig
from ...schemas.types import SortDirection
from ..exceptions import StoreUnavailableError
from .base import BaseDocumentStore, Document, OrderBy

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Network hiccups worth retrying (AutoReconnect covers NetworkTimeout)."""
    from pymongo.errors import AutoReconnect
    return isinstance(exc, AutoReconnect)


class MongoDocumentStore(BaseDocumentStore):
    """
    MongoDB implementation of BaseDocumentStore.
    
    Filters are passed to the server unchanged. Transient network errors
    are retried with exponential backoff; every other driver error, and
    transient ones that outlive the retries, surface as
    StoreUnavailableError.
    
    apply_coordinates() issues one unordered bulk write. MongoDB does not
    make it atomic without a replica-set transaction, so a failure midway
    leaves some nodes with new coordinates and some with old ones until
    the next successful rebuild.
    
    Args:
        database: Database name
        collection: Collection name
        connection_string: Full MongoDB URI (built from server/port when empty)
        server: Host used when connection_string is empty
        port: Port used when connection_string is empty
        config: MongoStoreConfig instead of the individual arguments
        client_collection: Pre-built pymongo Collection (skips connect())
    """
    
    def __init__(
        self,
        database: str = "",
        collection: str = "",
        connection_string: str = "",
        server: str = "localhost",
        port: int = 27017,
        config: Optional[MongoStoreConfig] = None,
        client_collection: Any = None,
    ):
        if config is None:
            config = MongoStoreConfig(
                database=database or "nestdoc",
                collection=collection or "tree",
                connection_string=connection_string,
                server=server,
                port=port,
            )
        self.config = config
        self._client = None
        self._collection = client_collection
        self._connected = client_collection is not None
    
    @property
    def collection(self):
        """Underlying pymongo Collection"""
        if not self._connected:
            raise StoreUnavailableError("Not connected to MongoDB", "collection")
        return self._collection
    
    def connect(self) -> bool:
        """Connect to MongoDB and select the collection."""
        if self._connected:
            return True
        try:
            from pymongo import MongoClient
        except ImportError:
            raise ImportError(
                "pymongo is required for MongoDocumentStore. "
                "Install with: pip install pymongo"
            )
        
        uri = self.config.resolved_uri()
        self._client = MongoClient(uri, serverSelectionTimeoutMS=self.config.timeout_ms)
        self._collection = self._client[self.config.database][self.config.collection]
        self._connected = True
        logger.info(
            f"Connected to MongoDB collection {self.config.database}.{self.config.collection}"
        )
        return True
    
    def disconnect(self) -> bool:
        """Close the client."""
        if self._client is not None:
            self._client.close()
        self._client = None
        self._collection = None
        self._connected = False
        return True
    
    def is_connected(self) -> bool:
        """Check if connected to the database."""
        return self._connected
    
    def _execute(self, operation: str, func, *args, **kwargs):
        """Run a driver call with retries, translating driver errors."""
        from pymongo.errors import PyMongoError
        
        retrying = Retrying(
            stop=stop_after_attempt(self.config.max_attempts),
            wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        try:
            return retrying(func, *args, **kwargs)
        except PyMongoError as e:
            logger.error(f"MongoDB {operation} failed: {e}")
            raise StoreUnavailableError(f"MongoDB {operation} failed: {e}", operation) from e
    
    def insert(self, fields: Document) -> Any:
        collection = self.collection
        from bson import ObjectId
        from pymongo.errors import DuplicateKeyError
        
        document = dict(fields)
        if document.get(self.ID_FIELD) is None:
            document[self.ID_FIELD] = ObjectId()
        identity = document[self.ID_FIELD]
        attempts = 0
        
        def _insert():
            nonlocal attempts
            attempts += 1
            try:
                collection.insert_one(document)
            except DuplicateKeyError:
                # A retried insert whose first attempt committed
                if attempts > 1 and collection.find_one({self.ID_FIELD: identity}) is not None:
                    logger.debug(f"Insert of {identity!r} already committed before reconnect")
                    return
                raise
        
        self._execute("insert", _insert)
        return identity
    
    def find_one(self, filter: Optional[Document] = None) -> Optional[Document]:
        return self._execute("find_one", self.collection.find_one, filter or {})
    
    def find(
        self,
        filter: Optional[Document] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Document]:
        sort = self._sort_spec(order_by)
        
        def _run():
            cursor = self.collection.find(filter or {})
            if sort:
                cursor = cursor.sort(sort)
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)
        
        return self._execute("find", _run)
    
    def update(self, identity: Any, document: Document) -> bool:
        replacement = {k: v for k, v in document.items() if k != self.ID_FIELD}
        result = self._execute(
            "update", self.collection.replace_one, {self.ID_FIELD: identity}, replacement
        )
        return result.matched_count > 0
    
    def remove(self, filter: Document, single: bool = True) -> int:
        if single:
            result = self._execute("remove", self.collection.delete_one, filter)
        else:
            result = self._execute("remove", self.collection.delete_many, filter)
        return result.deleted_count
    
    def clear(self) -> None:
        self._execute("clear", self.collection.delete_many, {})
    
    def count(self, filter: Optional[Document] = None) -> int:
        return self._execute("count", self.collection.count_documents, filter or {})
    
    def apply_coordinates(self, plan: Dict[Any, Document]) -> int:
        if not plan:
            return 0
        from pymongo import UpdateOne
        
        requests = [
            UpdateOne({self.ID_FIELD: identity}, {"$set": fields})
            for identity, fields in plan.items()
        ]
        result = self._execute(
            "apply_coordinates", self.collection.bulk_write, requests, ordered=False
        )
        return result.matched_count
    
    def create_tree_indexes(self, tree_config: TreeConfig) -> List[str]:
        """
        Create the indexes tree queries rely on
        
        - parent (+ order field) for child fetches during per-node rebuilds
        - left/right for ancestor and subtree range scans
        - primary field for parent resolution
        
        Returns:
            Names of the created indexes
        """
        from pymongo import ASCENDING
        
        parent_keys = [(tree_config.parent_field, ASCENDING)]
        if tree_config.order_field:
            parent_keys.append((tree_config.order_field, ASCENDING))
        
        specs = [
            parent_keys,
            [(tree_config.left_field, ASCENDING), (tree_config.right_field, ASCENDING)],
            [(tree_config.primary_field, ASCENDING)],
        ]
        return [
            self._execute("create_index", self.collection.create_index, keys)
            for keys in specs
        ]
    
    def _sort_spec(self, order_by: Optional[OrderBy]) -> list:
        """Translate order_by to pymongo's sort list with an _id tiebreak."""
        normalized = self.normalize_order(order_by)
        if not normalized:
            return []
        sort = [
            (field, 1 if direction == SortDirection.ASC else -1)
            for field, direction in normalized
        ]
        if all(field != self.ID_FIELD for field, _ in normalized):
            sort.append((self.ID_FIELD, 1))
        return sort
