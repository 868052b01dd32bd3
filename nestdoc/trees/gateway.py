"""
Tree mutation gateway

Every write that can change the tree's shape goes through here so the
coordinates are rebuilt before the call returns.
"""

import logging
from typing import Any, Dict, Optional, Union

from ..exceptions import NodeNotFoundError, ValidationError
from ..indexers.nested_set import NestedSetIndexer
from ..schemas.config import TreeConfig
from ..storages.document.base import BaseDocumentStore, Document

logger = logging.getLogger(__name__)


class TreeMutationGateway:
    """
    Write side of a nested-set tree
    
    - create(): placeholder coordinates, parent defaults to the root sentinel
    - update(): merge into the stored document, coordinates are read-only
    - remove(): delete one or all matches; children are left in place as orphans
    
    Each call holds the indexer's lock across the raw write and the rebuild
    that follows it, so writers sharing one indexer never interleave.
    
    Usage:
        >>> gateway = TreeMutationGateway(store, NestedSetIndexer(store))
        >>> gateway.create({"item": "books", "parent": ""})
        '4f2c...'
    """
    
    def __init__(
        self,
        store: BaseDocumentStore,
        indexer: NestedSetIndexer,
        config: Optional[TreeConfig] = None,
        always_rebuild: bool = True,
    ):
        """
        Initialize the gateway
        
        Args:
            store: Document store holding the tree
            indexer: Indexer rebuilt after every write
            config: Field layout, defaults to the indexer's
            always_rebuild: Rebuild after every update, not only after
                            updates that touch the parent or order field
        """
        self.store = store
        self.indexer = indexer
        self.config = config or indexer.config
        self.always_rebuild = always_rebuild
    
    def create(self, fields: Document) -> Any:
        """
        Insert a node and rebuild
        
        Args:
            fields: Node fields; coordinate fields are overwritten
        
        Returns:
            Identity of the new node
        
        Raises:
            StoreUnavailableError: If the insert or the rebuild fails
        """
        cfg = self.config
        data = dict(fields)
        data.update({cfg.left_field: 0, cfg.right_field: 0, cfg.level_field: 0})
        data[cfg.parent_field] = cfg.normalize_parent(data.get(cfg.parent_field))
        
        with self.indexer.lock:
            identity = self.store.insert(data)
            logger.debug(f"Created node {data.get(cfg.primary_field)!r} ({identity})")
            self.indexer.rebuild()
        return identity
    
    def update(self, node: Union[Document, Any], fields: Document) -> bool:
        """
        Merge fields into a stored node and rebuild
        
        Args:
            node: Stored document (dict with _id) or its identity
            fields: Fields to set; coordinate fields are rejected
        
        Returns:
            True if the document was written
        
        Raises:
            NodeNotFoundError: If the node does not exist
            ValidationError: On coordinate fields or a move under the
                node itself or one of its descendants
        """
        cfg = self.config
        data = dict(fields)
        
        forbidden = set(data) & set(cfg.coordinate_fields)
        if forbidden:
            raise ValidationError(
                f"Coordinate fields are maintained by the indexer: {sorted(forbidden)}"
            )
        
        if cfg.parent_field in data:
            data[cfg.parent_field] = cfg.normalize_parent(data[cfg.parent_field])
        
        with self.indexer.lock:
            current = self._load(node)
            identity = current[self.store.ID_FIELD]
            if data.get(self.store.ID_FIELD, identity) != identity:
                raise ValidationError("The identity of a node cannot be changed")
            
            if cfg.parent_field in data:
                self._check_move(current, data[cfg.parent_field])
            if cfg.primary_field in data and data[cfg.primary_field] != current.get(cfg.primary_field):
                logger.warning(
                    f"Primary key of {current.get(cfg.primary_field)!r} changed; "
                    "its children now reference a missing parent and become orphans"
                )
            
            merged = {**current, **data}
            written = self.store.update(identity, merged)
            
            if written and (self.always_rebuild or set(data) & cfg.topology_fields()):
                self.indexer.rebuild()
        return written
    
    def remove(self, filter: Document, single: bool = True) -> bool:
        """
        Delete nodes and rebuild
        
        Children of a removed node are neither deleted nor reparented: they
        keep their parent reference and become orphans.
        
        Args:
            filter: MongoDB-style filter
            single: Delete only the first match
        
        Returns:
            True if at least one document was removed
        """
        with self.indexer.lock:
            removed = self.store.remove(filter, single)
            logger.debug(f"Removed {removed} node(s) matching {filter!r}")
            self.indexer.rebuild()
        return removed > 0
    
    def _load(self, node: Union[Document, Any]) -> Document:
        identity = node.get(self.store.ID_FIELD) if isinstance(node, dict) else node
        current = self.store.get(identity) if identity is not None else None
        if current is None:
            raise NodeNotFoundError(identity)
        return current
    
    def _check_move(self, current: Document, new_parent: Any) -> None:
        """Reject moving a node under itself or one of its descendants."""
        cfg = self.config
        if new_parent == cfg.root_value:
            return
        if new_parent == current.get(cfg.primary_field):
            raise ValidationError(f"Node {new_parent!r} cannot be its own parent")
        
        target = self.store.find_one({cfg.primary_field: new_parent})
        if target is None:
            logger.warning(f"Parent {new_parent!r} does not exist; the node becomes an orphan")
            return
        
        if current.get(cfg.level_field) and target.get(cfg.level_field):
            inside = (
                current[cfg.left_field] <= target[cfg.left_field]
                and target[cfg.right_field] <= current[cfg.right_field]
            )
            if inside:
                raise ValidationError(
                    f"Cannot move {current.get(cfg.primary_field)!r} under its descendant {new_parent!r}"
                )
