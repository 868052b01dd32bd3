"""
Tree model - one nested-set tree over one document store

TreeModel wires the indexer, the mutation gateway and the query engine
around a single store and a single writer lock, and exposes the caller
facing operations in one place.
"""

import threading
from concurrent.futures import Executor
from typing import Any, List, Optional, Union

from ..indexers.nested_set import NestedSetIndexer
from ..schemas.config import TreeConfig
from ..schemas.tree import NodeTree, RebuildResult, SelectOption
from ..schemas.types import RebuildStrategy, SortDirection
from ..storages.document.base import BaseDocumentStore, Document
from .gateway import TreeMutationGateway
from .query import NodeRef, TreeQueryEngine
from .render import render_tree_html


class TreeModel:
    """
    Nested-set tree stored as flat documents
    
    Writes (create/update/remove) rebuild all coordinates before returning,
    so every read sees a consistent tree. Reads use the coordinates only.
    
    Concurrency:
        One RLock per model serializes writes and rebuilds. Two models (or
        two processes) over the same collection are not coordinated and
        need external serialization.
    
    Usage:
        >>> from nestdoc import TreeModel, TreeConfig, InMemoryDocumentStore
        >>> tree = TreeModel(InMemoryDocumentStore(), TreeConfig(label_field="name"))
        >>> tree.create({"item": "books", "name": "Books"})
        >>> tree.create({"item": "novels", "name": "Novels", "parent": "books"})
        >>> [o.label for o in tree.get_form_select_options()]
        ['Books', '- Novels']
    """
    
    def __init__(
        self,
        store: BaseDocumentStore,
        config: Optional[TreeConfig] = None,
        strict: bool = False,
        always_rebuild: bool = True,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the tree model
        
        Args:
            store: Document store holding the tree
            config: Field layout, defaults to TreeConfig()
            strict: Raise InconsistentStateError instead of logging when
                    coordinates contradict the invariants
            always_rebuild: Rebuild after every update, not only topology updates
            executor: Executor for arebuild()
        """
        self.store = store
        self.config = config or TreeConfig()
        self.lock = threading.RLock()
        
        self.indexer = NestedSetIndexer(
            store, self.config, lock=self.lock, strict=strict, executor=executor
        )
        self.gateway = TreeMutationGateway(
            store, self.indexer, self.config, always_rebuild=always_rebuild
        )
        self.query = TreeQueryEngine(store, self.config, strict=strict)
    
    # =========================================================================
    # Writes
    # =========================================================================
    
    def create(self, fields: Document) -> Any:
        """Insert a node and rebuild; returns its identity."""
        return self.gateway.create(fields)
    
    def update(self, node: Union[Document, Any], fields: Document) -> bool:
        """Merge fields into a node (document or identity) and rebuild."""
        return self.gateway.update(node, fields)
    
    def remove(self, filter: Document, single: bool = True) -> bool:
        """Delete one or all matching nodes and rebuild."""
        return self.gateway.remove(filter, single)
    
    def rebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        """Recompute all coordinates (administrative reindex)."""
        return self.indexer.rebuild(strategy)
    
    async def arebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        return await self.indexer.arebuild(strategy)
    
    # =========================================================================
    # Reads
    # =========================================================================
    
    def get_tree(self, top_parent_ref: Any = None) -> NodeTree:
        return self.query.get_tree(top_parent_ref)
    
    def get_parents(self, node: NodeRef, include_current: bool = False) -> List[Document]:
        return self.query.get_parents(node, include_current)
    
    def get_form_select_options(self, current_ref: Any = None) -> List[SelectOption]:
        return self.query.get_form_select_options(current_ref)
    
    def get_subtree(self, node: NodeRef, include_current: bool = True) -> List[Document]:
        return self.query.get_subtree(node, include_current)
    
    def get_children(self, node: NodeRef = None) -> List[Document]:
        return self.query.get_children(node)
    
    def find_orphans(self) -> List[Document]:
        return self.query.find_orphans()
    
    def check_invariants(self) -> List[str]:
        return self.query.check_invariants()
    
    def display_tree(self, top_parent_ref: Any = None, url: str = "") -> str:
        """HTML nested list of the tree, see render_tree_html()."""
        return render_tree_html(self.get_tree(top_parent_ref), url)
    
    def get_row(self, field: str, value: Any) -> Optional[Document]:
        """First document whose ``field`` equals ``value``."""
        return self.store.find_one({field: value})
    
    def get_row_by_id(self, identity: Any) -> Optional[Document]:
        return self.store.get(identity)
    
    def get_all(
        self,
        order_by: str = "",
        direction: Union[SortDirection, str] = SortDirection.ASC,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> List[Document]:
        """All documents, optionally ordered by one field."""
        order = [(order_by, direction)] if order_by else None
        return self.store.find(order_by=order, limit=limit, skip=skip)
