"""
Tree query engine

Answers structural questions from stored nested-set coordinates, without
walking parent references: one range-filtered scan ordered by left
coordinate per query.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..exceptions import InconsistentStateError, NodeNotFoundError, ParentNotFoundError
from ..indexers.invariants import check_invariants
from ..schemas.config import TreeConfig
from ..schemas.tree import NodeTree, SelectOption, TreeNode
from ..schemas.types import SortDirection
from ..storages.document.base import BaseDocumentStore, Document

logger = logging.getLogger(__name__)


NodeRef = Union[Document, TreeNode, Any]


class TreeQueryEngine:
    """
    Read side of a nested-set tree
    
    Nodes with level 0 (orphans, or placeholders of an interrupted write)
    carry no valid coordinates and are left out of every query.
    
    When a scan meets coordinates that contradict the parent references
    (a node listed before its parent), the engine logs a warning and skips
    the node. With ``strict=True`` it raises InconsistentStateError instead.
    
    Node references accepted by the query methods:
        - a stored document (dict with ``_id``), re-read for fresh coordinates
        - a TreeNode from get_tree()
        - a primary key value
    """
    
    def __init__(
        self,
        store: BaseDocumentStore,
        config: Optional[TreeConfig] = None,
        strict: bool = False,
    ):
        self.store = store
        self.config = config or TreeConfig()
        self.strict = strict
    
    # =========================================================================
    # Core queries
    # =========================================================================
    
    def get_tree(self, top_parent_ref: Any = None) -> NodeTree:
        """
        Reconstruct the nested tree below ``top_parent_ref``
        
        Args:
            top_parent_ref: Primary key of the subtree's parent, the root
                sentinel (default) for the whole tree
        
        Returns:
            NodeTree whose roots are the nodes with parent == top_parent_ref
        
        Raises:
            ParentNotFoundError: If top_parent_ref is not the sentinel and
                no node has that primary key
        """
        cfg = self.config
        top = cfg.normalize_parent(top_parent_ref)
        
        if top == cfg.root_value:
            rows = self._scan(self._attached())
        else:
            top_node = self.store.find_one({cfg.primary_field: top})
            if top_node is None:
                raise ParentNotFoundError(top)
            if not top_node.get(cfg.level_field):
                logger.warning(f"Subtree root {top!r} is not attached to the tree")
                return NodeTree([], top_parent=top)
            rows = self._scan({
                cfg.left_field: {"$gt": top_node[cfg.left_field]},
                cfg.right_field: {"$lt": top_node[cfg.right_field]},
                **self._attached(),
            })
        
        roots: List[TreeNode] = []
        index: Dict[Any, TreeNode] = {}
        
        for row in rows:
            node = self._to_tree_node(row)
            if node.parent == top:
                roots.append(node)
            else:
                holder = index.get(node.parent)
                if holder is None:
                    self._inconsistent(
                        f"{node.primary!r} is listed before its parent {node.parent!r}"
                    )
                    continue
                holder.children.append(node)
            index[node.primary] = node
        
        return NodeTree(roots, top_parent=top)
    
    def get_parents(self, node: NodeRef, include_current: bool = False) -> List[Document]:
        """
        Ancestors of a node, root first
        
        Args:
            node: Node reference
            include_current: Also return the node itself
        
        Returns:
            Documents whose range contains the node's range, ordered by left
        
        Raises:
            NodeNotFoundError: If the node does not exist
        """
        cfg = self.config
        doc = self._require(node)
        if not doc.get(cfg.level_field):
            logger.warning(f"{doc.get(cfg.primary_field)!r} is not attached; it has no ancestors")
            return []
        
        left, right = doc[cfg.left_field], doc[cfg.right_field]
        if include_current:
            bounds = {cfg.left_field: {"$lte": left}, cfg.right_field: {"$gte": right}}
        else:
            bounds = {cfg.left_field: {"$lt": left}, cfg.right_field: {"$gt": right}}
        return self._scan({**bounds, **self._attached()})
    
    def get_form_select_options(self, current_ref: Any = None) -> List[SelectOption]:
        """
        Indented options for choosing a parent node
        
        Every attached node appears once, in left order, its label prefixed
        with (level - 1) indent markers. When ``current_ref`` names an
        existing node, that node and all its descendants are disabled so a
        node can never be moved under itself.
        
        Args:
            current_ref: Primary key of the node being edited, if any
        
        Returns:
            List of SelectOption
        """
        cfg = self.config
        current = None
        if current_ref is not None:
            current = self.store.find_one({cfg.primary_field: current_ref})
            if current is not None and not current.get(cfg.level_field):
                current = None
        
        options = []
        for item in self._scan(self._attached()):
            prefix = cfg.indent_marker * max(item[cfg.level_field] - 1, 0)
            label = item.get(cfg.display_field)
            disabled = bool(
                current is not None
                and item[cfg.left_field] >= current[cfg.left_field]
                and item[cfg.right_field] <= current[cfg.right_field]
            )
            options.append(SelectOption(
                label=f"{prefix}{'' if label is None else label}",
                value=item.get(cfg.primary_field),
                disabled=disabled,
            ))
        return options
    
    # =========================================================================
    # Additional queries
    # =========================================================================
    
    def get_node(self, ref: NodeRef) -> Optional[Document]:
        """Resolve a node reference to its stored document (None if missing)."""
        if isinstance(ref, TreeNode):
            return self.store.get(ref.id)
        if isinstance(ref, dict):
            identity = ref.get(self.store.ID_FIELD)
            if identity is not None:
                return self.store.get(identity)
            ref = ref.get(self.config.primary_field)
        return self.store.find_one({self.config.primary_field: ref})
    
    def get_subtree(self, node: NodeRef, include_current: bool = True) -> List[Document]:
        """
        Descendants of a node in left order
        
        Raises:
            NodeNotFoundError: If the node does not exist
        """
        cfg = self.config
        doc = self._require(node)
        if not doc.get(cfg.level_field):
            return [doc] if include_current else []
        
        left, right = doc[cfg.left_field], doc[cfg.right_field]
        if include_current:
            bounds = {cfg.left_field: {"$gte": left}, cfg.right_field: {"$lte": right}}
        else:
            bounds = {cfg.left_field: {"$gt": left}, cfg.right_field: {"$lt": right}}
        return self._scan({**bounds, **self._attached()})
    
    def get_children(self, node: NodeRef = None) -> List[Document]:
        """Direct children in left order (top-level nodes when node is None)."""
        cfg = self.config
        if node is None:
            key = cfg.root_value
        else:
            key = self._require(node).get(cfg.primary_field)
        return self._scan({cfg.parent_field: key, **self._attached()})
    
    def find_orphans(self) -> List[Document]:
        """
        Nodes not reachable from the root sentinel
        
        After a rebuild these are the nodes whose parent was removed or never
        existed. They keep their parent reference and are never reparented.
        """
        level_f = self.config.level_field
        return self.store.find({
            "$or": [{level_f: 0}, {level_f: None}],
        })
    
    def check_invariants(self) -> List[str]:
        """Violations of the nested-set invariants in the stored coordinates."""
        return check_invariants(self.store.find(), self.config)
    
    # =========================================================================
    # Helpers
    # =========================================================================
    
    def _scan(self, filter: Document) -> List[Document]:
        return self.store.find(filter, order_by=[(self.config.left_field, SortDirection.ASC)])
    
    def _attached(self) -> Document:
        return {self.config.level_field: {"$gt": 0}}
    
    def _require(self, ref: NodeRef) -> Document:
        doc = self.get_node(ref)
        if doc is None:
            raise NodeNotFoundError(ref.primary if isinstance(ref, TreeNode) else ref)
        return doc
    
    def _inconsistent(self, message: str) -> None:
        if self.strict:
            raise InconsistentStateError([message])
        logger.warning(f"Inconsistent tree state: {message}")
    
    def _to_tree_node(self, row: Document) -> TreeNode:
        cfg = self.config
        reserved = {
            self.store.ID_FIELD, cfg.primary_field, cfg.parent_field, *cfg.coordinate_fields,
        }
        return TreeNode(
            id=row.get(self.store.ID_FIELD),
            primary=row.get(cfg.primary_field),
            parent=row.get(cfg.parent_field),
            name=row.get(cfg.display_field),
            left=row[cfg.left_field],
            right=row[cfg.right_field],
            level=row[cfg.level_field],
            extras={k: v for k, v in row.items() if k not in reserved},
        )
