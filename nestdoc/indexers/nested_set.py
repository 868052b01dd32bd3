"""
Nested-set indexer implementation

NestedSetIndexer recomputes left/right/level for every node of a tree
stored as flat documents (modified preorder tree traversal).
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Iterator, List, Optional, Set

from ..schemas.config import TreeConfig
from ..schemas.tree import Coordinates, RebuildResult
from ..schemas.types import RebuildStrategy, SortDirection
from ..storages.document.base import BaseDocumentStore, Document
from ..storages.exceptions import StoreUnavailableError
from ..exceptions import InconsistentStateError
from .base import BaseTreeIndexer
from .invariants import check_invariants

logger = logging.getLogger(__name__)


PLACEHOLDER = Coordinates(left=0, right=0, level=0)


class _Frame:
    """One open node on the traversal stack."""
    
    __slots__ = ("document", "left", "level", "children")
    
    def __init__(self, document: Optional[Document], left: int, level: int, children: Iterator[Document]):
        self.document = document
        self.left = left
        self.level = level
        self.children = children


class NestedSetIndexer(BaseTreeIndexer):
    """
    Nested-set (MPTT) indexer
    
    Walks the tree depth-first from the root sentinel and numbers every
    node on entry (left) and exit (right):
    
        assign(node, left, level):
            cursor = left + 1
            for child in children(node):
                cursor = assign(child, cursor, level + 1)
            right = cursor
            store (left, right, level)
            return right + 1
    
    The walk uses an explicit stack, so tree depth is not bounded by the
    interpreter's recursion limit.
    
    Strategies:
        - PER_NODE: one child query per visited node
        - BATCHED: one scan of the collection, children grouped in memory
    Both produce identical coordinates.
    
    Persistence:
        Coordinates are staged in memory and written with one
        store.apply_coordinates() call, containing only the nodes whose
        coordinates changed. Orphans (nodes unreachable from the root
        sentinel) are reset to (0, 0, 0); they are never reparented.
    
    Concurrency:
        rebuild() holds the given lock for its whole duration. Share the
        lock with whatever mutates the tree to get a single writer per
        tree inside one process. Other processes are not coordinated.
    
    Usage:
        >>> store = InMemoryDocumentStore()
        >>> indexer = NestedSetIndexer(store, TreeConfig(order_field="name"))
        >>> result = indexer.rebuild()
        >>> result.nodes, result.orphans
        (42, 0)
    """
    
    def __init__(
        self,
        store: BaseDocumentStore,
        config: Optional[TreeConfig] = None,
        lock: Optional[threading.RLock] = None,
        strict: bool = False,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize the indexer
        
        Args:
            store: Document store holding the tree
            config: Field layout, defaults to TreeConfig()
            lock: Writer lock shared with the mutation path
            strict: Check invariants after every rebuild and raise
                    InconsistentStateError on violation
            executor: Executor used by arebuild(), the loop default if None
        """
        self.store = store
        self.config = config or TreeConfig()
        self._lock = lock or threading.RLock()
        self.strict = strict
        self._executor = executor
    
    @property
    def lock(self) -> threading.RLock:
        return self._lock
    
    def rebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        strategy = RebuildStrategy(strategy or self.config.strategy)
        
        with self._lock:
            started = time.perf_counter()
            try:
                if strategy == RebuildStrategy.BATCHED:
                    assignments, plan, orphans = self._plan_batched()
                else:
                    assignments, plan, orphans = self._plan_per_node()
                written = self.store.apply_coordinates(plan) if plan else 0
            except StoreUnavailableError as e:
                logger.error(
                    f"Rebuild aborted ({strategy.value}): {e}. "
                    "Coordinates stay stale until the next successful rebuild"
                )
                raise
            
            result = RebuildResult(
                nodes=len(assignments),
                orphans=orphans,
                written=written,
                strategy=strategy,
                elapsed=time.perf_counter() - started,
            )
            violations = self.validate() if self.strict else []
        
        if orphans:
            logger.warning(
                f"{orphans} node(s) are not reachable from root {self.config.root_value!r}; "
                "their coordinates were reset"
            )
        logger.info(
            f"Rebuilt tree ({strategy.value}): {result.nodes} nodes, "
            f"{result.written} written in {result.elapsed:.3f}s"
        )
        
        if violations:
            raise InconsistentStateError(violations)
        return result
    
    async def arebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.rebuild, strategy)
    
    def validate(self) -> list[str]:
        return check_invariants(self.store.find(), self.config)
    
    def compute(self, strategy: Optional[RebuildStrategy] = None) -> Dict[Any, Coordinates]:
        """
        Compute coordinates without writing them
        
        Returns:
            identity -> Coordinates for every node reachable from the root
        """
        strategy = RebuildStrategy(strategy or self.config.strategy)
        if strategy == RebuildStrategy.BATCHED:
            assignments, _, _ = self._plan_batched()
        else:
            assignments, _, _ = self._plan_per_node()
        return assignments
    
    # =========================================================================
    # Strategies
    # =========================================================================
    
    def _plan_batched(self):
        documents = self.store.find(order_by=self._sibling_order())
        
        children: Dict[Any, List[Document]] = {}
        for doc in documents:
            parent = doc.get(self.config.parent_field)
            try:
                children.setdefault(parent, []).append(doc)
            except TypeError:
                # Unhashable parent references cannot match any primary key
                continue
        
        assignments = self._walk(lambda key: children.get(key, []))
        plan = self._diff(documents, assignments)
        orphans = len(documents) - len(assignments)
        return assignments, plan, orphans
    
    def _plan_per_node(self):
        visited_docs: List[Document] = []
        order = self._sibling_order()
        parent_field = self.config.parent_field
        
        def fetch(key):
            found = self.store.find({parent_field: key}, order_by=order)
            visited_docs.extend(found)
            return found
        
        assignments = self._walk(fetch)
        plan = self._diff(visited_docs, assignments)
        
        # Orphans still carrying coordinates from an earlier generation
        left_f, right_f, level_f = self.config.coordinate_fields
        stale = self.store.find({
            self.store.ID_FIELD: {"$nin": list(assignments)},
            "$or": [{left_f: {"$ne": 0}}, {right_f: {"$ne": 0}}, {level_f: {"$ne": 0}}],
        })
        for doc in stale:
            plan[doc[self.store.ID_FIELD]] = self._fields(PLACEHOLDER)
        
        orphans = self.store.count() - len(assignments)
        return assignments, plan, orphans
    
    # =========================================================================
    # Traversal
    # =========================================================================
    
    def _walk(self, children_of: Callable[[Any], List[Document]]) -> Dict[Any, Coordinates]:
        """Explicit-stack modified preorder traversal from the root sentinel."""
        id_field = self.store.ID_FIELD
        primary_field = self.config.primary_field
        
        assignments: Dict[Any, Coordinates] = {}
        visited: Set[Any] = set()
        
        root_left = self.config.root_left - 1
        stack = [_Frame(None, root_left, 0, iter(children_of(self.config.root_value)))]
        cursor = root_left + 1
        
        while stack:
            frame = stack[-1]
            child = next(frame.children, None)
            
            if child is None:
                stack.pop()
                right = cursor
                if frame.document is not None:
                    assignments[frame.document[id_field]] = Coordinates(
                        left=frame.left, right=right, level=frame.level
                    )
                cursor = right + 1
                continue
            
            identity = child[id_field]
            if identity in visited:
                logger.warning(
                    f"Node {child.get(primary_field)!r} reached twice "
                    "(duplicate primary key?); keeping the first position"
                )
                continue
            visited.add(identity)
            
            key = child.get(primary_field)
            grandchildren = iter(children_of(key)) if key is not None else iter(())
            stack.append(_Frame(child, cursor, frame.level + 1, grandchildren))
            cursor += 1
        
        return assignments
    
    def _diff(self, documents: List[Document], assignments: Dict[Any, Coordinates]) -> Dict[Any, Document]:
        """Plan entries for documents whose stored coordinates differ."""
        left_f, right_f, level_f = self.config.coordinate_fields
        plan: Dict[Any, Document] = {}
        for doc in documents:
            identity = doc[self.store.ID_FIELD]
            target = assignments.get(identity, PLACEHOLDER)
            current = (doc.get(left_f), doc.get(right_f), doc.get(level_f))
            if current != (target.left, target.right, target.level):
                plan[identity] = self._fields(target)
        return plan
    
    def _fields(self, coordinates: Coordinates) -> Document:
        left_f, right_f, level_f = self.config.coordinate_fields
        return {left_f: coordinates.left, right_f: coordinates.right, level_f: coordinates.level}
    
    def _sibling_order(self):
        if self.config.order_field:
            return [(self.config.order_field, SortDirection.ASC)]
        return None
