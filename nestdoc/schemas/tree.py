"""
Tree schemas - structures produced by the nested-set indexer and query engine.

This module defines:
    - Coordinates: the (left, right, level) triple written by the indexer
    - RebuildResult: summary of one rebuild
    - TreeNode: a node of a reconstructed tree with its children
    - NodeTree: container for a forest of TreeNode roots with helper methods
    - SelectOption: one entry of an indented parent picker
"""

from typing import Any, Dict, Iterable, List, Optional
import json

from pydantic import BaseModel, Field

from .types import RebuildStrategy


class Coordinates(BaseModel):
    """Nested-set coordinates of one node."""

    left: int
    right: int
    level: int

    model_config = {"frozen": True}

    def contains(self, other: "Coordinates", inclusive: bool = False) -> bool:
        """Whether this range encloses ``other``."""
        if inclusive:
            return self.left <= other.left and self.right >= other.right
        return self.left < other.left and self.right > other.right


class RebuildResult(BaseModel):
    """Outcome of a full rebuild.

    Attributes:
        nodes: Nodes reachable from the root sentinel.
        orphans: Stored nodes not reachable from the root sentinel.
        written: Documents whose coordinates actually changed.
        strategy: Traversal strategy used.
        elapsed: Wall-clock seconds spent.
    """

    nodes: int = 0
    orphans: int = 0
    written: int = 0
    strategy: RebuildStrategy = RebuildStrategy.BATCHED
    elapsed: float = 0.0


class TreeNode(BaseModel):
    """Node of a tree reconstructed from nested-set coordinates.

    Attributes:
        id: Store identity of the document.
        primary: Domain identifier (value of the primary field).
        parent: Parent reference as stored.
        name: Display label.
        left: Left coordinate.
        right: Right coordinate.
        level: Depth, root's children at level 1.
        children: Child nodes in left order.
        extras: The remaining document fields.
    """

    id: Any
    primary: Any
    parent: Any = None
    name: Any = None
    left: int
    right: int
    level: int
    children: List["TreeNode"] = Field(default_factory=list)
    extras: Dict[str, Any] = Field(default_factory=dict)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(left=self.left, right=self.right, level=self.level)

    @property
    def is_leaf(self) -> bool:
        return self.right == self.left + 1


class NodeTree:
    """Forest of TreeNode roots.

    Returned by ``TreeQueryEngine.get_tree``. Roots keep the order of their
    left coordinate; so does every ``children`` list.
    """

    def __init__(self, nodes: List[TreeNode], top_parent: Any = None) -> None:
        self.nodes = nodes
        self.top_parent = top_parent

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeTree":
        """Create NodeTree from a dictionary structure.

        Expected format:
            {"top_parent": Any, "nodes": [TreeNode-like dict, ...]}
        """

        nodes_raw = data.get("nodes", []) or []
        nodes = [TreeNode.model_validate(node) for node in nodes_raw]
        return cls(nodes=nodes, top_parent=data.get("top_parent"))

    def to_dict(self) -> Dict[str, Any]:
        """Convert NodeTree to a serializable dict."""

        return {
            "top_parent": self.top_parent,
            "nodes": [node.model_dump(exclude_none=True) for node in self.nodes],
        }

    def to_json(self, json_path: str) -> None:
        """Serialize NodeTree to a JSON file."""

        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2, default=str)

    def collect_all_nodes(self) -> List[TreeNode]:
        """Flatten the forest into a list, preorder (= left order)."""

        result: List[TreeNode] = []
        stack: List[TreeNode] = list(reversed(self.nodes))
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result

    def iter_nodes(self) -> Iterable[TreeNode]:
        """Yield all nodes in preorder traversal order."""

        yield from self.collect_all_nodes()

    def find(self, primary: Any) -> Optional[TreeNode]:
        """Return the node with the given primary key, if present."""

        for node in self.iter_nodes():
            if node.primary == primary:
                return node
        return None

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.collect_all_nodes())

    def __bool__(self) -> bool:
        return bool(self.nodes)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"NodeTree(top_parent={self.top_parent!r}, nodes={len(self)})"


class SelectOption(BaseModel):
    """One entry of an indented parent picker."""

    label: str
    value: Any
    disabled: bool = False
