"""
Nested-set invariant checks

Shared by the indexer (strict mode) and the query engine. Works on plain
documents so it can run on a fresh store scan or on staged coordinates.
"""

from typing import Any, Dict, Iterable, List

from ..schemas.config import TreeConfig


def check_invariants(documents: Iterable[Dict[str, Any]], config: TreeConfig) -> List[str]:
    """
    Check the nested-set invariants over the attached nodes of a tree
    
    Nodes with level 0 (placeholders and orphans) are ignored. Checked:
        - left < right for every node
        - ranges nest strictly and siblings do not overlap
        - the enclosing range is the node's parent, levels follow depth
        - left/right values form one contiguous run from root_left
        - leaves have right == left + 1
    
    Args:
        documents: Stored documents of one tree
        config: Field layout of the tree
    
    Returns:
        Human readable violation messages, empty when consistent
    """
    left_f, right_f, level_f = config.coordinate_fields
    primary_f, parent_f = config.primary_field, config.parent_field
    
    nodes = [doc for doc in documents if doc.get(level_f)]
    nodes.sort(key=lambda doc: doc.get(left_f, 0))
    
    violations: List[str] = []
    stack: List[Dict[str, Any]] = []
    child_counts: Dict[Any, int] = {}
    
    for node in nodes:
        name = node.get(primary_f)
        left, right, level = node.get(left_f, 0), node.get(right_f, 0), node.get(level_f, 0)
        
        if left >= right:
            violations.append(f"{name!r}: left {left} is not below right {right}")
        
        while stack and stack[-1].get(right_f, 0) < left:
            stack.pop()
        
        if stack:
            enclosing = stack[-1]
            if enclosing.get(right_f, 0) <= right:
                violations.append(
                    f"{name!r}: range ({left}, {right}) overlaps "
                    f"{enclosing.get(primary_f)!r} ({enclosing.get(left_f)}, {enclosing.get(right_f)})"
                )
            if enclosing.get(primary_f) != node.get(parent_f):
                violations.append(
                    f"{name!r}: enclosed by {enclosing.get(primary_f)!r} "
                    f"but parent is {node.get(parent_f)!r}"
                )
            child_counts[id(enclosing)] = child_counts.get(id(enclosing), 0) + 1
        elif node.get(parent_f) != config.root_value:
            violations.append(
                f"{name!r}: top-level range but parent is {node.get(parent_f)!r}"
            )
        
        if level != len(stack) + 1:
            violations.append(f"{name!r}: level {level} at depth {len(stack) + 1}")
        
        stack.append(node)
    
    for node in nodes:
        left, right = node.get(left_f, 0), node.get(right_f, 0)
        if id(node) not in child_counts and right != left + 1:
            violations.append(
                f"{node.get(primary_f)!r}: leaf with right {right} != left {left} + 1"
            )
    
    values = sorted(
        [node.get(left_f, 0) for node in nodes] + [node.get(right_f, 0) for node in nodes]
    )
    expected = list(range(config.root_left, config.root_left + len(values)))
    if values != expected:
        violations.append(
            f"coordinates are not a contiguous run from {config.root_left} "
            f"over {len(nodes)} nodes"
        )
    
    return violations
