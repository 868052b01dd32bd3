"""
Indexers module
Nested-set coordinate building and validation
"""

from .base import BaseTreeIndexer
from .nested_set import NestedSetIndexer
from .invariants import check_invariants

__all__ = [
    "BaseTreeIndexer",
    "NestedSetIndexer",
    "check_invariants",
]
