"""
Schemas module - Core data structures
"""

from .types import SortDirection, RebuildStrategy, StoreBackend
from .config import TreeConfig, MongoStoreConfig
from .tree import Coordinates, RebuildResult, TreeNode, NodeTree, SelectOption

__all__ = [
    # Enums
    "SortDirection",
    "RebuildStrategy",
    "StoreBackend",
    # Configuration
    "TreeConfig",
    "MongoStoreConfig",
    # Tree schemas
    "Coordinates",
    "RebuildResult",
    "TreeNode",
    "NodeTree",
    "SelectOption",
]
