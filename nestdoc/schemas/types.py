"""
Type definitions for schemas module

This module contains all enum types used across the schema system.
"""

from enum import Enum


class SortDirection(str, Enum):
    """Sort direction for ordered store scans"""
    
    ASC = "asc"
    DESC = "desc"


class RebuildStrategy(str, Enum):
    """Traversal strategies used by the nested-set indexer"""
    
    # One child query per visited node
    PER_NODE = "per_node"
    
    # One scan of the whole collection, in-memory adjacency
    BATCHED = "batched"


class StoreBackend(str, Enum):
    """Document store backends known to create_store()"""
    
    MEMORY = "memory"
    MONGODB = "mongodb"
