"""
Base indexer class
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..schemas.tree import RebuildResult
from ..schemas.types import RebuildStrategy


class BaseTreeIndexer(ABC):
    """
    Base class for tree indexers
    
    A tree indexer owns the derived coordinates of a tree stored in a
    document store. It never changes the tree's shape, only the fields
    that encode it.
    
    Design Philosophy:
        - Indexer = coordinate owner (nobody else writes coordinates)
        - DocumentStore = storage backend (raw reads and writes)
        - Every rebuild recomputes the whole tree
    
    Note:
        Rebuilds are synchronous. arebuild() exists so async callers can
        offload the work without blocking their event loop.
    """
    
    @abstractmethod
    def rebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        """
        Recompute and persist the coordinates of every node
        
        Args:
            strategy: Traversal strategy, defaults to the configured one
        
        Returns:
            Summary of the rebuild
        
        Raises:
            StoreUnavailableError: If a store call fails; coordinates may
                then be stale until the next successful rebuild
        """
        pass
    
    @abstractmethod
    async def arebuild(self, strategy: Optional[RebuildStrategy] = None) -> RebuildResult:
        """
        Async version of rebuild
        
        Args:
            strategy: Traversal strategy, defaults to the configured one
        """
        pass
    
    def validate(self) -> list[str]:
        """
        Check stored coordinates against the indexer's invariants
        
        Returns:
            List of violation messages (empty when consistent)
        
        Note:
            This is an optional method. Subclasses may override it.
            Default raises NotImplementedError.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement validate()"
        )
