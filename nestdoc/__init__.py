"""
nestdoc - nested-set trees over document stores
"""

from .utils.logger import configure_logging

__version__ = "0.1.0"

# Configure rich logging for readable rebuild reports
configure_logging()

# Exceptions
from .exceptions import (
    NestDocError,
    ConfigurationError,
    ValidationError,
    ResourceError,
    TreeError,
    ParentNotFoundError,
    NodeNotFoundError,
    InconsistentStateError,
)
from .storages.exceptions import StoreUnavailableError

# Core schemas
from .schemas import (
    SortDirection,
    RebuildStrategy,
    StoreBackend,
    TreeConfig,
    MongoStoreConfig,
    Coordinates,
    RebuildResult,
    TreeNode,
    NodeTree,
    SelectOption,
)

# Storages
from .storages.document import (
    BaseDocumentStore,
    InMemoryDocumentStore,
    MongoDocumentStore,
    create_store,
)

# Indexers
from .indexers import BaseTreeIndexer, NestedSetIndexer, check_invariants

# Trees
from .trees import (
    TreeMutationGateway,
    TreeQueryEngine,
    TreeModel,
    render_tree_html,
)

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "NestDocError",
    "ConfigurationError",
    "ValidationError",
    "ResourceError",
    "TreeError",
    "ParentNotFoundError",
    "NodeNotFoundError",
    "InconsistentStateError",
    "StoreUnavailableError",
    # Schemas
    "SortDirection",
    "RebuildStrategy",
    "StoreBackend",
    "TreeConfig",
    "MongoStoreConfig",
    "Coordinates",
    "RebuildResult",
    "TreeNode",
    "NodeTree",
    "SelectOption",
    # Storages
    "BaseDocumentStore",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "create_store",
    # Indexers
    "BaseTreeIndexer",
    "NestedSetIndexer",
    "check_invariants",
    # Trees
    "TreeMutationGateway",
    "TreeQueryEngine",
    "TreeModel",
    "render_tree_html",
]
