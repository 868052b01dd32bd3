"""
Trees module
Nested-set trees over document stores: writes, reads and rendering
"""

from ..schemas.config import is_empty_reference
from .gateway import TreeMutationGateway
from .query import TreeQueryEngine
from .model import TreeModel
from .render import render_tree_html

__all__ = [
    "TreeMutationGateway",
    "TreeQueryEngine",
    "TreeModel",
    "render_tree_html",
    "is_empty_reference",
]
