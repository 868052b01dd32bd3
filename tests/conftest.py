"""
Pytest fixtures for nested-set tree testing.

Provides in-memory stores, tree models and small helpers to build trees
from (item, parent) pairs and read coordinates back.
"""

import pytest

from nestdoc import InMemoryDocumentStore, TreeConfig, TreeModel


@pytest.fixture
def store():
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def config():
    """Default field layout with a display label field."""
    return TreeConfig(label_field="name")


@pytest.fixture
def tree(store, config):
    """Tree model over the in-memory store."""
    return TreeModel(store, config)
