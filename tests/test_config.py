"""
Tests for configuration models.
"""

import pytest

from nestdoc import ConfigurationError, MongoStoreConfig, RebuildStrategy, TreeConfig


def test_tree_config_defaults():
    config = TreeConfig()

    assert config.coordinate_fields == ("lft", "rght", "level")
    assert config.root_value == "0"
    assert config.root_left == 0
    assert config.strategy == RebuildStrategy.BATCHED
    assert config.display_field == "item"
    assert config.topology_fields() == {"parent", "item"}


def test_display_field_falls_back_to_order_field():
    assert TreeConfig(order_field="title").display_field == "title"
    assert TreeConfig(order_field="title", label_field="name").display_field == "name"
    assert TreeConfig(order_field="title").topology_fields() == {"parent", "item", "title"}


@pytest.mark.parametrize("kwargs", [
    {"left_field": "x", "right_field": "x"},
    {"primary_field": "lft"},
    {"parent_field": "item"},
    {"order_field": "level"},
])
def test_tree_config_rejects_clashing_fields(kwargs):
    with pytest.raises(ConfigurationError):
        TreeConfig(**kwargs)


def test_tree_config_is_frozen():
    config = TreeConfig()
    with pytest.raises(Exception):
        config.root_value = "x"


def test_mongo_config_builds_uri():
    config = MongoStoreConfig(database="shop", collection="categories", server="db", port=27018)
    assert config.resolved_uri() == "mongodb://db:27018/shop"

    explicit = MongoStoreConfig(
        database="shop", collection="categories", connection_string="mongodb://x/y",
    )
    assert explicit.resolved_uri() == "mongodb://x/y"


def test_mongo_config_rejects_empty_names():
    with pytest.raises(ConfigurationError):
        MongoStoreConfig(database="", collection="c")
