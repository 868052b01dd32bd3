"""
Helpers shared by the tree tests.
"""


def build(tree, pairs, **extra):
    """Create nodes from (item, parent) pairs; returns item -> identity."""
    identities = {}
    for item, parent in pairs:
        fields = {"item": item, "parent": parent, "name": item.upper()}
        fields.update(extra.get(item, {}))
        identities[item] = tree.create(fields)
    return identities


def coords(tree, item):
    """(lft, rght, level) of the node with primary key ``item``."""
    doc = tree.get_row("item", item)
    assert doc is not None, f"missing node {item}"
    return doc["lft"], doc["rght"], doc["level"]


def items(documents):
    """Primary keys of a document list, order preserved."""
    return [doc["item"] for doc in documents]


def true_ancestors(documents, item, root="0"):
    """Ancestors of ``item`` by following parent references, root first."""
    by_item = {doc["item"]: doc for doc in documents}
    chain = []
    parent = by_item[item]["parent"]
    while parent != root:
        chain.append(parent)
        parent = by_item[parent]["parent"]
    return list(reversed(chain))
