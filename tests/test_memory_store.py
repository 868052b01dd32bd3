"""
Tests for the in-memory document store.
"""

import pytest

from nestdoc import InMemoryDocumentStore, SortDirection, StoreBackend, create_store
from nestdoc.exceptions import ValidationError


def test_insert_assigns_identity(store):
    identity = store.insert({"item": "a"})
    assert identity
    assert store.get(identity) == {"item": "a", "_id": identity}


def test_insert_keeps_given_identity_and_rejects_duplicates(store):
    assert store.insert({"_id": "fixed", "item": "a"}) == "fixed"
    with pytest.raises(ValidationError):
        store.insert({"_id": "fixed", "item": "b"})


@pytest.mark.parametrize("identity", [0, ""])
def test_insert_keeps_falsy_given_identity(store, identity):
    assert store.insert({"_id": identity, "item": "a"}) == identity
    assert store.get(identity) == {"_id": identity, "item": "a"}


def test_reads_return_copies(store):
    identity = store.insert({"item": "a", "tags": ["x"]})
    doc = store.get(identity)
    doc["tags"].append("y")
    assert store.get(identity)["tags"] == ["x"]


def test_find_orders_with_insertion_tiebreak(store):
    store.insert({"item": "a", "rank": 2})
    store.insert({"item": "b", "rank": 1})
    store.insert({"item": "c", "rank": 2})
    store.insert({"item": "d", "rank": 1})

    ascending = store.find(order_by=[("rank", SortDirection.ASC)])
    assert [d["item"] for d in ascending] == ["b", "d", "a", "c"]

    descending = store.find(order_by=[("rank", "desc")])
    assert [d["item"] for d in descending] == ["a", "c", "b", "d"]


def test_find_skip_and_limit(store):
    for n in range(5):
        store.insert({"n": n})
    found = store.find(order_by=[("n", "asc")], skip=1, limit=2)
    assert [d["n"] for d in found] == [1, 2]


def test_update_replaces_document(store):
    identity = store.insert({"item": "a", "old": True})
    assert store.update(identity, {"item": "a2"})
    assert store.get(identity) == {"item": "a2", "_id": identity}
    assert not store.update("missing", {"item": "x"})


def test_remove_single_and_multiple(store):
    for item in ("a", "b", "c"):
        store.insert({"item": item, "parent": "0"})
    assert store.remove({"parent": "0"}, single=True) == 1
    assert [d["item"] for d in store.find()] == ["b", "c"]
    assert store.remove({"parent": "0"}, single=False) == 2
    assert store.count() == 0


def test_apply_coordinates_skips_unknown_identities(store):
    a = store.insert({"item": "a"})
    written = store.apply_coordinates({a: {"lft": 0, "rght": 1}, "ghost": {"lft": 5}})
    assert written == 1
    assert store.get(a)["rght"] == 1
    assert store.count() == 1


def test_count_and_clear(store):
    store.insert({"parent": "0"})
    store.insert({"parent": "x"})
    assert store.count({"parent": "0"}) == 1
    assert len(store) == 2
    store.clear()
    assert store.count() == 0


def test_preloaded_documents():
    store = InMemoryDocumentStore([{"item": "a"}, {"item": "b"}])
    assert [d["item"] for d in store.find()] == ["a", "b"]


def test_create_store_factory():
    assert isinstance(create_store("memory"), InMemoryDocumentStore)
    assert isinstance(create_store(StoreBackend.MEMORY), InMemoryDocumentStore)
    with pytest.raises(ValueError):
        create_store("cassandra")
