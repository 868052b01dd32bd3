"""
Tests for the MongoDB document store backend.

A fake collection stands in for pymongo's Collection; the tests check how
store calls are translated, retried and how driver errors surface.
"""

from types import SimpleNamespace

import pytest

pymongo = pytest.importorskip("pymongo")
from bson import ObjectId
from pymongo.errors import AutoReconnect, DuplicateKeyError, OperationFailure

from nestdoc import (
    MongoDocumentStore,
    MongoStoreConfig,
    SortDirection,
    StoreUnavailableError,
    TreeConfig,
    create_store,
)


class FakeCursor:
    def __init__(self, documents, calls):
        self.documents = documents
        self.calls = calls

    def sort(self, spec):
        self.calls.append(("sort", spec))
        return self

    def skip(self, n):
        self.calls.append(("skip", n))
        return self

    def limit(self, n):
        self.calls.append(("limit", n))
        return self

    def __iter__(self):
        return iter(self.documents)


class FakeCollection:
    def __init__(self, documents=None):
        self.documents = documents or []
        self.calls = []
        self.failures = []
        self.lost_acks = []

    def _maybe_fail(self):
        if self.failures:
            raise self.failures.pop(0)

    def insert_one(self, document):
        self._maybe_fail()
        self.calls.append(("insert_one", dict(document)))
        if any(doc["_id"] == document["_id"] for doc in self.documents):
            raise DuplicateKeyError("E11000 duplicate key", 11000)
        self.documents.append(dict(document))
        if self.lost_acks:
            raise self.lost_acks.pop(0)
        return SimpleNamespace(inserted_id=document["_id"])

    def find_one(self, filter):
        self._maybe_fail()
        self.calls.append(("find_one", filter))
        if "_id" in filter:
            return next((doc for doc in self.documents if doc["_id"] == filter["_id"]), None)
        return self.documents[0] if self.documents else None

    def find(self, filter):
        self._maybe_fail()
        self.calls.append(("find", filter))
        return FakeCursor(self.documents, self.calls)

    def replace_one(self, filter, replacement):
        self.calls.append(("replace_one", filter, replacement))
        return SimpleNamespace(matched_count=1)

    def delete_one(self, filter):
        self.calls.append(("delete_one", filter))
        return SimpleNamespace(deleted_count=1)

    def delete_many(self, filter):
        self.calls.append(("delete_many", filter))
        return SimpleNamespace(deleted_count=3)

    def count_documents(self, filter):
        self.calls.append(("count_documents", filter))
        return len(self.documents)

    def bulk_write(self, requests, ordered=True):
        self._maybe_fail()
        self.calls.append(("bulk_write", len(requests), ordered))
        return SimpleNamespace(matched_count=len(requests))

    def create_index(self, keys):
        self.calls.append(("create_index", keys))
        return "_".join(f"{field}_{direction}" for field, direction in keys)


@pytest.fixture
def collection():
    return FakeCollection([{"_id": 1, "item": "a"}])


@pytest.fixture
def mongo(collection):
    config = MongoStoreConfig(database="db", collection="tree", max_attempts=2)
    return MongoDocumentStore(config=config, client_collection=collection)


def test_find_translates_order_skip_limit(mongo, collection):
    docs = mongo.find({"parent": "0"}, order_by=[("lft", SortDirection.DESC)], limit=5, skip=2)

    assert docs == [{"_id": 1, "item": "a"}]
    assert collection.calls == [
        ("find", {"parent": "0"}),
        ("sort", [("lft", -1), ("_id", 1)]),
        ("skip", 2),
        ("limit", 5),
    ]


def test_find_without_order_keeps_natural_order(mongo, collection):
    mongo.find()
    assert collection.calls == [("find", {})]


def test_insert_update_remove(mongo, collection):
    identity = mongo.insert({"item": "b"})
    assert isinstance(identity, ObjectId)
    assert collection.documents[-1] == {"_id": identity, "item": "b"}
    assert mongo.update(1, {"_id": 1, "item": "a2"})
    assert mongo.remove({"item": "a"}) == 1
    assert mongo.remove({"parent": "0"}, single=False) == 3
    mongo.clear()

    assert ("replace_one", {"_id": 1}, {"item": "a2"}) in collection.calls
    assert collection.calls[-1] == ("delete_many", {})


def test_apply_coordinates_uses_one_unordered_bulk_write(mongo, collection):
    written = mongo.apply_coordinates({1: {"lft": 0}, 2: {"lft": 2}})

    assert written == 2
    assert collection.calls == [("bulk_write", 2, False)]
    assert mongo.apply_coordinates({}) == 0


def test_transient_errors_are_retried(mongo, collection):
    collection.failures.append(AutoReconnect("blip"))

    assert mongo.find_one({"item": "a"}) == {"_id": 1, "item": "a"}


def test_driver_errors_become_store_unavailable(mongo, collection):
    collection.failures.append(OperationFailure("denied"))

    with pytest.raises(StoreUnavailableError) as excinfo:
        mongo.insert({"item": "x"})
    assert excinfo.value.operation == "insert"


def test_retries_are_bounded(mongo, collection):
    collection.failures.extend([AutoReconnect("1"), AutoReconnect("2")])

    with pytest.raises(StoreUnavailableError):
        mongo.apply_coordinates({1: {"lft": 0}})


def test_not_connected_store_raises():
    store = MongoDocumentStore(database="db", collection="tree")
    assert not store.is_connected()
    with pytest.raises(StoreUnavailableError):
        store.find()


def test_create_tree_indexes(mongo, collection):
    names = mongo.create_tree_indexes(TreeConfig(order_field="rank"))

    assert names == ["parent_1_rank_1", "lft_1_rght_1", "item_1"]


def test_factory_builds_mongo_store():
    store = create_store("mongodb", database="db", collection="tree")
    assert isinstance(store, MongoDocumentStore)
    assert store.config.resolved_uri() == "mongodb://localhost:27017/db"


def test_insert_keeps_given_identity(mongo, collection):
    assert mongo.insert({"_id": "fixed", "item": "b"}) == "fixed"
    assert collection.documents[-1] == {"_id": "fixed", "item": "b"}


def test_insert_committed_before_reconnect_is_not_an_error(mongo, collection):
    collection.lost_acks.append(AutoReconnect("connection reset"))

    identity = mongo.insert({"item": "b"})

    assert [doc["_id"] for doc in collection.documents].count(identity) == 1
    inserts = [call for call in collection.calls if call[0] == "insert_one"]
    assert len(inserts) == 2
    assert inserts[0][1]["_id"] == inserts[1][1]["_id"] == identity


def test_duplicate_identity_on_first_attempt_still_fails(mongo, collection):
    with pytest.raises(StoreUnavailableError):
        mongo.insert({"_id": 1, "item": "again"})
