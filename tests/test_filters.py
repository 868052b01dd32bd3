"""
Tests for MongoDB-style filter evaluation.
"""

import pytest

from nestdoc.exceptions import ValidationError
from nestdoc.storages.document.filters import FilterMatcher, filter_documents, sort_key


@pytest.fixture
def matcher():
    return FilterMatcher()


def test_empty_filter_matches_everything(matcher):
    assert matcher.matches({"a": 1}, None)
    assert matcher.matches({"a": 1}, {})


def test_literal_equality(matcher):
    assert matcher.matches({"parent": "0"}, {"parent": "0"})
    assert not matcher.matches({"parent": "0"}, {"parent": 0})
    assert not matcher.matches({}, {"parent": "0"})


def test_missing_field_equals_none(matcher):
    assert matcher.matches({}, {"level": None})
    assert matcher.matches({"level": None}, {"level": None})
    assert not matcher.matches({"level": 0}, {"level": None})


def test_range_operators(matcher):
    doc = {"lft": 4, "rght": 9}
    assert matcher.matches(doc, {"lft": {"$gt": 1, "$lt": 5}})
    assert matcher.matches(doc, {"lft": {"$gte": 4}, "rght": {"$lte": 9}})
    assert not matcher.matches(doc, {"lft": {"$lt": 4}})


def test_range_never_matches_missing_or_incomparable(matcher):
    assert not matcher.matches({}, {"lft": {"$gt": 0}})
    assert not matcher.matches({"lft": None}, {"lft": {"$lt": 10}})
    assert not matcher.matches({"lft": "x"}, {"lft": {"$gt": 1}})


def test_in_nin_ne_exists(matcher):
    doc = {"item": "b", "level": 2}
    assert matcher.matches(doc, {"item": {"$in": ["a", "b"]}})
    assert matcher.matches(doc, {"item": {"$nin": ["c"]}})
    assert matcher.matches(doc, {"level": {"$ne": 0}})
    assert matcher.matches({}, {"level": {"$ne": 0}})
    assert matcher.matches(doc, {"level": {"$exists": True}})
    assert matcher.matches(doc, {"lft": {"$exists": False}})


def test_logical_operators(matcher):
    doc = {"parent": "a", "level": 2}
    assert matcher.matches(doc, {"$or": [{"parent": "x"}, {"level": 2}]})
    assert not matcher.matches(doc, {"$and": [{"parent": "a"}, {"level": 3}]})
    assert matcher.matches(doc, {"$nor": [{"parent": "x"}, {"level": 3}]})


def test_dotted_fields(matcher):
    assert matcher.matches({"meta": {"kind": "x"}}, {"meta.kind": "x"})
    assert not matcher.matches({"meta": "flat"}, {"meta.kind": "x"})


def test_unknown_operator_is_rejected(matcher):
    with pytest.raises(ValidationError):
        matcher.matches({"a": 1}, {"a": {"$regex": "x"}})
    with pytest.raises(ValidationError):
        matcher.matches({"a": 1}, {"$where": "1"})


def test_filter_documents_preserves_order():
    docs = [{"n": 3}, {"n": 1}, {"n": 2}]
    assert filter_documents(docs, {"n": {"$gte": 2}}) == [{"n": 3}, {"n": 2}]


def test_sort_key_orders_mixed_types():
    values = ["b", 2, None, 1.5, "a"]
    assert sorted(values, key=sort_key) == [None, 1.5, 2, "a", "b"]
