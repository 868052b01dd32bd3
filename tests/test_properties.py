"""
Randomized checks of the nested-set invariants across write sequences.
"""

import random

import pytest

from nestdoc import TreeConfig, TreeModel, ValidationError
from tests.helpers import items, true_ancestors


def _attached(tree):
    return [doc for doc in tree.get_all() if doc["level"]]


def _random_operations(tree, rng, steps):
    counter = 0
    for _ in range(steps):
        docs = tree.get_all()
        keys = [doc["item"] for doc in docs]
        roll = rng.random()

        if roll < 0.55 or not docs:
            parent = rng.choice(keys) if keys and rng.random() < 0.75 else "0"
            tree.create({"item": f"k{counter}", "parent": parent, "rank": rng.randint(0, 3)})
            counter += 1
        elif roll < 0.85:
            doc = rng.choice(docs)
            parent = rng.choice(keys + ["0"])
            try:
                tree.update(doc, {"parent": parent})
            except ValidationError:
                pass
        else:
            tree.remove({"item": rng.choice(keys)})

        yield


@pytest.mark.parametrize("seed", [1, 2, 3])
@pytest.mark.parametrize("order_field", [None, "rank"])
def test_invariants_hold_after_every_write(seed, order_field, store):
    tree = TreeModel(store, TreeConfig(order_field=order_field))
    rng = random.Random(seed)

    for _ in _random_operations(tree, rng, 40):
        assert tree.check_invariants() == []


@pytest.mark.parametrize("seed", [11, 12])
def test_ancestors_match_parent_references(seed, store):
    tree = TreeModel(store)
    rng = random.Random(seed)
    for _ in _random_operations(tree, rng, 35):
        pass

    attached = _attached(tree)
    for doc in attached:
        expected = true_ancestors(attached, doc["item"])
        assert items(tree.get_parents(doc["item"])) == expected
        for ancestor in expected:
            assert doc["item"] not in items(tree.get_parents(ancestor))


@pytest.mark.parametrize("seed", [21, 22])
def test_select_options_disable_exactly_the_subtree(seed, store):
    tree = TreeModel(store)
    rng = random.Random(seed)
    for _ in _random_operations(tree, rng, 30):
        pass

    attached = _attached(tree)
    for current in attached:
        key = current["item"]
        expected = {key} | {
            doc["item"] for doc in attached
            if key in true_ancestors(attached, doc["item"])
        }
        options = tree.get_form_select_options(key)
        assert {o.value for o in options if o.disabled} == expected
        assert len(options) == len(attached)


@pytest.mark.parametrize("seed", [31, 32])
def test_rebuild_twice_is_stable(seed, store):
    tree = TreeModel(store)
    rng = random.Random(seed)
    for _ in _random_operations(tree, rng, 30):
        pass

    first = tree.get_all()
    assert tree.rebuild().written == 0
    assert tree.get_all() == first
