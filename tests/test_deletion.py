"""Tests for the removal guard."""

import asyncio

import pytest

from tree_ancestors.engine import DeletionGuard
from tree_ancestors.errors import HasDescendants
from tree_ancestors.models import TreeOptions
from tree_ancestors.store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore(records=[
        {"_id": "A", "parent": None, "ancestors": [], "tag": "keep"},
        {"_id": "B", "parent": "A", "ancestors": ["A"], "tag": "drop"},
        {"_id": "C", "parent": "B", "ancestors": ["A", "B"], "tag": "drop"},
        {"_id": "D", "parent": "C", "ancestors": ["A", "B", "C"]},
        {"_id": "L1", "parent": "A", "ancestors": ["A"], "tag": "drop"},
        {"_id": "L2", "parent": "A", "ancestors": ["A"], "tag": "drop"},
    ])


@pytest.fixture
def guard(store):
    return DeletionGuard(store, TreeOptions(concurrency=2))


def get(store, node_id):
    return asyncio.run(store.find_one({"_id": node_id}))


class TestCheck:
    def test_lists_every_descendant(self, store, guard):
        with pytest.raises(HasDescendants) as exc:
            asyncio.run(guard.check(get(store, "B")))
        assert exc.value.node_id == "B"
        assert sorted(exc.value.descendants) == ["C", "D"]

    def test_root_lists_whole_tree(self, store, guard):
        with pytest.raises(HasDescendants) as exc:
            asyncio.run(guard.check(get(store, "A")))
        assert sorted(exc.value.descendants) == ["B", "C", "D", "L1", "L2"]

    def test_leaf_is_permitted(self, store, guard):
        assert asyncio.run(guard.check(get(store, "D"))) is None

    def test_missing_record_is_permitted(self, guard):
        assert asyncio.run(guard.check(None)) is None


class TestRemove:
    def test_refused_removal_keeps_record(self, store, guard):
        with pytest.raises(HasDescendants):
            asyncio.run(guard.remove(get(store, "C")))
        assert get(store, "C") is not None

    def test_leaf_removed(self, store, guard):
        assert asyncio.run(guard.remove(get(store, "D"))) is True
        assert get(store, "D") is None
        # C is now a leaf
        assert asyncio.run(guard.remove(get(store, "C"))) is True

    def test_missing_record(self, guard):
        assert asyncio.run(guard.remove(None)) is False


class TestRemoveMany:
    def test_all_leaves(self, store, guard):
        result = asyncio.run(guard.remove_many({"parent": "A", "tag": "drop", "_id": "L1"}))
        assert result.removed == ["L1"]

    def test_sweep_continues_past_refusals(self, store, guard):
        with pytest.raises(HasDescendants) as exc:
            asyncio.run(guard.remove_many({"tag": "drop"}))

        # B and C have descendants; both leaves are still removed
        assert exc.value.node_id in ("B", "C")
        assert get(store, "L1") is None
        assert get(store, "L2") is None
        assert get(store, "B") is not None
        assert get(store, "C") is not None

    def test_no_matches(self, guard):
        result = asyncio.run(guard.remove_many({"tag": "nothing"}))
        assert result.count == 0
