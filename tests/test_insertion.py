"""Tests for chain assignment on create and re-parent."""

import asyncio

import pytest

from tree_ancestors.engine import InsertionHandler
from tree_ancestors.errors import InvalidParent, ParentNotFound
from tree_ancestors.models import TreeOptions
from tree_ancestors.store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore(records=[
        {"_id": "A", "parent": None, "ancestors": []},
        {"_id": "B", "parent": "A", "ancestors": ["A"]},
        {"_id": "C", "parent": "B", "ancestors": ["A", "B"]},
        {"_id": "X", "parent": None, "ancestors": []},
    ])


@pytest.fixture
def handler(store):
    return InsertionHandler(store, TreeOptions())


class TestPrepare:
    def test_root_without_parent(self, handler):
        record = asyncio.run(handler.prepare({"name": "root"}))
        assert record["parent"] is None
        assert record["ancestors"] == []

    def test_empty_parent_is_root(self, handler):
        record = asyncio.run(handler.prepare({"parent": ""}))
        assert record["parent"] is None
        assert record["ancestors"] == []

    def test_zero_is_an_id(self):
        store = InMemoryStore(records=[{"_id": 0, "parent": None, "ancestors": []}])
        record = asyncio.run(InsertionHandler(store).prepare({"_id": 1, "parent": 0}))

        assert record["parent"] == 0
        assert record["ancestors"] == [0]

    def test_child_of_root(self, handler):
        record = asyncio.run(handler.prepare({"parent": "A"}))
        assert record["ancestors"] == ["A"]

    def test_deep_child(self, handler):
        record = asyncio.run(handler.prepare({"parent": "C"}))
        assert record["ancestors"] == ["A", "B", "C"]

    def test_missing_parent(self, handler):
        with pytest.raises(ParentNotFound) as exc:
            asyncio.run(handler.prepare({"parent": "ghost"}))
        assert exc.value.parent_id == "ghost"
        assert exc.value.field == "parent"
        assert "parent" in exc.value.errors

    def test_custom_field_names(self):
        opts = TreeOptions(parent_field="up", id_field="key", ancestors_field="path")
        store = InMemoryStore(id_field="key", records=[{"key": "R", "up": None, "path": []}])
        handler = InsertionHandler(store, opts)

        record = asyncio.run(handler.prepare({"up": "R"}))
        assert record["path"] == ["R"]

        with pytest.raises(ParentNotFound) as exc:
            asyncio.run(handler.prepare({"up": "nope"}))
        assert exc.value.field == "up"


class TestReparent:
    def test_moves_record_and_subtree(self, store, handler):
        asyncio.run(handler.reparent({"_id": "B", "parent": "X"}))

        assert asyncio.run(store.find_one({"_id": "B"}))["ancestors"] == ["X"]
        assert asyncio.run(store.find_one({"_id": "B"}))["parent"] == "X"
        assert asyncio.run(store.find_one({"_id": "C"}))["ancestors"] == ["X", "B"]

    def test_detach_to_root(self, store, handler):
        asyncio.run(handler.reparent({"_id": "B", "parent": None}))

        assert asyncio.run(store.find_one({"_id": "B"}))["ancestors"] == []
        assert asyncio.run(store.find_one({"_id": "C"}))["ancestors"] == ["B"]

    def test_missing_parent_writes_nothing(self, store, handler):
        with pytest.raises(ParentNotFound):
            asyncio.run(handler.reparent({"_id": "B", "parent": "ghost"}))

        assert asyncio.run(store.find_one({"_id": "B"}))["parent"] == "A"
        assert asyncio.run(store.find_one({"_id": "C"}))["ancestors"] == ["A", "B"]

    def test_own_descendant_is_rejected(self, store, handler):
        with pytest.raises(InvalidParent):
            asyncio.run(handler.reparent({"_id": "B", "parent": "C"}))
        assert asyncio.run(store.find_one({"_id": "B"}))["parent"] == "A"

    def test_self_is_rejected(self, handler):
        with pytest.raises(InvalidParent):
            asyncio.run(handler.reparent({"_id": "B", "parent": "B"}))


class TestBeforeSave:
    def test_new_record(self, handler):
        record = asyncio.run(handler.before_save({"parent": "B"}, is_new=True))
        assert record["ancestors"] == ["A", "B"]

    def test_data_edit_is_ignored(self, store, handler):
        record = {"_id": "C", "parent": "B", "ancestors": ["bogus"], "name": "edited"}
        result = asyncio.run(handler.before_save(record, is_new=False, parent_modified=False))

        assert result["ancestors"] == ["bogus"]
        assert asyncio.run(store.find_one({"_id": "C"}))["ancestors"] == ["A", "B"]

    def test_parent_change(self, store, handler):
        asyncio.run(handler.before_save({"_id": "C", "parent": "X"}, is_new=False, parent_modified=True))
        assert asyncio.run(store.find_one({"_id": "C"}))["ancestors"] == ["X"]


class TestChainIsStale:
    def test_consistent_records(self, handler):
        assert not handler.chain_is_stale({"_id": "A", "parent": None, "ancestors": []})
        assert not handler.chain_is_stale({"_id": "C", "parent": "B", "ancestors": ["A", "B"]})

    def test_parent_changed(self, handler):
        assert handler.chain_is_stale({"_id": "C", "parent": "X", "ancestors": ["A", "B"]})

    def test_detached_root(self, handler):
        assert handler.chain_is_stale({"_id": "C", "parent": None, "ancestors": ["A", "B"]})

    def test_missing_chain(self, handler):
        assert handler.chain_is_stale({"_id": "C", "parent": "B"})

    def test_zero_parent(self, handler):
        assert not handler.chain_is_stale({"_id": 1, "parent": 0, "ancestors": [0]})
        assert handler.chain_is_stale({"_id": 1, "parent": 0, "ancestors": []})
