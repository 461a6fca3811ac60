"""Tests for chain arithmetic."""

import pytest

from tree_ancestors.engine import compute_chain, local_suffix, rebase_chain
from tree_ancestors.engine.chain import parent_or_none
from tree_ancestors.errors import CorruptChainError


class TestComputeChain:
    def test_root_parent(self):
        assert compute_chain([], "A") == ["A"]

    def test_appends_parent_id(self):
        assert compute_chain(["A", "B"], "C") == ["A", "B", "C"]

    def test_missing_parent_chain(self):
        assert compute_chain(None, "A") == ["A"]

    def test_does_not_mutate_parent_chain(self):
        parent_chain = ["A", "B"]
        child_chain = compute_chain(parent_chain, "C")
        assert parent_chain == ["A", "B"]
        assert child_chain is not parent_chain

    def test_accepts_tuples(self):
        assert compute_chain(("A",), "B") == ["A", "B"]


class TestLocalSuffix:
    def test_keeps_node_and_below(self):
        assert local_suffix(["A", "B", "C"], "B") == ["B", "C"]

    def test_node_at_start(self):
        assert local_suffix(["A", "B"], "A") == ["A", "B"]

    def test_node_at_end(self):
        assert local_suffix(["A", "B", "C"], "C") == ["C"]

    def test_absent_node_is_corrupt(self):
        with pytest.raises(CorruptChainError) as exc:
            local_suffix(["A", "B"], "X")
        assert exc.value.node_id == "X"
        assert exc.value.chain == ["A", "B"]

    def test_repeated_node_is_corrupt(self):
        """A node may appear only once in any chain."""
        with pytest.raises(CorruptChainError):
            local_suffix(["A", "B", "A", "C"], "A")


class TestRebaseChain:
    def test_replaces_prefix(self):
        assert rebase_chain(["A", "B", "C"], "B", ["X", "Y"]) == ["X", "Y", "B", "C"]

    def test_detach_to_root(self):
        assert rebase_chain(["A", "B", "C"], "B", []) == ["B", "C"]

    def test_none_new_chain(self):
        assert rebase_chain(["A", "B"], "B", None) == ["B"]


class TestParentOrNone:
    @pytest.mark.parametrize("value", [None, ""])
    def test_root_markers(self, value):
        assert parent_or_none(value) is None

    @pytest.mark.parametrize("value", [0, 1, "A", False])
    def test_other_values_are_ids(self, value):
        assert parent_or_none(value) == value
