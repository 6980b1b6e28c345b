"""Tests for TreeNode and build_tree."""

from __future__ import annotations

import json
from itertools import permutations

import pytest

from arbor.hierarchy.errors import EmptyInputError, RecordError
from arbor.hierarchy.tree import TreeNode, build_tree


# ===================================================================
# TreeNode
# ===================================================================


class TestTreeNode:
    """Tests for the TreeNode data structure."""

    def test_new_node_is_empty_branch(self):
        node = TreeNode()
        assert node.item is False
        assert node.children == {}
        assert node.is_leaf

    def test_child_creates_once(self):
        root = TreeNode()
        first = root.child("A")
        assert root.child("A") is first
        assert list(root.children) == ["A"]

    def test_insert_marks_last_node(self):
        root = TreeNode()
        end = root.insert(("A", "B", "x1"))
        assert end.item is True
        assert root.children["A"].item is False
        assert root.children["A"].children["B"].item is False

    def test_node_can_be_item_and_branch(self):
        root = TreeNode()
        root.insert(("A", "x1"))
        root.insert(("A", "x1", "x2"))
        node = root.children["A"].children["x1"]
        assert node.item is True
        assert "x2" in node.children

    def test_item_count_and_depth(self):
        root = build_tree([("A", "B", "1"), ("A", "2"), ("C", "3")])
        assert root.item_count == 3
        assert root.depth == 3
        assert root.children["C"].depth == 1

    def test_to_dict_omits_false_item_and_empty_children(self):
        root = build_tree([("category 1", "item 1")])
        assert root.to_dict() == {
            "children": {"category 1": {"children": {"item 1": {"item": True}}}}
        }

    def test_to_dict_is_json_serializable(self):
        root = build_tree([("category 1", "category 2", "item 1"), ("category 4", "item 3")])
        data = json.loads(json.dumps(root.to_dict()))
        assert data["children"]["category 4"] == {"children": {"item 3": {"item": True}}}

    def test_repr(self):
        assert repr(TreeNode(item=True)) == "<TreeNode item=True children=0>"


# ===================================================================
# build_tree
# ===================================================================


class TestBuildTree:
    """Tests for folding records into a tree."""

    def test_shared_prefix_is_merged(self):
        root = build_tree([("A", "x1"), ("A", "x2")])
        a = root.children["A"]
        assert set(a.children) == {"x1", "x2"}
        for label in ("x1", "x2"):
            assert a.children[label].item is True
            assert a.children[label].children == {}

    def test_order_does_not_matter(self):
        records = [("A", "x1"), ("A", "B", "x2"), ("C", "x3"), ("A", "x1")]
        trees = [build_tree(list(order)) for order in permutations(records)]
        assert all(tree == trees[0] for tree in trees)

    def test_root_is_never_an_item(self):
        root = build_tree([("A", "1")])
        assert root.item is False

    def test_same_item_under_different_branches(self):
        root = build_tree(
            [("category 1", "category 2", "item 1"), ("category 1", "category 3", "item 1")]
        )
        c1 = root.children["category 1"]
        assert c1.children["category 2"].children["item 1"].item
        assert c1.children["category 3"].children["item 1"].item

    def test_duplicate_records_are_idempotent(self):
        assert build_tree([("A", "1"), ("A", "1")]) == build_tree([("A", "1")])

    def test_accepts_generator(self):
        root = build_tree(record for record in [("A", "1")])
        assert root.item_count == 1

    def test_empty_input(self):
        with pytest.raises(EmptyInputError):
            build_tree([])

    def test_empty_record(self):
        with pytest.raises(RecordError, match="empty record"):
            build_tree([("A", "1"), ()])
