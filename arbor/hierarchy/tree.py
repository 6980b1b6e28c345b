"""
Hierarchy tree data structures.

The trie that groups extracted records by shared category prefixes, and the
builder that folds a collection of records into it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from arbor.hierarchy.errors import EmptyInputError, RecordError


@dataclass
class TreeNode:
    """
    A node in the category hierarchy.

    A node is a category (branch), an item (leaf), or both when one record
    ends where another continues. Children are keyed by label, so records
    sharing a prefix share the same intermediate nodes.
    """

    item: bool = False
    children: dict[str, TreeNode] = field(default_factory=dict)

    def child(self, label: str) -> TreeNode:
        """Return the child for *label*, creating an empty branch if needed."""
        node = self.children.get(label)
        if node is None:
            node = TreeNode()
            self.children[label] = node
        return node

    def insert(self, path: Sequence[str]) -> TreeNode:
        """Walk *path* from this node, creating nodes on demand, and mark the end as an item."""
        current = self
        for label in path:
            current = current.child(label)
        current.item = True
        return current

    @property
    def is_leaf(self) -> bool:
        """Check if this node has no children."""
        return not self.children

    @property
    def item_count(self) -> int:
        """Count item nodes in this subtree, including this node."""
        count = 1 if self.item else 0
        for child in self.children.values():
            count += child.item_count
        return count

    @property
    def depth(self) -> int:
        """Length of the longest path below this node (a leaf has depth 0)."""
        if self.is_leaf:
            return 0
        return 1 + max(child.depth for child in self.children.values())

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a JSON-ready dictionary.

        ``item`` is omitted when false and ``children`` when empty, so a leaf
        item serializes as ``{"item": true}`` and the root as
        ``{"children": {...}}``.
        """
        result: dict[str, Any] = {}
        if self.item:
            result["item"] = True
        if self.children:
            result["children"] = {
                label: child.to_dict() for label, child in self.children.items()
            }
        return result

    def __repr__(self) -> str:
        return f"<TreeNode item={self.item} children={len(self.children)}>"


def build_tree(records: Iterable[Sequence[str]]) -> TreeNode:
    """Fold extracted records into a single rooted tree.

    Each record is a label path ending in an item identifier. The result
    does not depend on record order.

    Args:
        records: Label paths, e.g. ``[("A", "x1"), ("A", "B", "x2")]``.

    Returns:
        The root node. The root itself is never an item.

    Raises:
        EmptyInputError: If *records* is empty.
        RecordError: If any record is empty.
    """
    root = TreeNode()
    count = 0
    for record in records:
        if not record:
            raise RecordError("Cannot place an empty record in the tree")
        root.insert(record)
        count += 1

    if count == 0:
        raise EmptyInputError("No records to build a tree from")

    return root
