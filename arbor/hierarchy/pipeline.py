"""
One-call pipeline: header, extraction and tree construction.
"""

from __future__ import annotations

from typing import TextIO

from arbor.hierarchy.extraction import (
    DEFAULT_MAX_PENDING,
    DEFAULT_MAX_WORKERS,
    ExtractionStrategy,
    HierarchyExtractor,
)
from arbor.hierarchy.tree import TreeNode, build_tree


def build_hierarchy(
    stream: TextIO,
    strategy: ExtractionStrategy | str = ExtractionStrategy.SEQUENTIAL,
    max_workers: int = DEFAULT_MAX_WORKERS,
    max_pending: int = DEFAULT_MAX_PENDING,
) -> TreeNode:
    """Build the hierarchy tree for a CSV text stream.

    Args:
        stream: Text stream positioned at the header line.
        strategy: Extraction strategy to use.
        max_workers: Worker threads for concurrent extraction.
        max_pending: Read-ahead cap for concurrent extraction.

    Returns:
        Root node of the tree.

    Raises:
        HierarchyError: Any schema, record, stream or empty-input failure.
    """
    extractor = HierarchyExtractor(stream, max_workers=max_workers, max_pending=max_pending)
    return build_tree(extractor.extract(strategy))
