"""
Hierarchy module - core of Arbor.

Resolves CSV headers, extracts per-row label paths, and folds them into a
category tree.
"""

from arbor.hierarchy.columns import ALLOWED_COLUMNS, ColumnSchema, resolve_columns
from arbor.hierarchy.errors import (
    EmptyInputError,
    HierarchyError,
    RecordError,
    SchemaError,
    StreamConsumedError,
    StreamError,
)
from arbor.hierarchy.extraction import ExtractionStrategy, HierarchyExtractor
from arbor.hierarchy.pipeline import build_hierarchy
from arbor.hierarchy.records import ExtractedRecord, extract_record
from arbor.hierarchy.tree import TreeNode, build_tree

__all__ = [
    "ALLOWED_COLUMNS",
    "ColumnSchema",
    "resolve_columns",
    "ExtractedRecord",
    "extract_record",
    "ExtractionStrategy",
    "HierarchyExtractor",
    "TreeNode",
    "build_tree",
    "build_hierarchy",
    "HierarchyError",
    "SchemaError",
    "RecordError",
    "StreamError",
    "StreamConsumedError",
    "EmptyInputError",
]
