"""
Column vocabulary and header resolution.

A header is a single comma-separated line naming which of the fixed columns
are present and where. Resolution turns it into an immutable name -> position
mapping that the record extractor uses for every subsequent row.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from arbor.hierarchy.errors import SchemaError

ITEM_ID = "item_id"
LEVEL_1 = "level_1"
LEVEL_2 = "level_2"
LEVEL_3 = "level_3"

MAX_LEVELS = 3

ALLOWED_COLUMNS: frozenset[str] = frozenset({ITEM_ID, LEVEL_1, LEVEL_2, LEVEL_3})
REQUIRED_COLUMNS: tuple[str, ...] = (LEVEL_1, ITEM_ID)

ColumnSchema = Mapping[str, int]


def level_name(position: int) -> str:
    """Return the column name for a 1-based level position."""
    return f"level_{position}"


def iter_levels(count: int) -> Iterator[str]:
    """
    Yield level column names for positions 1..count.

    Example: iter_levels(3) -> "level_1", "level_2", "level_3"
    """
    for position in range(1, count + 1):
        yield level_name(position)


def resolve_columns(header: str | None) -> ColumnSchema:
    """Resolve a header line into a column schema.

    Tokens are split on commas and stripped of surrounding whitespace
    (including the trailing newline of a line read from a stream).

    Args:
        header: The first line of the input.

    Returns:
        Read-only mapping of column name to zero-based position.

    Raises:
        SchemaError: If the header is empty, has fewer than two columns,
            names a column outside the vocabulary, repeats a column, or
            lacks ``level_1`` or ``item_id``.
    """
    if not header:
        raise SchemaError("Header row is missing")

    tokens = header.split(",")
    if len(tokens) < 2:
        raise SchemaError(
            "Header must declare at least two columns",
            details=header.strip(),
        )

    columns: dict[str, int] = {}
    for position, token in enumerate(tokens):
        name = token.strip()
        if name not in ALLOWED_COLUMNS:
            raise SchemaError(
                f"Unknown column: {name!r}",
                details=f"Allowed columns: {', '.join(sorted(ALLOWED_COLUMNS))}",
            )
        columns[name] = position

    for required in REQUIRED_COLUMNS:
        if required not in columns:
            raise SchemaError(f"Missing required column: {required}")

    if len(columns) != len(tokens):
        raise SchemaError("Header contains duplicate columns", details=header.strip())

    return MappingProxyType(columns)
