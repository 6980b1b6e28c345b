"""
Per-row record extraction.

Turns one data line into the ordered label path used to place an item in
the hierarchy: populated levels shallowest first, then the item identifier.
"""

from __future__ import annotations

from arbor.hierarchy.columns import ITEM_ID, MAX_LEVELS, ColumnSchema, iter_levels
from arbor.hierarchy.errors import RecordError

ExtractedRecord = tuple[str, ...]


def _field(columns: ColumnSchema, name: str, fields: list[str], line: str) -> str:
    """Return the stripped value of column *name*, or raise if the schema lacks it."""
    position = columns.get(name)
    if position is None:
        raise RecordError(f"Schema has no {name} column", line=line)
    return fields[position].strip()


def extract_record(columns: ColumnSchema, line: str) -> ExtractedRecord:
    """Extract the label path for a single data line.

    Levels are visited in numeric order (level_1, level_2, ...) whatever
    their physical position in the line. Empty trailing levels are skipped,
    but a populated level may not follow an empty one.

    Args:
        columns: Resolved column schema.
        line: Raw data line, trailing newline allowed.

    Returns:
        Tuple of level labels followed by the item identifier, e.g.
        ``("Fruit", "Citrus", "sku-1")``.

    Raises:
        RecordError: On field count mismatch, empty identifier, a gap in
            the populated levels, or no populated level at all.
    """
    fields = line.split(",")
    if len(fields) != len(columns):
        raise RecordError(
            f"Expected {len(columns)} fields, found {len(fields)}",
            line=line,
        )

    item = _field(columns, ITEM_ID, fields, line)
    if not item:
        raise RecordError("Item identifier is empty", line=line)

    labels: list[str] = []
    previous = ITEM_ID  # any non-empty seed
    for name in iter_levels(min(len(columns) - 1, MAX_LEVELS)):
        value = _field(columns, name, fields, line)
        if value and not previous:
            raise RecordError(f"{name} is populated after an empty level", line=line)
        previous = value
        if value:
            labels.append(value)

    if not labels:
        raise RecordError("Record has no populated level", line=line)

    labels.append(item)
    return tuple(labels)
