"""
Pytest configuration and fixtures for Arbor tests.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"

LARGE_ROW_COUNT = 12_000


def make_large_csv(rows: int = LARGE_ROW_COUNT) -> str:
    """Generate a well-formed CSV with columns out of level order.

    Every fifth row stops at level_1 and every other remaining row
    stops at level_2, so sparse trailing levels are well represented.
    """
    lines = ["level_2, item_id ,level_3,level_1"]
    for i in range(rows):
        level_1 = f"Dept {i % 7}"
        level_2 = f"Aisle {i % 11}" if i % 5 else ""
        level_3 = f"Shelf {i % 3}" if level_2 and i % 2 else ""
        lines.append(f"{level_2},sku-{i},{level_3},{level_1}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def data_dir() -> Path:
    """Directory holding CSV and JSON fixture files."""
    return DATA_DIR


@pytest.fixture
def small_csv() -> str:
    """Small well-formed input covering one to three levels."""
    return (DATA_DIR / "small_input.csv").read_text(encoding="utf-8")


@pytest.fixture
def small_expected() -> dict:
    """Expected tree for small_input.csv."""
    return json.loads((DATA_DIR / "small_output.json").read_text(encoding="utf-8"))


@pytest.fixture(scope="session")
def large_csv() -> str:
    """Large well-formed input (12,000 data rows)."""
    return make_large_csv()


@pytest.fixture
def stream():
    """Factory that wraps CSV text in a fresh text stream."""

    def _make(text: str) -> io.StringIO:
        return io.StringIO(text)

    return _make
