"""End-to-end integration tests for the Arbor pipeline.

Validates the full path from a CSV source to the JSON-ready tree for both
extraction strategies, using fixture files and generated large inputs.

Test classes:
    TestFilePipeline: CSV file -> HierarchyExtractor -> build_tree -> to_dict
    TestLargeInput: generated 12,000-row input through both strategies
    TestStrategyAgreement: failure behaviour matches across strategies
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from arbor.hierarchy import (
    ExtractionStrategy,
    HierarchyExtractor,
    RecordError,
    build_hierarchy,
    build_tree,
)

DATA_DIR = Path(__file__).parent.parent / "data"

STRATEGIES = list(ExtractionStrategy)


@pytest.mark.parametrize("strategy", STRATEGIES)
class TestFilePipeline:
    """Fixture files through the whole pipeline."""

    def test_small_input_matches_expected_tree(self, strategy):
        expected = json.loads((DATA_DIR / "small_output.json").read_text(encoding="utf-8"))
        with open(DATA_DIR / "small_input.csv", encoding="utf-8", newline="") as fh:
            records = HierarchyExtractor(fh).extract(strategy)
        assert build_tree(records).to_dict() == expected

    def test_invalid_gap_file_fails(self, strategy):
        with open(DATA_DIR / "invalid_gap.csv", encoding="utf-8", newline="") as fh:
            with pytest.raises(RecordError):
                build_hierarchy(fh, strategy=strategy)

    def test_serialized_output_round_trips(self, strategy):
        with open(DATA_DIR / "small_input.csv", encoding="utf-8", newline="") as fh:
            tree = build_hierarchy(fh, strategy=strategy)
        data = json.dumps(tree.to_dict())
        assert '"item": false' not in data
        assert '"children": {}' not in data


class TestLargeInput:
    """Generated large input through both strategies."""

    def test_trees_are_identical(self, large_csv):
        sequential = build_hierarchy(io.StringIO(large_csv), ExtractionStrategy.SEQUENTIAL)
        concurrent = build_hierarchy(
            io.StringIO(large_csv), ExtractionStrategy.CONCURRENT, max_workers=8
        )
        assert sequential == concurrent
        assert sequential.item_count == 12_000

    def test_tree_shape(self, large_csv):
        tree = build_hierarchy(io.StringIO(large_csv))
        assert set(tree.children) == {f"Dept {i}" for i in range(7)}
        assert tree.depth == 4
        assert tree.children["Dept 0"].children["sku-0"].item is True


class TestStrategyAgreement:
    """Both strategies reject the same inputs."""

    @pytest.mark.parametrize("position", [0, 6_000, 11_999])
    def test_single_bad_line_fails_both(self, large_csv, position):
        lines = large_csv.splitlines(keepends=True)
        lines.insert(position + 1, "Aisle 3,sku-bad,Shelf 1,\n")
        text = "".join(lines)
        for strategy in STRATEGIES:
            with pytest.raises(RecordError) as exc_info:
                build_hierarchy(io.StringIO(text), strategy)
            assert "sku-bad" in exc_info.value.line
