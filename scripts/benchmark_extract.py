"""Compare sequential and concurrent extraction timings.

Run: python scripts/benchmark_extract.py [--rows 100000] [--iterations 3]

Times HierarchyExtractor.extract_sequential against extract_concurrent on
the small fixture and on a generated large input, for several worker and
pending-line limits.
"""

from __future__ import annotations

import argparse
import io
import statistics
import sys
import time
from collections.abc import Callable
from pathlib import Path

from arbor.hierarchy import HierarchyExtractor

_HEADER = "=" * 60
_SMALL_FIXTURE = Path(__file__).resolve().parent.parent / "tests" / "data" / "small_input.csv"

# (max_workers, max_pending)
DEFAULT_LIMITS = ((1, 64), (4, 1024), (8, 4096))


def generate_csv(rows: int) -> str:
    """Build a well-formed CSV with one to three populated levels per row."""
    lines = ["item_id,level_1,level_2,level_3"]
    for i in range(rows):
        level_2 = f"Aisle {i % 23}" if i % 4 else ""
        level_3 = f"Shelf {i % 5}" if level_2 and i % 3 else ""
        lines.append(f"sku-{i},Dept {i % 9},{level_2},{level_3}")
    return "\n".join(lines) + "\n"


def _time_once(run: Callable[[HierarchyExtractor], list], text: str, **limits: int) -> float:
    extractor = HierarchyExtractor(io.StringIO(text), **limits)
    start = time.perf_counter()
    run(extractor)
    return time.perf_counter() - start


def benchmark_input(name: str, text: str, iterations: int, limits) -> None:
    """Print sequential and concurrent timings for one input."""
    rows = text.count("\n") - 1
    print(f"\n--- {name} ({rows} rows) ---")

    sequential = statistics.mean(
        _time_once(HierarchyExtractor.extract_sequential, text) for _ in range(iterations)
    )
    print(f"  sequential                     {sequential:.4f}s")

    for max_workers, max_pending in limits:
        concurrent = statistics.mean(
            _time_once(
                HierarchyExtractor.extract_concurrent,
                text,
                max_workers=max_workers,
                max_pending=max_pending,
            )
            for _ in range(iterations)
        )
        ratio = sequential / concurrent if concurrent else float("inf")
        print(
            f"  concurrent workers={max_workers:<2} pending={max_pending:<5}"
            f" {concurrent:.4f}s  ({ratio:.2f}x)"
        )


def _parse_limits(values: list[str] | None):
    if not values:
        return DEFAULT_LIMITS
    limits = []
    for value in values:
        workers, _, pending = value.partition(":")
        limits.append((int(workers), int(pending or workers)))
    return tuple(limits)


def main(argv: list[str] | None = None) -> int:
    """Run the benchmark.

    Returns:
        Exit code (0 for success, 1 for bad arguments or input).
    """
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--small", type=Path, default=_SMALL_FIXTURE, help="small CSV input")
    parser.add_argument("--rows", type=int, default=100_000, help="rows in the large input")
    parser.add_argument("--iterations", type=int, default=3)
    parser.add_argument(
        "--limits",
        nargs="*",
        metavar="WORKERS:PENDING",
        help="concurrent limits to try (default: 1:64 4:1024 8:4096)",
    )
    args = parser.parse_args(argv)

    try:
        limits = _parse_limits(args.limits)
    except ValueError:
        print("ERROR: limits must look like WORKERS:PENDING", file=sys.stderr)
        return 1
    if args.iterations < 1 or args.rows < 1:
        print("ERROR: --rows and --iterations must be at least 1", file=sys.stderr)
        return 1
    if not args.small.is_file():
        print(f"ERROR: small input not found: {args.small}", file=sys.stderr)
        return 1

    print(_HEADER)
    print("  EXTRACTION BENCHMARK: sequential vs concurrent")
    print(f"  Iterations: {args.iterations}")
    print(_HEADER)

    benchmark_input("small", args.small.read_text(encoding="utf-8-sig"), args.iterations, limits)
    benchmark_input("large", generate_csv(args.rows), args.iterations, limits)
    return 0


if __name__ == "__main__":
    sys.exit(main())
