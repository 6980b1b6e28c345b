"""Build a category tree from a CSV file and print it as JSON.

Run: python scripts/build_tree.py items.csv [--strategy concurrent] [-o tree.json]

The CSV must start with a header naming item_id, level_1 and optionally
level_2 and level_3.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from arbor.config import ArborSettings
from arbor.hierarchy import ExtractionStrategy, HierarchyError, build_hierarchy
from shared.hardening import ErrorFormatter, InputValidator, ValidationError

logger = logging.getLogger("arbor.scripts.build_tree")


def _parse_args(argv: list[str] | None, settings: ArborSettings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("source", help="CSV file to read")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in ExtractionStrategy],
        default=settings.default_strategy.value,
        help="extraction strategy (default: %(default)s)",
    )
    parser.add_argument("-o", "--output", help="write JSON here instead of stdout")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Build the tree for one CSV file.

    Returns:
        Exit code (0 for success, 1 for invalid input).
    """
    settings = ArborSettings.from_env()
    args = _parse_args(argv, settings)
    logging.basicConfig(
        level=settings.logging_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        source = InputValidator().validate_file_path(args.source, allowed_extensions=(".csv",))
    except ValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        with open(source, encoding="utf-8-sig", newline="") as fh:
            tree = build_hierarchy(
                fh,
                strategy=args.strategy,
                max_workers=settings.limits.max_concurrent_operations,
                max_pending=settings.limits.max_pending_lines,
            )
    except HierarchyError as exc:
        friendly = ErrorFormatter().format_hierarchy_error(exc)
        logger.debug("Build failed: %s", friendly.technical_detail)
        print(f"ERROR: {friendly.message} ({exc})", file=sys.stderr)
        print(f"  {friendly.suggestion}", file=sys.stderr)
        return 1

    data = json.dumps(tree.to_dict(), indent=args.indent, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(data + "\n", encoding="utf-8")
        logger.info("Wrote %d items to %s", tree.item_count, args.output)
    else:
        print(data)
    return 0


if __name__ == "__main__":
    sys.exit(main())
