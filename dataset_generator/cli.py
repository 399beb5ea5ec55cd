"""Command line entrypoint: generate dataset files from a DataSpec JSON file."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any

from dataset_generator.schemas.generation import MAX_YEAR
from dataset_generator.schemas.generation import MIN_YEAR
from dataset_generator.schemas.generation import GeneratedData
from dataset_generator.services.export import to_csv
from dataset_generator.services.export import to_sql
from dataset_generator.synthetic.factory import DataFactory
from dataset_generator.synthetic.validator import SpecValidationError

DEFAULT_OUTPUT_DIR = Path("generated")
DEFAULT_ROW_COUNT = 1000


def _read_spec(path: Path) -> Any:
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def _year(raw: str) -> str:
    if len(raw) != 4 or not raw.isdigit() or not MIN_YEAR <= int(raw) <= MAX_YEAR:
        raise argparse.ArgumentTypeError(f"expected a four-digit year between 0001 and {MAX_YEAR}, got {raw!r}")
    return raw


def write_tables(data: GeneratedData, output_dir: Path, *, export_format: str = "csv") -> list[Path]:
    """Write one file per table and return the written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for table in data.tables:
        path = output_dir / f"{table.name}.{export_format}"
        body = to_sql(table.rows, table.name) if export_format == "sql" else to_csv(table.rows)
        path.write_text(body, encoding="utf-8")
        written.append(path)
    return written


def _cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a synthetic dataset from a DataSpec JSON file.")
    parser.add_argument("spec", type=Path, help="Path to the DataSpec JSON document")
    parser.add_argument("--rows", type=int, default=DEFAULT_ROW_COUNT, help="Maximum number of event rows")
    parser.add_argument("--time-range", nargs="*", type=_year, default=[], help="Years to simulate, e.g. 2023 2024")
    parser.add_argument("--business-type", default="", help="Business type used to pick vertical rules")
    parser.add_argument("--schema-type", choices=["OBT", "Star Schema"], default="OBT")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--format", dest="export_format", choices=["csv", "sql"], default="csv")
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.rows < 1:
        parser.error("--rows must be >= 1")

    try:
        factory = DataFactory(_read_spec(args.spec), business_type=args.business_type, seed=args.seed)
    except (OSError, json.JSONDecodeError, SpecValidationError) as exc:
        print(f"invalid spec: {exc}", file=sys.stderr)
        return 2

    data = factory.generate(args.rows, args.time_range, args.schema_type)
    quality = factory.quality_report()
    written = write_tables(data, args.output_dir, export_format=args.export_format)

    print(f"seed: {factory.seed}")
    print(f"files written: {', '.join(str(path) for path in written) if written else '-'}")
    print(f"quality score: {quality.quality_score}")
    for issue in quality.issues:
        print(f"issue: {issue}")
    for warning in quality.warnings:
        print(f"warning: {warning}")

    return 0


def main() -> None:
    """CLI entrypoint."""
    raise SystemExit(_cli())


if __name__ == "__main__":
    main()
