"""Command-line driver: load a workbook into SQLite and optionally query it.

Usage:
    sheetdb Book1.xlsx --date "Date=%m/%d/%y" --float "Hours worked" \\
        --query 'SELECT "Employee", SUM("Hours worked") FROM data GROUP BY 1'
    sheetdb Book1.xlsx --db book.sqlite --infer
"""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from sheetdb.backends.sqlite import MEMORY, Destination
from sheetdb.config import SheetDBConfig
from sheetdb.converters import date_column, float_column, number_column
from sheetdb.errors import SheetDBError
from sheetdb.loader import TableLoader
from sheetdb.models import Column
from sheetdb.query import format_frame, read_query
from sheetdb.schema import quote_identifier


def _date_override(value: str) -> Column:
    name, sep, fmt = value.rpartition("=")
    if not sep or not name or not fmt:
        raise argparse.ArgumentTypeError(
            f"expected COLUMN=FORMAT, got {value!r}"
        )
    return date_column(name, fmt)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheetdb",
        description="Load the first sheet of an .xlsx workbook into an SQLite table.",
    )
    parser.add_argument("workbook", help="Path to the .xlsx workbook")
    parser.add_argument(
        "--db",
        default=MEMORY,
        help="SQLite database file (default: in-memory)",
    )
    parser.add_argument(
        "--table",
        default=None,
        help="Destination table name (default: from config, 'data')",
    )
    parser.add_argument(
        "--date",
        action="append",
        default=[],
        type=_date_override,
        metavar="COLUMN=FORMAT",
        help="Parse COLUMN as a date using a strptime FORMAT (repeatable)",
    )
    parser.add_argument(
        "--float",
        action="append",
        default=[],
        metavar="COLUMN",
        help="Parse COLUMN as a floating-point number (repeatable)",
    )
    parser.add_argument(
        "--number",
        action="append",
        default=[],
        metavar="COLUMN",
        help="Parse COLUMN as an integer number (repeatable)",
    )
    parser.add_argument(
        "--infer",
        action="store_true",
        help="Guess column formats from the first data row",
    )
    parser.add_argument("--config", help="YAML or JSON config file")
    parser.add_argument("--query", help="SQL query to run after loading")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        config = SheetDBConfig.from_file(args.config) if args.config else SheetDBConfig()
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"error: cannot load config {args.config}: {exc}", file=sys.stderr)
        return 1
    updates: dict[str, object] = {}
    if args.table:
        updates["table_name"] = args.table
    if args.infer:
        updates["infer_formats"] = True
    if updates:
        config = config.model_copy(update=updates)

    overrides = [
        *args.date,
        *(float_column(name) for name in args.float),
        *(number_column(name) for name in args.number),
    ]

    try:
        store = TableLoader(config).load(
            args.workbook, Destination.parse(args.db), *overrides
        )
    except SheetDBError as exc:
        print(f"error: [{exc.code.value}] {exc.message}", file=sys.stderr)
        return 1

    with store:
        count = store.query(f"SELECT COUNT(*) FROM {quote_identifier(config.table_name)}")[0][0]
        print(f"Loaded {count} rows into table '{config.table_name}'.")
        if args.query:
            try:
                print(format_frame(read_query(store, args.query)))
            except SheetDBError as exc:
                print(f"error: [{exc.code.value}] {exc.message}", file=sys.stderr)
                return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
