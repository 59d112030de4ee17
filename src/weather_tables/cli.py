"""
Command-line interface for weather-tables.

Examples::

    weather-tables tables
    weather-tables describe hourly_forecast
    weather-tables query current_weather --lat 52.52 --lon 13.405
    weather-tables query daily_summary --lat 52.52 --lon 13.405 --summary-date 2024-01-15
    weather-tables ddl --server openweather_server --schema weather
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import Any

from weather_tables import __version__
from weather_tables.config import get_settings
from weather_tables.ddl import render_foreign_tables
from weather_tables.endpoints import ENDPOINTS, resolve
from weather_tables.errors import WeatherTableError
from weather_tables.logging_config import configure_logging
from weather_tables.parameters import equality_predicates
from weather_tables.rowsets import MultiRowSet, WeatherAlertsRowSet, rowset_type
from weather_tables.scan import ScanContext


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="weather-tables",
        description="Query the OpenWeather One Call 3.0 API as tables",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("tables", help="List available tables")

    describe_parser = subparsers.add_parser("describe", help="Show the columns of a table")
    describe_parser.add_argument("table", help="Table name")

    query_parser = subparsers.add_parser("query", help="Run one scan and print its rows")
    query_parser.add_argument("table", help="Table name")
    query_parser.add_argument("--lat", type=float, required=True, help="Latitude (-90..90)")
    query_parser.add_argument("--lon", type=float, required=True, help="Longitude (-180..180)")
    query_parser.add_argument("--units", default=None, help="standard, metric or imperial")
    query_parser.add_argument("--lang", default=None, help="Language code (default: en)")
    query_parser.add_argument(
        "--observation-time",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp for historical_weather (naive means UTC)",
    )
    query_parser.add_argument("--summary-date", default=None, help="YYYY-MM-DD for daily_summary")
    query_parser.add_argument("--timezone-offset", default=None, help="+HHMM for daily_summary")
    query_parser.add_argument(
        "--overview-date", default=None, help="YYYY-MM-DD for weather_overview"
    )
    query_parser.add_argument(
        "-c",
        "--column",
        action="append",
        dest="columns",
        default=None,
        help="Column to include (repeatable; default: all)",
    )
    query_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    ddl_parser = subparsers.add_parser("ddl", help="Print foreign table definitions")
    ddl_parser.add_argument("--server", required=True, help="Foreign server name")
    ddl_parser.add_argument("--schema", default=None, help="Target schema")
    ddl_parser.add_argument("tables", nargs="*", help="Tables to include (default: all)")

    subparsers.add_parser("info", help="Show application info")

    return parser


def _row_shape(table_name: str) -> str:
    row_type = rowset_type(resolve(table_name).kind)
    if row_type is WeatherAlertsRowSet:
        return "0..N rows"
    if issubclass(row_type, MultiRowSet):
        return "N rows"
    return "1 row"


def cmd_tables(_args: argparse.Namespace) -> int:
    """Handle the 'tables' command."""
    width = max(len(name) for name in ENDPOINTS)
    for name, descriptor in ENDPOINTS.items():
        print(f"{name:<{width}}  {descriptor.api_path:<22}  {_row_shape(name)}")
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    """Handle the 'describe' command."""
    descriptor = resolve(args.table)
    print(f"{descriptor.table_name}: {descriptor.description}")
    print(f"API path: {descriptor.api_path}")
    print(f"Required: {', '.join(sorted(descriptor.required_params))}")
    print(f"Optional: {', '.join(sorted(descriptor.optional_params))}")
    print()
    columns = rowset_type(descriptor.kind).COLUMNS
    width = max(len(c.name) for c in columns)
    for column in columns:
        null = "  (nullable)" if column.nullable else ""
        print(f"  {column.name:<{width}}  {column.sql_type}{null}")
    return 0


def _json_default(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


def cmd_query(args: argparse.Namespace) -> int:
    """Handle the 'query' command."""
    predicates = equality_predicates(
        {
            "latitude": args.lat,
            "longitude": args.lon,
            "units": args.units,
            "lang": args.lang,
            "observation_time": args.observation_time,
            "summary_date": args.summary_date,
            "timezone_offset": args.timezone_offset,
            "overview_date": args.overview_date,
        }
    )

    with ScanContext.from_settings(get_settings()) as ctx:
        ctx.begin(args.table, predicates, args.columns)
        header = list(ctx.columns)
        rows = list(ctx)

    if args.format == "json":
        records = [
            {name: cell.to_python() for name, cell in zip(header, row, strict=True)}
            for row in rows
        ]
        print(json.dumps(records, indent=2, default=_json_default))
        return 0

    print("\t".join(header))
    for row in rows:
        print("\t".join(str(cell) for cell in row))
    print(f"({len(rows)} row{'s' if len(rows) != 1 else ''})", file=sys.stderr)
    return 0


def cmd_ddl(args: argparse.Namespace) -> int:
    """Handle the 'ddl' command."""
    statements = render_foreign_tables(args.server, args.schema, args.tables or None)
    print("\n\n".join(f"{statement};" for statement in statements))
    return 0


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"API URL: {settings.api_url}")
    print(f"API key: {'set' if settings.has_api_key else 'not set'}")
    print(f"Missing values: {settings.missing_value_policy}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.debug:
        configure_logging(logging.DEBUG)
    else:
        configure_logging(get_settings().log_level)

    commands = {
        "tables": cmd_tables,
        "describe": cmd_describe,
        "query": cmd_query,
        "ddl": cmd_ddl,
        "info": cmd_info,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except WeatherTableError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
