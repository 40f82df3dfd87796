"""Command-line interface for basebridge."""

import argparse
import json
import logging
import sys
from pathlib import Path

import uvicorn

from .config import settings


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="basebridge - translate note-database formulas into base-file formulas"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help=f"Logging level (default: {settings.log_level})"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Check command
    check_parser = subparsers.add_parser("check", help="Check whether a formula can be translated")
    check_parser.add_argument("expression", help="Source formula expression")

    # Translate command
    translate_parser = subparsers.add_parser("translate", help="Translate a formula")
    translate_parser.add_argument("expression", help="Source formula expression")
    translate_parser.add_argument(
        "--schema", type=Path, help="JSON file with the database property schema"
    )

    # Rollup command
    rollup_parser = subparsers.add_parser("rollup", help="Compile a rollup into a formula")
    rollup_parser.add_argument("function", help="Rollup function, e.g. count or earliest_date")
    rollup_parser.add_argument("relation", help="Relation property name")
    rollup_parser.add_argument("target", nargs="?", help="Property read from related records")

    # Map command
    map_parser = subparsers.add_parser("map", help="Map a database property schema")
    map_parser.add_argument("schema", type=Path, help="JSON file with the database property schema")
    map_parser.add_argument(
        "--strategy",
        choices=["static", "hybrid", "original", "omit"],
        default=settings.formula_strategy,
        help=f"Fallback for untranslatable formulas (default: {settings.formula_strategy})",
    )

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "check":
        sys.exit(run_check(args.expression))
    elif args.command == "translate":
        sys.exit(run_translate(args.expression, args.schema))
    elif args.command == "rollup":
        sys.exit(run_rollup(args.function, args.relation, args.target))
    elif args.command == "map":
        sys.exit(run_map(args.schema, args.strategy))
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()
        sys.exit(1)


def _load_schema(path: Path) -> dict:
    """Load a property schema, accepting either the bare mapping or a database object."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return data.get("properties", data)


def _print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run_check(expression: str) -> int:
    """Report whether a formula can be translated."""
    from .formulas import find_blocking_function

    blocking = find_blocking_function(expression)
    convertible = bool(expression.strip()) and blocking is None
    _print_json({"expression": expression, "convertible": convertible, "blocking_function": blocking})
    return 0 if convertible else 1


def run_translate(expression: str, schema_path: Path = None) -> int:
    """Translate a formula and print the result."""
    from .formulas import translate_formula

    properties = _load_schema(schema_path) if schema_path else None
    result = translate_formula(expression, properties)
    _print_json(result.model_dump())
    return 0 if result.success else 1


def run_rollup(function: str, relation: str, target: str = None) -> int:
    """Compile a rollup and print the formula."""
    from .formulas import compile_rollup

    formula = compile_rollup(function, relation, target)
    if formula is None:
        print(f"Rollup function {function!r} cannot be converted", file=sys.stderr)
        return 1
    print(formula)
    return 0


def run_map(schema_path: Path, strategy: str) -> int:
    """Map a property schema and print the base-file entries."""
    from .properties import map_database_properties

    mapping = map_database_properties(_load_schema(schema_path), strategy)
    _print_json(mapping.model_dump())
    return 0


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "basebridge.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    main()
