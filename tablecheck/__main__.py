"""CLI entry point for checking a schema and its data files.

Usage:
    python -m tablecheck schema.yaml
    python -m tablecheck schema.json --data-dir ./exports
    python -m tablecheck ./exports/                  # uses ./exports/schema.csv
    python -m tablecheck schema.yaml --schema-only

Exit status is 0 with no output when everything passes. On the first
violation a single diagnostic line is written to stderr and the exit
status is 1. With -v, debug logs (including the structured error) are
written to stderr ahead of that line; the diagnostic is always last.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from tablecheck.lib.consistency import check_schema
from tablecheck.lib.control_file import CONTROL_FILE_NAME, load_control_file
from tablecheck.lib.env import load_env_file
from tablecheck.lib.errors import TableCheckError
from tablecheck.lib.logging import setup_logging
from tablecheck.lib.model import Schema
from tablecheck.lib.runner import check_directory
from tablecheck.lib.schema_loader import load_schema_document
from tablecheck.lib.settings import CheckSettings, load_settings

logger = logging.getLogger(__name__)

FORMATS = ("auto", "yaml", "json", "control")


def _single_character(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError("delimiter must be a single character")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tablecheck",
        description="Check a relational schema and the delimited files it describes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Check a YAML schema against files next to it
    python -m tablecheck schema.yaml

    # Data files live elsewhere
    python -m tablecheck schema.yaml --data-dir ./exports

    # Control-file schema (schema.csv) inside the data directory
    python -m tablecheck ./exports/

    # Check the schema only, without reading data
    python -m tablecheck schema.yaml --schema-only
        """,
    )
    parser.add_argument(
        "schema",
        help=f"Schema document (.yaml/.yml/.json), control file, or a directory containing {CONTROL_FILE_NAME}",
    )
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="auto",
        dest="schema_format",
        help="Schema format (default: detect from the path)",
    )
    parser.add_argument(
        "--data-dir",
        help="Directory holding one file per table",
    )
    parser.add_argument(
        "--schema-only",
        action="store_true",
        help="Check schema consistency without reading data",
    )
    parser.add_argument(
        "--extension",
        help="File extension appended to table names (default: .csv)",
    )
    parser.add_argument(
        "--delimiter",
        type=_single_character,
        help="Field delimiter (default: ,)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to a file in addition to stderr",
    )
    parser.add_argument(
        "--env-file",
        help="Load environment variables from this .env file first",
    )
    return parser


def resolve_format(schema_path: Path, schema_format: str) -> str:
    """Pick the schema front-end for ``schema_path``."""
    if schema_format != "auto":
        return schema_format
    if schema_path.is_dir() or schema_path.suffix.lower() == ".csv":
        return "control"
    if schema_path.suffix.lower() == ".json":
        return "json"
    return "yaml"


def load(
    schema_path: Path,
    schema_format: str,
    settings: CheckSettings,
) -> Tuple[Schema, Optional[Path]]:
    """Load the schema and any data directory it names."""
    if schema_format == "control":
        schema = load_control_file(
            schema_path,
            delimiter=settings.delimiter,
            encoding=settings.encoding,
        )
        return schema, None
    loaded = load_schema_document(schema_path, file_format=schema_format)
    return loaded.schema, loaded.data_dir


def resolve_data_dir(
    args: argparse.Namespace,
    schema_path: Path,
    document_data_dir: Optional[Path],
    settings: CheckSettings,
) -> Path:
    """--data-dir, then the document's data_dir, then settings, then the schema's directory."""
    if args.data_dir:
        return Path(args.data_dir)
    if document_data_dir is not None:
        return document_data_dir
    if settings.data_dir:
        return Path(settings.data_dir)
    return schema_path if schema_path.is_dir() else schema_path.parent


def run(args: argparse.Namespace, settings: CheckSettings) -> None:
    schema_path = Path(args.schema)
    schema_format = resolve_format(schema_path, args.schema_format)
    logger.debug("Loading %s schema from %s", schema_format, schema_path)

    schema, document_data_dir = load(schema_path, schema_format, settings)

    if args.schema_only:
        check_schema(schema)
        return

    data_dir = resolve_data_dir(args, schema_path, document_data_dir, settings)
    logger.debug("Reading table files from %s", data_dir)
    check_directory(
        schema,
        data_dir,
        extension=settings.extension,
        delimiter=settings.delimiter,
        encoding=settings.encoding,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    if args.env_file:
        load_env_file(args.env_file)

    try:
        settings = load_settings(
            extension=args.extension,
            delimiter=args.delimiter,
            log_file=args.log_file,
        )
        setup_logging(
            verbose=args.verbose,
            json_format=args.json_log or settings.log_format == "json",
            log_file=settings.log_file,
            level=settings.log_level,
        )
        run(args, settings)
    except TableCheckError as e:
        logger.debug("Check failed", extra={"error": e.to_dict()})
        print(str(e), file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
