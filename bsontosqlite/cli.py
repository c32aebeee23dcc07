"""Command line entry point: convert a mongodump collection into SQLite.

    bsontosqlite -b dump/mydb/users.bson -m dump/mydb/users.metadata.json -o users.db -v
    bsontosqlite version

"""
import argparse
import sys

from . import __version__, logger
from .config import DEFAULT_OUTPUT, JSON_MODES, ConvertConfig
from .convert import run_convert
from .errors import BsonToSqliteError
from .log import level_for_verbosity, setup_logger


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="bsontosqlite",
        description="Convert a MongoDB BSON dump with its metadata.json into a SQLite database",
    )
    ap.add_argument("--bson", "-b", default=None, help="Path to BSON file (required)")
    ap.add_argument("--metadata", "-m", default=None, help="Path to metadata.json file (required)")
    ap.add_argument(
        "--output", "-o", default=DEFAULT_OUTPUT, help="Output SQLite database file"
    )
    ap.add_argument(
        "--json-mode",
        default="relaxed",
        choices=JSON_MODES,
        help="Extended JSON flavour used for the stored documents",
    )
    ap.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Verbose output (-v for info, -vv for debug)",
    )

    sub = ap.add_subparsers(dest="command")
    sub.add_parser("version", help="Print the version number")
    return ap


def main(argv=None) -> None:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.command == "version":
        print(f"bsontosqlite version {__version__}")
        return

    missing = [flag for flag, value in (("--bson", args.bson), ("--metadata", args.metadata))
               if not value]
    if missing:
        ap.error(f"the following arguments are required: {', '.join(missing)}")

    config = ConvertConfig.from_args(args)
    setup_logger(level_for_verbosity(config.verbose))

    try:
        run_convert(config)
    except BsonToSqliteError as e:
        logger.error(f"Conversion failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
