"""Command that loads the configuration and prepares the database."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from patientrecords.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from patientrecords.database import DatabaseError, load_database

_OPEN_CONNECTIONS = 1


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patientrecords",
        description="Load the clinic configuration and prepare its database.",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the configuration file",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Print the configuration summary and connect to the database."""
    args = _parser().parse_args(argv)
    if not args.config:
        print(
            "Configuration file path is not set. Use the --config flag.",
            file=sys.stderr,
        )
        return 1
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(f"Environment: {config.env}")
    print(f"Description: {config.description}")
    print(f"HTTP Server Host: http://{config.http_server.host}")

    try:
        database = load_database(config.database)
    except DatabaseError as exc:
        print(f"Failed to connect to the database: {exc}")
        return 0
    with database:
        print(f"Database connection established successfully. {_OPEN_CONNECTIONS}")
    return 0


if __name__ == "__main__":
    sys.exit(main())