from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence

from orchestra.db.bootstrap import initialize_database


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orchestra-db",
        description="Orchestra task database management commands.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Create the database directory and any missing tables.",
    )
    init_parser.add_argument("--database-url", default=None)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        asyncio.run(initialize_database(database_url=args.database_url))
        print("Database initialized.")
        return 0

    parser.error(f"Unsupported command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
