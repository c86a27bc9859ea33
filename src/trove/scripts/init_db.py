"""Create (or reset) the document table of the configured SQL store."""
from __future__ import annotations

import argparse
import asyncio
import sys

from trove.core.settings import settings
from trove.db.session import build_engine, create_tables, drop_tables


async def init_db(database_url: str, *, reset: bool = False) -> None:
    """Create all tables, dropping them first when `reset` is set."""
    engine = build_engine(database_url)
    try:
        if reset:
            await drop_tables(engine)
            print("[init_db] dropped all tables")
        await create_tables(engine)
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the Trove document table")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables (and every stored document) first.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to DATABASE_URL)",
    )
    args = parser.parse_args()

    database_url = args.url or settings.database_url
    try:
        asyncio.run(init_db(database_url, reset=args.reset))
    except Exception as exc:
        print(f"[init_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    print("Database initialized.")


if __name__ == "__main__":
    main()
