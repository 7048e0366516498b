"""Drop and recreate all database tables with optional local object-store cleanup."""

from __future__ import annotations

import argparse
import asyncio
import shutil
from pathlib import Path

from casevault.config import settings
from casevault.database import drop_db, init_db


def _purge_content_store() -> None:
    folder = Path(settings.content_store_path)
    if settings.azure_storage_connection_string:
        print("Azure storage is configured; leaving remote objects untouched.")
        return
    if folder.exists():
        shutil.rmtree(folder, ignore_errors=True)
        print(f"Purged local content store at {folder}.")
    else:
        print("No local content store found.")


async def _reset_db() -> None:
    print("Dropping all tables...")
    await drop_db()
    print("Creating all tables...")
    await init_db()
    print("Database reset complete.")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reset the local ledger/audit database and optionally purge stored objects.",
    )
    parser.add_argument(
        "--purge-content-store",
        action="store_true",
        help="Also remove local object versions; without it every stored object loses its provenance.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    if args.purge_content_store:
        _purge_content_store()
    asyncio.run(_reset_db())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
