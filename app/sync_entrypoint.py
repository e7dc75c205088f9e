"""Sync entrypoint - Standalone script for running migration syncs.

Usage:
    python -m app.sync_entrypoint                       # Automated run (needs a baseline)
    python -m app.sync_entrypoint baseline              # Operator run, seeds an empty store
    python -m app.sync_entrypoint import <address>      # Import one token as a draft
    python -m app.sync_entrypoint import <address> Raydium
"""

import asyncio
import sys

from app.core.db import SessionLocal
from app.core.errors import IngestionError
from app.core.logging import get_logger
from app.schemas.sync import SyncMode, SyncReport
from app.services.sync_service import MigrationSyncService
from app.services.upsert_gateway import UpsertOutcome

logger = get_logger("sync_entrypoint")


async def run_sync(mode: SyncMode) -> SyncReport:
    logger.info(f"Starting {mode} sync")
    with SessionLocal() as db:
        report = await MigrationSyncService(db).run(mode)
        logger.info(f"Sync completed: {report.model_dump(by_alias=True)}")
        return report


async def run_import(address: str, migration_dex: str | None) -> bool:
    logger.info(f"Importing {address}")
    with SessionLocal() as db:
        try:
            result = await MigrationSyncService(db).import_address(address, migration_dex)
        except IngestionError as exc:
            logger.error(f"Import failed: {exc}")
            return False
        if result.outcome is UpsertOutcome.ERROR:
            logger.error(f"Import failed: {result.error}")
            return False
        logger.info(f"Import {result.outcome.value}: {result.token.slug if result.token else address}")
        return True


def main():
    args = sys.argv[1:]
    command = args[0] if args else "auto"

    if command == "import":
        if len(args) < 2:
            logger.error("Usage: python -m app.sync_entrypoint import <address> [migration_dex]")
            sys.exit(1)
        ok = asyncio.run(run_import(args[1], args[2] if len(args) > 2 else None))
        sys.exit(0 if ok else 1)

    if command not in ("auto", "baseline"):
        logger.error(f"Invalid command: {command}. Must be one of: auto, baseline, import")
        sys.exit(1)

    report = asyncio.run(run_sync(command))  # type: ignore[arg-type]
    # Exit with error code when the upstream feed could not be read
    if not report.success:
        sys.exit(1)
    return report


if __name__ == "__main__":
    main()
