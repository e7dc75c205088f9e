"""Incremental, watermark-based sync of graduated pump.fun tokens."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Collection, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    IngestionError,
    MetadataNotFound,
    MissingAddress,
    UpstreamUnavailable,
    ValidationFailure,
)
from app.core.logging import get_logger
from app.ingestion.base import BaseFeedClient, RawRecord
from app.ingestion.normalizer import TokenRecordNormalizer, as_utc, best_timestamp, resolve_address
from app.ingestion.pumpfun_source import PumpFunClient
from app.models.runs import SyncRun
from app.models.token import Token
from app.schemas.sync import SyncMode, SyncReport
from app.services.upsert_gateway import TokenUpsertGateway, UpsertOutcome, UpsertResult

log = get_logger("sync_service")

NO_BASELINE_MESSAGE = (
    "No previous migrations found. Run a baseline sync from the admin dashboard to import "
    "the most recent graduated token. After that, new migrations will be imported automatically."
)


def read_watermark(db: Session, exclude_addresses: Collection[str] = ()) -> Optional[datetime]:
    """Latest migration date among migrated pump.fun tokens, or None before any baseline."""
    stmt = select(func.max(Token.migration_date)).where(Token.migrated.is_(True), Token.is_pump_fun.is_(True))
    if exclude_addresses:
        stmt = stmt.where(Token.contract_address.notin_(list(exclude_addresses)))
    value = db.execute(stmt).scalar()
    return as_utc(value) if value else None


class MigrationSyncService:
    """Imports graduated tokens that are newer than what the store already holds.

    The watermark is re-derived from the ``tokens`` table on every run, so the
    service keeps no state between invocations and overlapping runs are
    arbitrated by the table's unique constraints.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[BaseFeedClient] = None,
        normalizer: Optional[TokenRecordNormalizer] = None,
        gateway: Optional[TokenUpsertGateway] = None,
        *,
        buffer_seconds: Optional[int] = None,
        max_batch: Optional[int] = None,
        baseline_size: Optional[int] = None,
        record_delay: Optional[float] = None,
        migration_dex: Optional[str] = None,
    ):
        self.db = db
        self.client = client or PumpFunClient()
        self.normalizer = normalizer or TokenRecordNormalizer()
        self.gateway = gateway or TokenUpsertGateway(db)
        self.buffer = timedelta(seconds=settings.SYNC_BUFFER_SECONDS if buffer_seconds is None else buffer_seconds)
        self.max_batch = settings.SYNC_MAX_BATCH if max_batch is None else max_batch
        self.baseline_size = settings.SYNC_BASELINE_SIZE if baseline_size is None else baseline_size
        self.record_delay = settings.SYNC_RECORD_DELAY_SECONDS if record_delay is None else record_delay
        self.migration_dex = migration_dex or settings.DEFAULT_MIGRATION_DEX

    @property
    def chain(self) -> str:
        return self.normalizer.chain

    async def run(self, mode: SyncMode = "auto") -> SyncReport:
        """Run one capped sync batch and return its report; failures end up in the report, never raised."""
        run = SyncRun(mode=mode, status="running", imported=0)
        self.db.add(run)
        self.db.commit()

        report = SyncReport()
        try:
            await self._sync(mode, report)
        except UpstreamUnavailable as exc:
            log.error(f"Sync ({mode}) aborted: {exc}")
            report.success = False
            report.message = f"Sync failed: {exc}"
        except Exception as exc:  # noqa: BLE001
            self.db.rollback()
            log.exception(f"Sync ({mode}) failed: {exc}")
            report.success = False
            report.message = f"Sync failed: {str(exc)[:200]}"
            self.db.add(run)

        run.status = "success" if report.success else "failure"
        run.imported = report.imported
        run.error_message = None if report.success else report.message
        run.report = report.model_dump(by_alias=True)
        run.ended_at = datetime.now(timezone.utc)
        self.db.commit()

        log.info(
            f"Sync ({mode}) finished | checked={report.checked} new={report.new} imported={report.imported} "
            f"updated={report.updated} existing={report.skipped_existing} too_old={report.skipped_too_old} "
            f"errors={report.errors}"
        )
        return report

    async def _sync(self, mode: SyncMode, report: SyncReport) -> None:
        watermark = read_watermark(self.db)
        log.info(f"Starting sync ({mode}) | watermark={watermark.isoformat() if watermark else 'none'}")

        graduated = await self.client.list_graduated()
        report.checked = len(graduated)
        if not graduated:
            report.message = "No graduated tokens found"
            return

        if watermark is None and mode == "auto":
            log.info(f"No baseline in store; skipping auto-import of {len(graduated)} graduated tokens")
            report.message = NO_BASELINE_MESSAGE
            return

        candidates = self.select_candidates(graduated, watermark, mode)
        report.new = len(candidates)
        if not candidates:
            report.message = "No new tokens to import"
            return

        log.info(f"Processing {len(candidates)} candidate tokens")
        written: set[str] = set()
        for index, record in enumerate(candidates):
            if index and self.record_delay:
                await asyncio.sleep(self.record_delay)
            await self._process(record, watermark, written, report)

        report.message = report.summarize()

    # -------------------------------------------------------------------------
    # Candidate selection
    # -------------------------------------------------------------------------
    def select_candidates(
        self,
        records: List[RawRecord],
        watermark: Optional[datetime],
        mode: SyncMode,
    ) -> List[RawRecord]:
        """Newest-first records admissible in this run, capped at ``max_batch``."""
        ordered = sorted(records, key=best_timestamp, reverse=True)

        if watermark is None:
            if mode == "auto":
                return []
            admitted = ordered[: self.baseline_size]
        else:
            threshold = (watermark - self.buffer).timestamp()
            admitted = [record for record in ordered if best_timestamp(record) > threshold]
            log.info(
                f"Filtered to {len(admitted)} of {len(ordered)} graduated tokens "
                f"(after {datetime.fromtimestamp(threshold, tz=timezone.utc).isoformat()})"
            )

        return admitted[: self.max_batch]

    # -------------------------------------------------------------------------
    # Per-record pipeline
    # -------------------------------------------------------------------------
    async def _process(
        self,
        record: RawRecord,
        watermark: Optional[datetime],
        written: set[str],
        report: SyncReport,
    ) -> None:
        address = resolve_address(record)
        if not address:
            log.warning("Skipping graduated token without a mint address")
            report.add_error(str(MissingAddress()))
            return

        short = f"{address[:8]}..."
        try:
            if self.gateway.find_existing(address, self.chain) is not None:
                log.debug(f"Skipping {short} - already exists in database")
                report.skipped_existing += 1
                return

            metadata = await self.client.fetch_metadata(address)
            if metadata is None:
                log.info(f"{short} - metadata not found, continuing with graduated-list data")

            draft = self.normalizer.validate(
                self.normalizer.normalize(record, metadata, self.migration_dex, auto_publish=True)
            )

            if watermark is not None and self._is_stale(draft.migration_date, watermark, written):
                log.info(f"Skipping {short} - migration date {draft.migration_date.isoformat()} is behind the watermark")
                report.skipped_too_old += 1
                return

            result = self.gateway.upsert(draft)
        except IngestionError as exc:
            log.warning(f"Rejected token {short}: {exc}")
            report.add_error(f"{short} - {exc}")
            return
        except Exception as exc:  # noqa: BLE001
            self.db.rollback()
            log.exception(f"Error importing token {short}: {exc}")
            report.add_error(f"{short} - {str(exc)[:100]}")
            return

        self._tally(result, address, written, report)

    def _is_stale(self, migration_date: datetime, watermark: datetime, written: Collection[str]) -> bool:
        """Re-check against the store right before writing, ignoring this run's own writes."""
        current = read_watermark(self.db, exclude_addresses=written)
        effective = max(watermark, current) if current else watermark
        return as_utc(migration_date) <= effective - self.buffer

    @staticmethod
    def _tally(result: UpsertResult, address: str, written: set[str], report: SyncReport) -> None:
        if result.slug_adjusted:
            report.slug_conflicts += 1
        if result.outcome is UpsertOutcome.IMPORTED:
            written.add(address)
            report.imported += 1
        elif result.outcome is UpsertOutcome.UPDATED:
            written.add(address)
            report.updated += 1
        elif result.outcome is UpsertOutcome.SKIPPED_DUPLICATE:
            report.skipped_existing += 1
        else:
            report.add_error(result.error or f"{address[:8]}... - unknown persistence error")

    # -------------------------------------------------------------------------
    # Manual import
    # -------------------------------------------------------------------------
    async def import_address(
        self,
        contract_address: str,
        migration_dex: Optional[str] = None,
        chain: Optional[str] = None,
    ) -> UpsertResult:
        """Import or refresh one token by address; created tokens start unpublished."""
        address = contract_address.strip()
        if not address:
            raise ValidationFailure("Contract address is required")
        metadata = await self.client.fetch_metadata(address)
        if metadata is None:
            raise MetadataNotFound(address)

        primary: dict[str, Any] = {**metadata, "mint": address}
        draft = self.normalizer.validate(
            self.normalizer.normalize(
                primary, metadata, migration_dex or self.migration_dex, auto_publish=False, chain=chain
            )
        )
        result = self.gateway.upsert(draft)
        if result.outcome is UpsertOutcome.SKIPPED_DUPLICATE:
            # A concurrent writer created it first; apply this import as an update
            result = self.gateway.upsert(draft)
        log.info(f"Manual import of {address[:8]}...: {result.outcome.value}")
        return result
