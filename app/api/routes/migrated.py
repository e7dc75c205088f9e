"""Migrated-token routes - trigger syncs and import single tokens."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_feed_client
from app.core.errors import MetadataNotFound, ValidationFailure
from app.core.logging import get_logger
from app.ingestion.base import BaseFeedClient
from app.schemas.api import ImportRequest, ImportResponse, TokenOut
from app.schemas.sync import SyncMode, SyncReport
from app.services.sync_service import MigrationSyncService
from app.services.upsert_gateway import UpsertOutcome

router = APIRouter(prefix="/migrated-tokens", tags=["migrated-tokens"])
log = get_logger("migrated_routes")


async def _run_sync(mode: SyncMode, response: Response, db: Session, client: BaseFeedClient) -> SyncReport:
    service = MigrationSyncService(db, client=client)
    report = await service.run(mode)
    if not report.success:
        response.status_code = 502
    return report


@router.get("/auto-sync", response_model=SyncReport)
async def auto_sync(
    response: Response,
    db: Session = Depends(get_db),
    client: BaseFeedClient = Depends(get_feed_client),
):
    """
    Lightweight sync for schedulers and page loads.

    Imports only tokens that graduated after the newest migrated token in the
    store. Imports nothing until a baseline sync has been run.
    Returns 502 when the graduated-token feed is unavailable.
    """
    log.info("Auto-sync triggered")
    return await _run_sync("auto", response, db, client)


@router.post("/sync", response_model=SyncReport)
async def baseline_sync(
    response: Response,
    db: Session = Depends(get_db),
    client: BaseFeedClient = Depends(get_feed_client),
):
    """
    Operator-triggered sync.

    On an empty store this imports the most recent graduated token to set
    the watermark; afterwards it behaves like auto-sync.
    """
    log.info("Baseline sync triggered")
    return await _run_sync("baseline", response, db, client)


@router.post("/import", response_model=ImportResponse)
async def import_token(
    body: ImportRequest,
    db: Session = Depends(get_db),
    client: BaseFeedClient = Depends(get_feed_client),
):
    """Import or refresh one token by contract address. New tokens start as drafts."""
    service = MigrationSyncService(db, client=client)
    try:
        result = await service.import_address(body.contract_address, body.migration_dex, body.chain)
    except MetadataNotFound:
        raise HTTPException(status_code=404, detail="Could not fetch token data. Please add manually.")
    except ValidationFailure as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    if result.outcome is UpsertOutcome.ERROR or result.token is None:
        log.error(f"Import failed for {body.contract_address}: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to import token")

    message = "Token updated" if result.outcome is UpsertOutcome.UPDATED else "Token imported successfully"
    return ImportResponse(message=message, token=TokenOut.model_validate(result.token))
