"""Stats routes - sync run observability."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.api import SyncRunOut
from app.services.sync_service import read_watermark
from app.services.token_service import TokenService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=list[SyncRunOut])
def get_sync_stats(
    status: Optional[str] = Query(None, description="Filter by status (running, success, failure)"),
    limit: int = Query(10, ge=1, le=50, description="Number of runs to return"),
    db: Session = Depends(get_db),
):
    """
    Get recent sync runs.

    Shows the mode, imported count, status and the full report of each run.
    """
    runs = TokenService(db).get_sync_runs(status=status, limit=limit)
    return [
        SyncRunOut(
            run_id=str(run.run_id),
            mode=run.mode,
            status=run.status,
            imported=run.imported,
            error_message=run.error_message,
            report=run.report,
            started_at=run.started_at,
            ended_at=run.ended_at,
        )
        for run in runs
    ]


@router.get("/watermark")
def get_watermark(db: Session = Depends(get_db)):
    """Current sync watermark (latest migration date in the store)."""
    watermark = read_watermark(db)
    return {"watermark": watermark.isoformat() if watermark else None, "has_baseline": watermark is not None}
