"""Admin routes - token CRUD and the bulk purge of migrated tokens."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.errors import TokenConflict, TokenNotFound
from app.core.logging import get_logger
from app.schemas.api import (
    PurgeResponse,
    TokenCreate,
    TokenDetailOut,
    TokenListResponse,
    TokenOut,
    TokenUpdate,
)
from app.services.token_service import TokenService

router = APIRouter(prefix="/admin/tokens", tags=["admin"])
log = get_logger("admin_routes")


@router.get("", response_model=TokenListResponse)
def list_all_tokens(
    q: Optional[str] = Query(None, description="Search by name or symbol"),
    published: Optional[bool] = Query(None, description="Filter by publication state"),
    migrated: Optional[bool] = Query(None, description="Filter by migration state"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List tokens including drafts."""
    tokens, total = TokenService(db).list_tokens(
        q=q, published=published, migrated=migrated, limit=limit, offset=offset
    )
    return TokenListResponse(total_count=total, data=[TokenOut.model_validate(t) for t in tokens])


@router.post("", response_model=TokenDetailOut, status_code=201)
def create_token(body: TokenCreate, db: Session = Depends(get_db)):
    """Create a token as an unpublished draft."""
    try:
        token = TokenService(db).create(body.model_dump())
    except TokenConflict as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return TokenDetailOut.model_validate(token)


@router.delete("/migrated", response_model=PurgeResponse)
def delete_migrated_tokens(db: Session = Depends(get_db)):
    """
    Delete all migrated pump.fun tokens with their events and gallery.

    Useful for cleaning up before re-running a baseline sync.
    """
    deleted = TokenService(db).purge_migrated()
    return PurgeResponse(message=f"Deleted {deleted} migrated tokens", deleted=deleted)


@router.get("/{token_id}", response_model=TokenDetailOut)
def get_token(token_id: str, db: Session = Depends(get_db)):
    try:
        token = TokenService(db).get_by_id(token_id)
    except TokenNotFound:
        raise HTTPException(status_code=404, detail="Token not found")
    return TokenDetailOut.model_validate(token)


@router.patch("/{token_id}", response_model=TokenDetailOut)
def update_token(token_id: str, body: TokenUpdate, db: Session = Depends(get_db)):
    try:
        token = TokenService(db).update(token_id, body.model_dump(exclude_unset=True))
    except TokenNotFound:
        raise HTTPException(status_code=404, detail="Token not found")
    except TokenConflict as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return TokenDetailOut.model_validate(token)


@router.delete("/{token_id}", status_code=204)
def delete_token(token_id: str, db: Session = Depends(get_db)):
    try:
        TokenService(db).delete(token_id)
    except TokenNotFound:
        raise HTTPException(status_code=404, detail="Token not found")
    return Response(status_code=204)
