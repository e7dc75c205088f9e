"""Public token routes - published tokens only."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.errors import TokenNotFound
from app.schemas.api import TokenDetailOut, TokenListResponse, TokenOut
from app.services.token_service import TokenService

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("", response_model=TokenListResponse)
def list_tokens(
    q: Optional[str] = Query(None, description="Search by name or symbol (case-insensitive partial match)"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """List published tokens, newest first."""
    tokens, total = TokenService(db).list_tokens(q=q, published=True, limit=limit, offset=offset)
    return TokenListResponse(total_count=total, data=[TokenOut.model_validate(t) for t in tokens])


@router.get("/migrated", response_model=TokenListResponse)
def list_migrated_tokens(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Published tokens that graduated to a DEX, most recent migration first."""
    tokens, total = TokenService(db).list_tokens(published=True, migrated=True, limit=limit, offset=offset)
    return TokenListResponse(total_count=total, data=[TokenOut.model_validate(t) for t in tokens])


@router.get("/{slug}", response_model=TokenDetailOut)
def get_token(slug: str, db: Session = Depends(get_db)):
    try:
        token = TokenService(db).get_published_by_slug(slug)
    except TokenNotFound:
        raise HTTPException(status_code=404, detail=f"Token '{slug}' not found")
    return TokenDetailOut.model_validate(token)
