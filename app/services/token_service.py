"""Token catalogue - public reads, admin CRUD and the migrated-token purge."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import TokenConflict, TokenNotFound
from app.core.logging import get_logger
from app.models.runs import SyncRun
from app.models.token import Token, TokenEvent, TokenMedia

log = get_logger("token_service")

REQUIRED_FIELDS = {"name", "symbol", "slug", "contract_address", "chain", "published"}


class TokenService:
    """Handles catalogue queries and admin writes outside the sync pipeline."""

    def __init__(self, db: Session):
        self.db = db

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def list_tokens(
        self,
        q: Optional[str] = None,
        published: Optional[bool] = None,
        migrated: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Token], int]:
        """Filtered page of tokens plus the total matching count."""
        stmt = select(Token)
        if q:
            pattern = f"%{q}%"
            stmt = stmt.where(or_(Token.name.ilike(pattern), Token.symbol.ilike(pattern)))
        if published is not None:
            stmt = stmt.where(Token.published.is_(published))
        if migrated is not None:
            stmt = stmt.where(Token.migrated.is_(migrated))

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar() or 0

        if migrated:
            stmt = stmt.order_by(Token.migration_date.desc().nullslast())
        else:
            stmt = stmt.order_by(Token.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all()), total

    def get_by_id(self, token_id: str) -> Token:
        try:
            uid = uuid.UUID(str(token_id))
        except ValueError:
            raise TokenNotFound(token_id)
        token = self.db.get(Token, uid)
        if token is None:
            raise TokenNotFound(token_id)
        return token

    def get_published_by_slug(self, slug: str) -> Token:
        stmt = (
            select(Token)
            .where(Token.slug == slug, Token.published.is_(True))
            .options(selectinload(Token.events), selectinload(Token.gallery))
        )
        token = self.db.execute(stmt).scalar_one_or_none()
        if token is None:
            raise TokenNotFound(slug)
        return token

    def get_sync_runs(self, status: Optional[str] = None, limit: int = 10) -> List[SyncRun]:
        stmt = select(SyncRun)
        if status:
            stmt = stmt.where(SyncRun.status == status)
        stmt = stmt.order_by(SyncRun.started_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def get_latest_sync_run(self) -> Optional[SyncRun]:
        runs = self.get_sync_runs(limit=1)
        return runs[0] if runs else None

    # -------------------------------------------------------------------------
    # Admin writes
    # -------------------------------------------------------------------------
    def create(self, data: Dict[str, Any]) -> Token:
        """Create a draft token from admin input (never auto-published)."""
        if self._slug_exists(data["slug"]):
            raise TokenConflict("Token with this slug already exists")

        events = data.pop("events", None) or []
        gallery = data.pop("gallery", None) or []
        token = Token(**data, published=False)
        token.events = [TokenEvent(**event) for event in events]
        token.gallery = [TokenMedia(**media) for media in gallery]
        self.db.add(token)
        self._commit("Token with this slug or contract address already exists")
        log.info(f"Created draft token {token.slug}")
        return token

    def update(self, token_id: str, changes: Dict[str, Any]) -> Token:
        token = self.get_by_id(token_id)
        new_slug = changes.get("slug")
        if new_slug and new_slug != token.slug and self._slug_exists(new_slug):
            raise TokenConflict("Token with this slug already exists")

        for field, value in changes.items():
            if value is None and field in REQUIRED_FIELDS:
                continue
            setattr(token, field, value)
        self._commit("Token with this slug or contract address already exists")
        log.info(f"Updated token {token.slug}")
        return token

    def delete(self, token_id: str) -> None:
        token = self.get_by_id(token_id)
        self.db.delete(token)
        self.db.commit()
        log.info(f"Deleted token {token.slug}")

    def purge_migrated(self) -> int:
        """Delete every migrated pump.fun token along with its events and gallery."""
        tokens = self.db.execute(
            select(Token).where(Token.migrated.is_(True), Token.is_pump_fun.is_(True))
        ).scalars().all()
        for token in tokens:
            self.db.delete(token)
        self.db.commit()
        log.warning(f"Purged {len(tokens)} migrated pump.fun tokens")
        return len(tokens)

    def _slug_exists(self, slug: str) -> bool:
        return self.db.execute(select(Token.id).where(Token.slug == slug).limit(1)).first() is not None

    def _commit(self, conflict_message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            log.warning(f"Catalogue write rejected: {exc.orig}")
            raise TokenConflict(conflict_message) from exc
