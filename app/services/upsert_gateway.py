"""Idempotent create-or-update of migrated tokens.

This is the only write path the sync pipeline uses. Uniqueness of the slug
and of ``(contract_address, chain)`` is enforced by the database; conflicts
found at write time are resolved here instead of failing the batch.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.ingestion.normalizer import slugify
from app.models.token import ADDRESS_CONSTRAINT, SLUG_CONSTRAINT, Token
from app.schemas.token import TokenDraft

log = get_logger("upsert_gateway")

# Overwritten on update unless the incoming value is None
MUTABLE_FIELDS = (
    "name",
    "symbol",
    "description",
    "logo_url",
    "twitter_url",
    "telegram_url",
    "website_url",
    "migration_date",
    "migration_dex",
)


class UpsertOutcome(str, Enum):
    IMPORTED = "imported"
    UPDATED = "updated"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    ERROR = "error"


@dataclass
class UpsertResult:
    outcome: UpsertOutcome
    token: Optional[Token] = None
    slug_adjusted: bool = False
    error: Optional[str] = None


class _SlugConflict(Exception):
    pass


def violated_constraint(exc: IntegrityError) -> Optional[str]:
    """Map a unique violation to "address" or "slug" across Postgres and SQLite."""
    diag = getattr(exc.orig, "diag", None)
    text = getattr(diag, "constraint_name", None) or str(exc.orig)
    if ADDRESS_CONSTRAINT in text or "contract_address" in text:
        return "address"
    if SLUG_CONSTRAINT in text or "slug" in text:
        return "slug"
    return None


def fallback_slug(address: str) -> str:
    return slugify(f"token-{address[:16]}")


class TokenUpsertGateway:
    def __init__(self, db: Session):
        self.db = db

    def upsert(self, draft: TokenDraft) -> UpsertResult:
        existing = self.find_existing(draft.contract_address, draft.chain)
        if existing is not None:
            return self._update(existing, draft)
        return self._create(draft)

    def find_existing(self, contract_address: str, chain: str) -> Optional[Token]:
        stmt = select(Token).where(Token.contract_address == contract_address, Token.chain == chain)
        return self.db.execute(stmt).scalar_one_or_none()

    def slug_taken(self, slug: str) -> bool:
        stmt = select(Token.id).where(Token.slug == slug).limit(1)
        return self.db.execute(stmt).first() is not None

    def resolve_slug(self, draft: TokenDraft) -> str:
        """Derived slug, else ``<slug>-<addr8>``, else ``token-<addr16>``."""
        if not self.slug_taken(draft.slug):
            return draft.slug
        suffixed = f"{draft.slug}-{slugify(draft.contract_address[:8])}".strip("-")
        if not self.slug_taken(suffixed):
            return suffixed
        return fallback_slug(draft.contract_address)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------
    def _update(self, token: Token, draft: TokenDraft) -> UpsertResult:
        for field in MUTABLE_FIELDS:
            incoming = getattr(draft, field)
            if incoming is not None:
                setattr(token, field, incoming)
        token.is_pump_fun = True
        token.migrated = True

        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error(f"Error updating token {draft.contract_address}: {exc}")
            return UpsertResult(UpsertOutcome.ERROR, error=f"{draft.short_address}... - update failed: {exc}")

        log.info(f"Updated {token.name} ({token.symbol}) - {draft.short_address}...")
        return UpsertResult(UpsertOutcome.UPDATED, token=token)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------
    def _create(self, draft: TokenDraft) -> UpsertResult:
        slug = self.resolve_slug(draft)
        adjusted = slug != draft.slug
        if adjusted:
            log.info(f"Slug '{draft.slug}' is taken; using '{slug}' for {draft.short_address}...")

        try:
            result = self._insert(draft, slug)
        except _SlugConflict:
            # Another writer took the slug between the check and the insert
            retry_slug = fallback_slug(draft.contract_address)
            log.info(f"Slug conflict at write time for {draft.short_address}...; retrying as '{retry_slug}'")
            try:
                result = self._insert(draft, retry_slug)
            except _SlugConflict:
                log.error(f"Error creating token {draft.contract_address}: slug '{retry_slug}' also taken")
                return UpsertResult(UpsertOutcome.ERROR, error=f"{draft.short_address}... - slug conflict after retry")
            adjusted = True

        result.slug_adjusted = adjusted
        return result

    def _insert(self, draft: TokenDraft, slug: str) -> UpsertResult:
        """Insert and commit; raises ``_SlugConflict`` on a slug unique violation."""
        token = Token(**draft.model_dump(exclude={"slug"}), slug=slug)
        self.db.add(token)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            constraint = violated_constraint(exc)
            if constraint == "address":
                log.info(f"Skipping {draft.contract_address} - duplicate contract address (already exists)")
                return UpsertResult(UpsertOutcome.SKIPPED_DUPLICATE)
            if constraint == "slug":
                raise _SlugConflict(slug) from exc
            log.error(f"Error creating token {draft.contract_address}: {exc.orig}")
            return UpsertResult(UpsertOutcome.ERROR, error=f"{draft.short_address}... - {str(exc.orig)[:100]}")
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error(f"Error creating token {draft.contract_address}: {exc}")
            return UpsertResult(UpsertOutcome.ERROR, error=f"{draft.short_address}... - {str(exc)[:100]}")

        log.info(f"Imported {token.name} ({token.symbol}) as '{slug}' - {draft.short_address}...")
        return UpsertResult(UpsertOutcome.IMPORTED, token=token)
