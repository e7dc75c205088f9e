"""Turns loosely-typed pump.fun payloads into canonical token drafts.

Upstream field names drift between API versions, so every concept is read by
probing an ordered list of candidate keys. Nothing outside this module and
``base.probe`` should know about those names.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from app.core.config import settings
from app.core.errors import MissingAddress, ValidationFailure
from app.core.logging import get_logger
from app.schemas.token import TokenDraft
from .base import RawRecord, probe, probe_text

log = get_logger("ingestion.normalizer")

ADDRESS_KEYS = ("mint", "coinMint", "mintAddress", "address", "contractAddress")
NAME_KEYS = ("name",)
SYMBOL_KEYS = ("symbol",)
DESCRIPTION_KEYS = ("description",)
IMAGE_KEYS = ("imageUri", "image_uri", "image")
TWITTER_KEYS = ("twitter", "twitterUrl")
TELEGRAM_KEYS = ("telegram", "telegramUrl")
WEBSITE_KEYS = ("website", "websiteUrl")

MIGRATION_TIME_KEYS = ("migrationTime", "migration_time", "migratedAt", "migrated_at")
GRADUATION_TIME_KEYS = ("graduatedAt", "graduationTime", "graduated_at")
CREATION_TIME_KEYS = ("creationTime", "created_timestamp", "createdAt", "created_at")

# Epoch values above this are milliseconds (1e10 s is the year 2286)
MILLISECONDS_THRESHOLD = 10_000_000_000
MAX_FUTURE_SKEW = timedelta(days=365)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_seconds(value: Any) -> Optional[float]:
    """Epoch seconds from seconds, milliseconds, numeric strings, ISO strings or datetimes."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return as_utc(value).timestamp()
    if isinstance(value, str):
        text = value.strip()
        try:
            value = float(text)
        except ValueError:
            try:
                return as_utc(datetime.fromisoformat(text.replace("Z", "+00:00"))).timestamp()
            except ValueError:
                return None
    if not isinstance(value, (int, float)):
        return None
    try:
        seconds = float(value)
    except OverflowError:
        return None
    if not math.isfinite(seconds):
        return None
    if seconds > MILLISECONDS_THRESHOLD:
        seconds /= 1000
    return seconds if seconds > 0 else None


def best_timestamp(record: Optional[RawRecord]) -> float:
    """Sort key: explicit migration time, else graduation, else creation, else 0."""
    for keys in (MIGRATION_TIME_KEYS, GRADUATION_TIME_KEYS, CREATION_TIME_KEYS):
        seconds = to_epoch_seconds(probe(record, keys))
        if seconds is not None:
            return seconds
    return 0.0


def resolve_address(*records: Optional[RawRecord]) -> Optional[str]:
    for record in records:
        value = probe(record, ADDRESS_KEYS)
        if value is not None:
            return str(value).strip()
    return None


def slugify(text: str) -> str:
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def normalize_twitter(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    if value.startswith("http"):
        return value
    return f"https://twitter.com/{value.lstrip('@')}"


def normalize_telegram(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    if value.startswith("http"):
        return value
    return f"https://t.me/{value.lstrip('@/')}"


def normalize_website(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    if not value:
        return None
    if value.startswith("http"):
        return value
    return f"https://{value}"


class TokenRecordNormalizer:
    """Pure conversion of (graduated record, metadata) into a ``TokenDraft``."""

    def __init__(self, chain: Optional[str] = None, clock: Callable[[], datetime] = utcnow):
        self.chain = chain or settings.MIGRATION_CHAIN
        self.clock = clock

    def normalize(
        self,
        primary: RawRecord,
        metadata: Optional[RawRecord] = None,
        migration_dex: Optional[str] = None,
        *,
        auto_publish: bool = True,
        chain: Optional[str] = None,
    ) -> TokenDraft:
        address = resolve_address(primary, metadata)
        if not address:
            raise MissingAddress()

        now = self.clock()
        name = probe_text([metadata, primary], NAME_KEYS) or f"Token {address[:8]}"
        symbol = probe_text([metadata, primary], SYMBOL_KEYS) or "UNKNOWN"

        return TokenDraft(
            name=name,
            symbol=symbol,
            slug=slugify(name) or slugify(f"token-{address[:8]}"),
            contract_address=address,
            chain=chain or self.chain,
            description=probe_text([metadata, primary], DESCRIPTION_KEYS) or None,
            logo_url=probe_text([metadata, primary], IMAGE_KEYS) or None,
            twitter_url=normalize_twitter(probe_text([metadata, primary], TWITTER_KEYS)),
            telegram_url=normalize_telegram(probe_text([metadata, primary], TELEGRAM_KEYS)),
            website_url=normalize_website(probe_text([metadata, primary], WEBSITE_KEYS)),
            is_pump_fun=True,
            migrated=True,
            migration_date=self.resolve_migration_date(primary, metadata, now),
            migration_dex=migration_dex or settings.DEFAULT_MIGRATION_DEX,
            published=auto_publish,
        )

    @staticmethod
    def resolve_migration_date(
        primary: Optional[RawRecord],
        metadata: Optional[RawRecord],
        now: datetime,
    ) -> datetime:
        """Timestamp from the graduated list first, metadata second, clamped to ``now``."""
        seconds = best_timestamp(primary) or best_timestamp(metadata)
        if not seconds:
            return now
        if seconds > (now + MAX_FUTURE_SKEW).timestamp():
            log.warning(f"Invalid migration time {seconds}; using current time instead")
            return now
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    @staticmethod
    def validate(draft: TokenDraft) -> TokenDraft:
        missing = [
            field
            for field in ("name", "symbol", "contract_address", "slug", "chain")
            if not str(getattr(draft, field) or "").strip()
        ]
        if missing:
            raise ValidationFailure(f"{draft.contract_address[:8] or 'unknown'}... - missing {', '.join(missing)}")
        return draft
