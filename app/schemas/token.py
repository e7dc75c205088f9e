"""Canonical, store-ready token record produced by the normalizer."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TokenDraft(BaseModel):
    """Typed token record, independent of upstream payload shapes."""

    name: str
    symbol: str
    slug: str
    contract_address: str
    chain: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    twitter_url: Optional[str] = None
    telegram_url: Optional[str] = None
    website_url: Optional[str] = None
    is_pump_fun: bool = True
    migrated: bool = True
    migration_date: datetime
    migration_dex: str
    published: bool = True

    @property
    def short_address(self) -> str:
        return self.contract_address[:8]
