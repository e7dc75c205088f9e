from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class TokenEventIn(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    date: datetime
    type: str = "Other"


class TokenEventOut(TokenEventIn):
    id: UUID

    class Config:
        from_attributes = True


class TokenMediaIn(BaseModel):
    url: str = Field(min_length=1)
    type: str = "image"
    caption: Optional[str] = None
    position: int = 0


class TokenMediaOut(TokenMediaIn):
    id: UUID

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    """Token as exposed by public and admin endpoints."""

    id: UUID
    slug: str
    name: str
    symbol: str
    contract_address: str
    chain: str
    description: Optional[str] = None
    lore: Optional[str] = None
    origin_story: Optional[str] = None
    logo_url: Optional[str] = None
    twitter_url: Optional[str] = None
    telegram_url: Optional[str] = None
    website_url: Optional[str] = None
    launch_date: Optional[datetime] = None
    launch_price: Optional[float] = None
    current_price: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    sentiment: Optional[str] = None
    is_pump_fun: bool
    migrated: bool
    migration_date: Optional[datetime] = None
    migration_dex: Optional[str] = None
    published: bool

    class Config:
        from_attributes = True


class TokenDetailOut(TokenOut):
    events: List[TokenEventOut] = []
    gallery: List[TokenMediaOut] = []


class TokenListResponse(BaseModel):
    total_count: int
    data: list[TokenOut]


class TokenCreate(BaseModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    contract_address: str = Field(min_length=1)
    chain: str = Field(min_length=1)
    description: Optional[str] = None
    lore: Optional[str] = None
    origin_story: Optional[str] = None
    logo_url: Optional[str] = None
    twitter_url: Optional[str] = None
    telegram_url: Optional[str] = None
    website_url: Optional[str] = None
    launch_date: Optional[datetime] = None
    launch_price: Optional[float] = None
    current_price: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    sentiment: Optional[str] = None
    events: List[TokenEventIn] = []
    gallery: List[TokenMediaIn] = []


class TokenUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    name: Optional[str] = Field(default=None, min_length=1)
    symbol: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    contract_address: Optional[str] = Field(default=None, min_length=1)
    chain: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    lore: Optional[str] = None
    origin_story: Optional[str] = None
    logo_url: Optional[str] = None
    twitter_url: Optional[str] = None
    telegram_url: Optional[str] = None
    website_url: Optional[str] = None
    launch_date: Optional[datetime] = None
    launch_price: Optional[float] = None
    current_price: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    sentiment: Optional[str] = None
    published: Optional[bool] = None


class ImportRequest(BaseModel):
    contract_address: str = Field(min_length=1)
    migration_dex: Optional[str] = None
    chain: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


class ImportResponse(BaseModel):
    message: str
    token: TokenOut


class PurgeResponse(BaseModel):
    message: str
    deleted: int


class HealthResponse(BaseModel):
    database: str
    last_sync_status: str | None


class SyncRunOut(BaseModel):
    run_id: str
    mode: str
    status: str
    imported: int
    error_message: str | None = None
    report: dict | None = None
    started_at: datetime
    ended_at: datetime | None

    class Config:
        from_attributes = True
