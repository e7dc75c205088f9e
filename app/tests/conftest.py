"""Shared fixtures: in-memory SQLite store and a scriptable upstream feed."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("SYNC_RECORD_DELAY_SECONDS", "0")

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import UpstreamUnavailable
from app.ingestion.base import BaseFeedClient
from app.models import Base, Token


class FakeFeed(BaseFeedClient):
    """In-memory graduated list and metadata keyed by address."""

    name = "fake"

    def __init__(self):
        self.records: List[dict] = []
        self.metadata: Dict[str, dict] = {}
        self.unavailable = False
        self.metadata_calls: List[str] = []
        self.on_metadata: Optional[Callable[[str], None]] = None

    async def list_graduated(self):
        if self.unavailable:
            raise UpstreamUnavailable("pump.fun API error: 503")
        return [dict(record) for record in self.records]

    async def fetch_metadata(self, address):
        self.metadata_calls.append(address)
        if self.on_metadata:
            self.on_metadata(address)
        return self.metadata.get(address)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def feed():
    return FakeFeed()


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def make_token(db):
    """Insert a migrated pump.fun token directly, bypassing the pipeline."""

    def _make(address: str, migration_date: datetime, slug: Optional[str] = None, **fields) -> Token:
        values = {
            "name": fields.pop("name", f"Token {address[:8]}"),
            "symbol": fields.pop("symbol", "TKN"),
            "slug": slug or f"token-{address[:8].lower()}",
            "contract_address": address,
            "chain": fields.pop("chain", "Solana"),
            "is_pump_fun": True,
            "migrated": True,
            "migration_date": migration_date,
            "migration_dex": "PumpSwap",
            "published": True,
        }
        values.update(fields)
        token = Token(**values)
        db.add(token)
        db.commit()
        return token

    return _make


def graduated(address: Optional[str], name: str, seconds: float, **extra) -> dict:
    """A graduated-list entry the way pump.fun reports it."""
    record = {"name": name, "symbol": name.split()[0].upper(), "creationTime": int(seconds), **extra}
    if address:
        record["coinMint"] = address
    return record


@pytest.fixture
def graduated_record():
    return graduated


@pytest.fixture
def ago(now):
    def _ago(seconds: float) -> float:
        return (now - timedelta(seconds=seconds)).timestamp()

    return _ago
