"""API dependencies"""

from typing import Generator

from sqlalchemy.orm import Session

from app.core.db import SessionLocal
from app.ingestion.base import BaseFeedClient
from app.ingestion.pumpfun_source import PumpFunClient


def get_db() -> Generator[Session, None, None]:
    """Database session scoped to one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_feed_client() -> BaseFeedClient:
    """Upstream feed used by the migrated-token routes."""
    return PumpFunClient()
