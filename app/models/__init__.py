from app.models.base import Base
from app.models.token import Token, TokenEvent, TokenMedia, ADDRESS_CONSTRAINT, SLUG_CONSTRAINT
from app.models.runs import SyncRun

__all__ = [
    "Base",
    "Token",
    "TokenEvent",
    "TokenMedia",
    "ADDRESS_CONSTRAINT",
    "SLUG_CONSTRAINT",
    "SyncRun",
]
