# Services package
from app.services.sync_service import MigrationSyncService, read_watermark
from app.services.token_service import TokenService
from app.services.upsert_gateway import TokenUpsertGateway, UpsertOutcome, UpsertResult

__all__ = [
    "MigrationSyncService",
    "read_watermark",
    "TokenService",
    "TokenUpsertGateway",
    "UpsertOutcome",
    "UpsertResult",
]
