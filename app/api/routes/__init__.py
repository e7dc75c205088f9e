from app.api.routes.admin import router as admin_router
from app.api.routes.health import router as health_router
from app.api.routes.migrated import router as migrated_router
from app.api.routes.stats import router as stats_router
from app.api.routes.tokens import router as tokens_router

__all__ = ["admin_router", "health_router", "migrated_router", "stats_router", "tokens_router"]
