from pathlib import Path
from contextlib import asynccontextmanager

from alembic import command
from alembic.config import Config
from fastapi import FastAPI

from app.api.routes import admin, health, migrated, stats, tokens
from app.core.config import settings
from app.core.logging import get_logger


log = get_logger("app")


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if settings.is_production:
        log.info("Production mode: Debug disabled, docs disabled, stricter logging")
    else:
        log.info("Development mode: Debug enabled, docs available")

    try:
        run_migrations()
    except Exception:
        log.exception("Failed to apply migrations on startup")
        raise

    # Syncs are triggered externally (scheduler, page loads, operators)
    log.info(
        f"Migration sync ready | buffer={settings.SYNC_BUFFER_SECONDS}s "
        f"batch={settings.SYNC_MAX_BATCH} chain={settings.MIGRATION_CHAIN}"
    )

    yield

    log.info("Application shutdown complete")


app = FastAPI(
    title="MemeVault",
    description="Meme token catalogue with migrated-token sync from pump.fun",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production for security
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)


app.include_router(tokens.router)
app.include_router(admin.router)
app.include_router(migrated.router)
app.include_router(health.router)
app.include_router(stats.router)
