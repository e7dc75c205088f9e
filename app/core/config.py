from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment mode: dev or prod
    ENV: Literal["dev", "prod"] = "dev"

    # Database
    DATABASE_URL: str

    # Logging
    LOG_LEVEL: str = "INFO"
    SLACK_WEBHOOK_URL: str | None = None

    # Upstream launch platform (pump.fun)
    PUMPFUN_GRADUATED_URL: str = "https://advanced-api-v2.pump.fun/coins/graduated?sortBy=creationTime"
    PUMPFUN_METADATA_URL: str = "https://frontend-api-v3.pump.fun/coins"
    UPSTREAM_TIMEOUT_SECONDS: float = 15.0

    # Migration sync
    MIGRATION_CHAIN: str = "Solana"
    DEFAULT_MIGRATION_DEX: str = "PumpSwap"
    SYNC_BUFFER_SECONDS: int = 30  # tolerance for feed/store timestamp skew
    SYNC_MAX_BATCH: int = 20  # records processed per run
    SYNC_BASELINE_SIZE: int = 1
    SYNC_RECORD_DELAY_SECONDS: float = 0.2

    # Docs Configuration
    DOCS_ENABLED: bool | None = None  # Override docs setting (None = auto based on ENV)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # ignore unrelated keys in local .env
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "dev"

    @property
    def debug_enabled(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.is_development

    @property
    def effective_log_level(self) -> str:
        """Return appropriate log level based on environment."""
        if self.is_production:
            # In production, minimum INFO level (ignore DEBUG)
            return self.LOG_LEVEL if self.LOG_LEVEL.upper() != "DEBUG" else "INFO"
        return self.LOG_LEVEL

    @property
    def docs_enabled(self) -> bool:
        """Swagger/ReDoc docs enabled based on environment or override."""
        if self.DOCS_ENABLED is not None:
            return self.DOCS_ENABLED
        return self.is_development


settings = Settings()
