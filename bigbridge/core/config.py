"""Bridge settings and configuration."""

from typing import Literal

from pydantic import Field, model_validator  # type: ignore
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore


class Settings(BaseSettings):
    """Bridge settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENV: Literal["dev", "staging", "prod", "test"] = Field(default="dev")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Database (source of the ORM models being mirrored)
    DATABASE_URL: str = Field(default="sqlite:///./bigbridge.db")

    # Redis (describe-table cache)
    REDIS_URL: str | None = Field(default=None)
    REDIS_ENABLED: bool = Field(default=False)
    REDIS_REQUIRED: bool = Field(default=False)

    # BigQuery
    BIG_PROJECT_ID: str | None = Field(default=None)
    BIG_AUTH_FILE: str | None = Field(default=None)  # None -> application default credentials
    BIG_DEFAULT_DATASET: str | None = Field(default=None)
    BIG_USE_LEGACY_SQL: bool = Field(default=False)
    BIG_USE_QUERY_CACHE: bool = Field(default=False)

    # Waits
    BIG_POLL_INTERVAL_SECONDS: float = Field(default=0.5, gt=0)
    BIG_POLL_MAX_ATTEMPTS: int = Field(default=1200, ge=1)
    BIG_QUERY_TIMEOUT_SECONDS: float | None = Field(default=600.0)
    BIG_TABLE_SETTLE_SECONDS: float = Field(default=10.0, ge=0)

    # Describe-table results rarely change
    BIG_DESCRIBE_CACHE_TTL_SECONDS: int = Field(default=5 * 24 * 3600, ge=1)

    @model_validator(mode="after")
    def check_production(self) -> "Settings":
        """Fail fast in production if critical vars are missing."""
        if self.ENV == "prod":
            if not self.BIG_PROJECT_ID:
                raise ValueError("BIG_PROJECT_ID must be set in production")
            if self.REDIS_ENABLED and not self.REDIS_URL:
                raise ValueError("REDIS_URL must be set in production when REDIS_ENABLED=true")
        return self


# Global settings instance
settings = Settings()
