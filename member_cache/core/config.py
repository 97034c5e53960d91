"""
Member Cache Application Configuration

Settings are read from the environment and an optional .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional
from functools import lru_cache
from dotenv import load_dotenv

# .env values become process environment before Settings is built
load_dotenv()


class Settings(BaseSettings):
    """Database, Redis and cache policy settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Database configuration
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./member_cache.db",
        description="Database connection URL with an async driver",
    )
    DATABASE_POOL_SIZE: int = Field(
        default=10, ge=1, le=100, description="Database connection pool size"
    )
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis socket connect timeout"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Redis socket operation timeout"
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, ge=0, le=300, description="Seconds between idle connection pings"
    )
    REDIS_SCAN_COUNT: int = Field(
        default=100, ge=1, le=10000, description="COUNT hint for cursor-based SCAN"
    )

    # Member cache policy
    MEMBER_KEY_TTL_SECONDS: int = Field(
        default=100, ge=1, description="TTL for manually written member::<id> keys"
    )
    MEMBER_LIST_CACHE_TTL_SECONDS: Optional[int] = Field(
        default=None,
        ge=1,
        description="TTL for the read-through member list (None = no expiry)",
    )

    # Development and debugging
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON")

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        """Only PostgreSQL and SQLite drivers are supported."""
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError("DATABASE_URL must be a PostgreSQL or SQLite URL")
        return v

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v):
        """Validate Redis URL scheme."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must use redis://, rediss:// or unix://")
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Any case is accepted; the stored value is upper-cased."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Process-wide Settings, built once."""
    return Settings()
