"""
Hello Directory Application Configuration

Configuration management with environment variable support.
Implements secure defaults and validation for all settings.
"""

from functools import lru_cache
from typing import Dict

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..constants import HELLO_CACHE

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Environment settings
    ENVIRONMENT: str = Field(
        default="development", description="Application environment"
    )

    # Database configuration
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./hello_directory.db",
        description="Database connection URL with an async driver",
    )
    DATABASE_POOL_SIZE: int = Field(
        default=5, ge=1, le=100, description="Database connection pool size"
    )
    DATABASE_MAX_OVERFLOW: int = Field(
        default=10, ge=0, le=100, description="Maximum overflow connections"
    )
    DATABASE_POOL_TIMEOUT: int = Field(
        default=30, ge=1, le=300, description="Connection pool timeout in seconds"
    )
    DATABASE_CONNECT_RETRIES: int = Field(
        default=3, ge=1, le=10, description="Engine start-up connection attempts"
    )

    # Cache configuration
    CACHE_BACKEND: str = Field(
        default="redis", description="Cache store backend (redis or local)"
    )
    CACHE_DEFAULT_TTL_SECONDS: float = Field(
        default=600, gt=0, description="Process default TTL for cache namespaces"
    )
    CACHE_NULL_VALUES: bool = Field(
        default=False, description="Whether null results are cached by default"
    )
    HELLO_CACHE_TTL_SECONDS: float = Field(
        default=10, gt=0, description="TTL override for the greeting cache"
    )

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0", description="Redis connection URL"
    )
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=2.0, gt=0, le=30, description="Redis connect timeout in seconds"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=2.0, gt=0, le=30, description="Redis read/write timeout in seconds"
    )
    REDIS_KEY_PREFIX: str = Field(
        default="", description="Prefix prepended to every physical cache key"
    )

    # Circuit breaker settings
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = Field(
        default=5, ge=1, le=20, description="Circuit breaker failure threshold"
    )
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT: float = Field(
        default=30,
        ge=1,
        le=300,
        description="Circuit breaker recovery timeout in seconds",
    )

    # API configuration
    API_HOST: str = Field(default="0.0.0.0", description="API server host")
    API_PORT: int = Field(default=8000, ge=1, le=65535, description="API server port")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON lines")

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL format and force an async driver."""
        if v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://") :]
        if not v.startswith(("postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError(
                "DATABASE_URL must be a postgresql+asyncpg or sqlite+aiosqlite URL"
            )
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of: {allowed}")
        return v

    @field_validator("CACHE_BACKEND")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Validate cache backend name."""
        allowed = ["redis", "local"]
        if v.lower() not in allowed:
            raise ValueError(f"CACHE_BACKEND must be one of: {allowed}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite."""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def cache_ttl_overrides(self) -> Dict[str, float]:
        """Per-namespace TTL overrides in seconds."""
        return {HELLO_CACHE: self.HELLO_CACHE_TTL_SECONDS}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
