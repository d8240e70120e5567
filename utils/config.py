"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from environment variables and .env files
using pydantic-settings. Type-safe access with validation.

Usage:
    from utils.config import get_settings

    settings = get_settings()
    rpc_url = settings.SOLANA_RPC_URL

Settings are resolved lazily so that importing a module never requires the
environment to be populated. A missing SOLANA_RPC_URL raises a pydantic
ValidationError on first access.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # RPC Configuration
    SOLANA_RPC_URL: str = Field(..., min_length=1)
    RPC_TIMEOUT: float = Field(default=30.0, gt=0)

    # Fetch Loop Configuration
    FETCH_RETRY_DELAY_MS: int = Field(default=500, ge=0)
    UNCLASSIFIED_ERROR_LIMIT: int = Field(default=0, ge=0)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: Literal["text", "json"] = Field(default="text")

    # Application Metadata
    ENVIRONMENT: str = Field(default="production")
    APP_NAME: str = Field(default="blockfeed")
    APP_VERSION: str = Field(default="0.1.0")

    @property
    def fetch_retry_delay(self) -> float:
        """Retry delay for not-yet-produced blocks, in seconds."""
        return self.FETCH_RETRY_DELAY_MS / 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance

    Raises:
        pydantic.ValidationError: If a required variable is missing or invalid
    """
    return Settings()
