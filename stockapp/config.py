"""
Application configuration using Pydantic settings.

Usage:
    from stockapp.config import get_settings
    settings = get_settings()
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Unified application settings loaded from environment variables and .env file.

    Optional infrastructure:
        - REDIS_HOST / REDIS_PORT (list caching, dashboard stats)
        - ELASTICSEARCH_URL (free-text search; empty disables search)
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # App settings
    app_name: str = "StockApp"
    api_prefix: str = "/api"
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Database
    database_url: str = Field(default="sqlite:///stockapp.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")

    # CORS
    cors_allowed_origins: str = Field(default="http://localhost:5173", validation_alias="CORS_ALLOWED_ORIGINS")

    # Redis
    cache_enabled: bool = Field(default=True, validation_alias="CACHE_ENABLED")
    redis_host: str = Field(default="localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(default=6379, validation_alias="REDIS_PORT")
    redis_db: int = Field(default=0, validation_alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, validation_alias="REDIS_PASSWORD")
    cache_default_ttl: int = Field(default=60, validation_alias="CACHE_DEFAULT_TTL")

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Elasticsearch
    elasticsearch_url: str = Field(default="", validation_alias="ELASTICSEARCH_URL")
    elasticsearch_request_timeout: float = Field(default=10.0, validation_alias="ELASTICSEARCH_REQUEST_TIMEOUT")

    @property
    def search_enabled(self) -> bool:
        return bool(self.elasticsearch_url.strip())

    # Cache sweep bounds (reindex clears list pages inside these bounds only)
    sweep_max_page: int = Field(default=10, validation_alias="SWEEP_MAX_PAGE")
    sweep_min_page_size: int = Field(default=10, validation_alias="SWEEP_MIN_PAGE_SIZE")
    sweep_max_page_size: int = Field(default=100, validation_alias="SWEEP_MAX_PAGE_SIZE")
    sweep_page_size_step: int = Field(default=10, validation_alias="SWEEP_PAGE_SIZE_STEP")

    # Reindex
    reindex_error_sample_size: int = Field(default=10, validation_alias="REINDEX_ERROR_SAMPLE_SIZE")

    @field_validator("cache_default_ttl")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("CACHE_DEFAULT_TTL must be a positive number of seconds")
        return v

    @field_validator("sweep_page_size_step", "sweep_max_page")
    @classmethod
    def validate_sweep_bounds(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Sweep bounds must be at least 1")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings"]
