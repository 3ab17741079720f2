"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def sync_database_url(url: str) -> str:
    return url.replace("+aiosqlite", "").replace("+asyncpg", "")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False

    # API
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Social Graph API"
    version: str = "0.1.0"

    # Database
    database_url: str = "sqlite+aiosqlite:///./social_graph.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    # Rate limiting
    redis_url: str = "redis://localhost:6379/0"
    rate_limit_requests: int = 120
    rate_limit_window_seconds: int = 60
    rate_limit_trusted_proxies: list[str] = []
    rate_limit_ip_headers: list[str] = ["x-forwarded-for", "x-real-ip"]

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> str:
        level = str(value).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(
                f"invalid log level: {value}, must be one of: "
                f"{', '.join(sorted(LOG_LEVELS))}"
            )
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> str:
        return str(value).strip().lower()

    @property
    def database_url_sync(self) -> str:
        """Database URL with the async driver stripped, for offline tooling."""
        return sync_database_url(self.database_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
