"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify viewer JWT tokens", min_length=1
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algorithm used to sign viewer JWT tokens",
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone used for timestamps stored in the database",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level configured when the application starts",
    )
    activity_feed_page_size: int = Field(
        default=20,
        description="Default number of feed items returned per page",
        gt=0,
    )
    activity_feed_max_page_size: int = Field(
        default=100,
        description="Upper bound accepted for the feed ``limit`` parameter",
        gt=0,
    )
    aggregation_max_attempts: int = Field(
        default=100,
        description=(
            "Read-merge attempts before an aggregation conflict is reported; "
            "keep it above the number of writers expected to hit one window at once"
        ),
        gt=0,
    )
    aggregation_retry_backoff_seconds: float = Field(
        default=0.005,
        description="Base delay between aggregation retries, doubled per attempt",
        ge=0,
    )
    aggregation_retry_max_backoff_seconds: float = Field(
        default=0.25,
        description="Upper bound for the randomized delay between aggregation retries",
        ge=0,
    )
    handle_cache_ttl_seconds: int = Field(
        default=3600,
        description="Seconds a resolved actor handle stays cached",
        gt=0,
    )
    plc_directory_url: str = Field(
        default="https://plc.directory",
        description="Base URL of the PLC directory used to resolve DIDs to handles",
        min_length=1,
    )
    handle_resolution_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout applied to each handle resolution request",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "Settings":
        if self.activity_feed_page_size > self.activity_feed_max_page_size:
            raise ValueError(
                "ACTIVITY_FEED_PAGE_SIZE cannot exceed ACTIVITY_FEED_MAX_PAGE_SIZE"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
