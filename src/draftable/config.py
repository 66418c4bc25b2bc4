"""Configuration module for draftable settings.

Read when a record type is mapped (default column and scope names) and when
logging is configured.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DRAFTABLE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Default publish timestamp column; record types override with PUBLISHED_AT_COLUMN
    published_at_column: str = "published_at"
    # Name of the default-visibility global scope
    published_scope_name: str = "published"

    log_level: str = "INFO"


settings = Settings()
