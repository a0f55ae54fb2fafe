"""
Configuration and settings for the tracker backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings shared by the functions and the FastAPI app."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="TRACKER_USE_IN_MEMORY_BACKENDS"
    )

    # Daily rollover. No cap means one worker per user.
    rollover_max_workers: Optional[int] = Field(
        default=None, validation_alias="ROLLOVER_MAX_WORKERS"
    )
    rollover_interval_seconds: int = Field(
        default=300, validation_alias="ROLLOVER_INTERVAL_SECONDS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
