"""Configuration management for LevelList.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once and is
immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LEVELIST_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "LevelList"
    app_version: str = "1.0.0"
    environment: Literal["development", "production", "testing"] = "development"

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    # Storage Settings
    storage_path: str = "./levelist_data"
    collection_key: str = "levelist-games"
    history_key: str = "levelist-search-history"

    # Autosave Settings
    autosave_debounce_seconds: float = Field(
        default=1.0,
        description="Quiet period after the last change before the collection is written",
    )
    autosave_interval_seconds: float = Field(
        default=30.0,
        description="Background flush interval for a buffered snapshot",
    )
    saved_status_reset_seconds: float = 2.0

    # Search Settings
    search_debounce_seconds: float = 0.3
    search_history_idle_seconds: float = Field(
        default=2.0,
        description="Idle time after typing before a query is added to history",
    )
    max_suggestions: int = 8
    max_history_items: int = 10
    recent_suggestions: int = 5

    # Export Settings
    export_base_name: str = "levelist-games"

    @field_validator(
        "autosave_debounce_seconds",
        "autosave_interval_seconds",
        "saved_status_reset_seconds",
        "search_debounce_seconds",
        "search_history_idle_seconds",
    )
    @classmethod
    def validate_positive_duration(cls, v: float) -> float:
        """Timer durations must be strictly positive."""
        if v <= 0:
            raise ValueError("Timer durations must be greater than zero")
        return v

    @field_validator("max_suggestions", "max_history_items", "recent_suggestions")
    @classmethod
    def validate_positive_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Counts must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_storage_keys(self) -> "Settings":
        """The collection and the search history live under separate keys."""
        if self.collection_key == self.history_key:
            raise ValueError(
                "collection_key and history_key must differ; "
                f"both are set to '{self.collection_key}'"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
