"""
Provider settings using Pydantic.

Provides environment-based configuration loading with SLOKEEPER_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Provider settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SLOKEEPER_",
        extra="ignore",
    )

    # Sumo Logic API (deployment-specific endpoint, including the version prefix)
    api_url: str = "https://api.sumologic.com/api/v1"
    access_id: str | None = None
    access_key: str | None = None

    # Alias resolved when an SLO has no parent folder
    root_folder_alias: str = "root"

    # HTTP client settings
    http_timeout: float = 30.0
    http_max_retries: int = 3
    http_retry_backoff_factor: float = 2.0

    # Circuit breaker
    circuit_failure_threshold: int = 5
    circuit_recovery_timeout: int = 60

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
