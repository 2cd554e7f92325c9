"""
Configuration Management for Smart Finance

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. Every value can be overridden with a
SMART_FINANCE_* environment variable or a .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TRANSACTIONS_FILE = "transactions.csv"


class LedgerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMART_FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Force DEBUG logging regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for local structured logs"
    )

    # Storage
    transactions_file: str = Field(
        default=DEFAULT_TRANSACTIONS_FILE,
        description="Path to the transactions file (relative to the working directory)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, store upper case."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def transactions_path(self) -> Path:
        """Get the transactions file as a Path."""
        return Path(self.transactions_file)


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
