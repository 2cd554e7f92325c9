"""Configuration package."""

from smart_finance.config.settings import (
    DEFAULT_TRANSACTIONS_FILE,
    LedgerSettings,
    get_settings,
)

__all__ = [
    "DEFAULT_TRANSACTIONS_FILE",
    "LedgerSettings",
    "get_settings",
]
