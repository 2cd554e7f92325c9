"""Shared utilities."""

from smart_finance.utils.timestamps import (
    TIMESTAMP_FORMAT,
    format_timestamp,
    is_valid_timestamp,
    parse_timestamp,
    try_parse_timestamp,
)

__all__ = [
    "TIMESTAMP_FORMAT",
    "format_timestamp",
    "is_valid_timestamp",
    "parse_timestamp",
    "try_parse_timestamp",
]
