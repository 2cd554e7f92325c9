"""
Shared timestamp format.

Every component that reads or compares transaction timestamps goes
through this module, so the storage format is defined exactly once.

Format: yyyy/MM/dd HH:mm (4-digit year, zero-padded fields, 24-hour clock).
"""

from datetime import datetime
from typing import Optional


TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"


def parse_timestamp(value: str) -> datetime:
    """
    Parse a stored timestamp.

    Raises ValueError if the value does not match the format exactly.
    strptime alone accepts unpadded fields ("2024/5/1 9:00"), so the
    parsed value must format back to the original string.
    """
    parsed = datetime.strptime(value, TIMESTAMP_FORMAT)
    if parsed.strftime(TIMESTAMP_FORMAT) != value:
        raise ValueError(
            f"Timestamp {value!r} does not match format {TIMESTAMP_FORMAT!r}"
        )
    return parsed


def try_parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp, returning None instead of raising."""
    if not value:
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime for storage."""
    return value.strftime(TIMESTAMP_FORMAT)


def is_valid_timestamp(value: Optional[str]) -> bool:
    return try_parse_timestamp(value) is not None
