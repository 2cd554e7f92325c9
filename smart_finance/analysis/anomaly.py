"""
Anomaly Detector

Flags inbound transfers above a fixed threshold. A record counts as an
inbound transfer when either its operation or its type reads "Transfer In"
(case-insensitive); the amount must be strictly greater than the threshold.

This is a presence check, not a risk score: the result does not depend on
record order.
"""

from decimal import Decimal
from typing import Iterable, Optional

from smart_finance.models.transaction import Operation, TransactionRecord


ABNORMAL_TRANSFER_THRESHOLD = Decimal("500")

_TRANSFER_IN = Operation.TRANSFER_IN.value.lower()


def is_large_inbound_transfer(record: TransactionRecord) -> bool:
    is_transfer_in = (
        record.operation.lower() == _TRANSFER_IN
        or record.type.lower() == _TRANSFER_IN
    )
    return is_transfer_in and record.amount > ABNORMAL_TRANSFER_THRESHOLD


def find_abnormal_transactions(
    username: Optional[str],
    records: Optional[Iterable[TransactionRecord]],
) -> list[TransactionRecord]:
    """Get every flagged record, in the order given."""
    if not username or not records:
        return []
    return [r for r in records if is_large_inbound_transfer(r)]


def has_abnormal_transactions(
    username: Optional[str],
    records: Optional[Iterable[TransactionRecord]],
) -> bool:
    """
    Check a user's records for a large inbound transfer.

    Returns False for a missing/empty username or no records; otherwise
    True as soon as one flagged record is seen.
    """
    if not username or not records:
        return False
    return any(is_large_inbound_transfer(r) for r in records)
