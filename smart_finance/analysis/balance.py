"""
Balance Calculator

Folds a user's transactions into one signed balance:
- Income, Deposit and Transfer In add their amount
- Expense and Transfer Out subtract their amount
- any other kind contributes nothing

Kinds are matched case-insensitively. The balance is derived on demand and
never written anywhere by this module.
"""

from decimal import Decimal
from typing import Iterable

import structlog

from smart_finance.models.transaction import (
    INBOUND_OPERATIONS,
    OUTBOUND_OPERATIONS,
    TransactionRecord,
)
from smart_finance.services.storage import TransactionStorageInterface


logger = structlog.get_logger(__name__)

ZERO = Decimal("0")

_INBOUND = frozenset(op.lower() for op in INBOUND_OPERATIONS)
_OUTBOUND = frozenset(op.lower() for op in OUTBOUND_OPERATIONS)


def operation_direction(operation: str) -> int:
    """Return +1 for inbound kinds, -1 for outbound kinds, 0 otherwise."""
    kind = operation.lower()
    if kind in _INBOUND:
        return 1
    if kind in _OUTBOUND:
        return -1
    return 0


def signed_amount(record: TransactionRecord) -> Decimal:
    """The record's contribution to its owner's balance."""
    direction = operation_direction(record.operation)
    if direction == 0:
        logger.debug(
            "balance_unrecognized_operation",
            username=record.account_username,
            operation=record.operation,
            timestamp=record.timestamp,
        )
        return ZERO
    return record.amount if direction > 0 else -record.amount


def fold_balance(records: Iterable[TransactionRecord]) -> Decimal:
    """Sum the signed contributions of the given records."""
    return sum((signed_amount(r) for r in records), ZERO)


class BalanceCalculator:
    """Recomputes a user's balance from the transaction log."""

    def __init__(self, storage: TransactionStorageInterface):
        self._storage = storage

    def calculate_balance(self, username: str) -> Decimal:
        """
        Load every record of the user and fold it into a balance.

        Returns Decimal("0") for a user with no transactions.
        """
        return fold_balance(self._storage.read_by_user(username))
