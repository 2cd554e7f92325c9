"""Derived views: balances and anomaly flags."""

from smart_finance.analysis.anomaly import (
    ABNORMAL_TRANSFER_THRESHOLD,
    find_abnormal_transactions,
    has_abnormal_transactions,
)
from smart_finance.analysis.balance import (
    BalanceCalculator,
    fold_balance,
    operation_direction,
)

__all__ = [
    "ABNORMAL_TRANSFER_THRESHOLD",
    "BalanceCalculator",
    "find_abnormal_transactions",
    "fold_balance",
    "has_abnormal_transactions",
    "operation_direction",
]
