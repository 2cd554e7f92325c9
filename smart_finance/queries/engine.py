"""
Query Engine

Derives views over stored transactions. Every query loads records through
the storage interface once and then filters in memory; no query performs
any other I/O.

Window semantics differ between queries:
- period queries include both ends: start <= ts <= end
- weekly expense queries exclude the end: start <= ts < start + 7 days
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

import structlog

from smart_finance.analysis.balance import operation_direction
from smart_finance.models.transaction import PeriodSummary, TransactionRecord, User
from smart_finance.services.storage import TransactionStorageInterface
from smart_finance.utils.timestamps import parse_timestamp


logger = structlog.get_logger(__name__)

WEEK = timedelta(days=7)
UNCATEGORIZED = "Uncategorized"


class TransactionQueryEngine:
    """
    Executes read-only queries against transaction storage.

    GUARANTEES:
    - Only returns records that exist in storage, in storage order
    - Records with unparseable timestamps are logged and left out of
      time-window results; they never abort a query
    """

    def __init__(self, storage: TransactionStorageInterface):
        self._storage = storage

    def all_transactions(self) -> list[TransactionRecord]:
        return self._storage.read_all()

    def by_username(self, username: str) -> list[TransactionRecord]:
        return self._storage.read_by_user(username)

    def by_user(self, user: Optional[User]) -> list[TransactionRecord]:
        """Get a user's transactions; no user means no transactions."""
        if user is None:
            return []
        return self._storage.read_by_user(user.username)

    def _in_window(
        self,
        records: list[TransactionRecord],
        contains: Callable[[datetime], bool],
        query: str,
    ) -> list[TransactionRecord]:
        """Keep records whose parsed timestamp satisfies `contains`."""
        matched = []
        for record in records:
            try:
                ts = parse_timestamp(record.timestamp)
            except ValueError as e:
                logger.warning(
                    "timestamp_parse_failed",
                    query=query,
                    username=record.account_username,
                    timestamp=record.timestamp,
                    error=str(e),
                )
                continue
            if contains(ts):
                matched.append(record)
        return matched

    def by_user_in_period(
        self,
        username: str,
        start: datetime,
        end: datetime,
    ) -> list[TransactionRecord]:
        """
        Get a user's transactions between start and end.

        Both ends are inclusive.
        """
        return self._in_window(
            self._storage.read_by_user(username),
            lambda ts: start <= ts <= end,
            query="period",
        )

    def weekly_expenses(
        self,
        username: str,
        start_of_week: datetime,
    ) -> list[TransactionRecord]:
        """
        Get a user's expenses in the 7 days starting at start_of_week.

        The start is inclusive and the end (start + 7 days) is exclusive.
        Operation matching is case-insensitive.
        """
        end_of_week = start_of_week + WEEK
        expenses = [r for r in self._storage.read_by_user(username) if r.is_expense]
        return self._in_window(
            expenses,
            lambda ts: start_of_week <= ts < end_of_week,
            query="weekly_expenses",
        )

    def summarize_period(
        self,
        username: str,
        start: datetime,
        end: datetime,
    ) -> PeriodSummary:
        """
        Total a user's inbound and outbound amounts over an inclusive window.

        Expenses are also broken down by category.
        """
        records = self.by_user_in_period(username, start, end)

        inbound = Decimal("0")
        outbound = Decimal("0")
        by_category: dict[str, Decimal] = {}

        for record in records:
            direction = operation_direction(record.operation)
            if direction > 0:
                inbound += record.amount
            elif direction < 0:
                outbound += record.amount

            if record.is_expense:
                key = record.category or UNCATEGORIZED
                by_category[key] = by_category.get(key, Decimal("0")) + record.amount

        return PeriodSummary(
            username=username,
            start=start,
            end=end,
            record_count=len(records),
            total_inbound=inbound,
            total_outbound=outbound,
            expenses_by_category=by_category,
        )

