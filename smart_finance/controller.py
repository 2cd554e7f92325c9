"""
Transaction Controller for Smart Finance

Ties the components together and defines the operations exposed to
callers (CLI, GUI, other services):
1. Add (validate → append → audit)
2. Remove (rewrite → recompute balance → audit)
3. Import (read source → validate rows → append → audit)
4. Read, period and weekly queries, balance, anomaly check

The controller enforces the boundaries:
- Nothing reaches the file without passing validation
- A removal is always followed by a balance recomputation
- Every mutation is audited
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional, Union

from smart_finance.analysis import (
    BalanceCalculator,
    find_abnormal_transactions,
    has_abnormal_transactions,
)
from smart_finance.audit import AuditLogger
from smart_finance.importer import import_transactions
from smart_finance.models.transaction import (
    PeriodSummary,
    TransactionRecord,
    User,
)
from smart_finance.queries import TransactionQueryEngine
from smart_finance.services.storage import (
    CSV_HEADER,
    AuditStorageInterface,
    CsvTransactionStore,
    InMemoryAuditStorage,
)
from smart_finance.validation import TransactionValidator, to_decimal


class TransactionController:
    """
    Entry point for all transaction operations.

    Owns one store (and therefore one backing file). Queries, balance
    calculation and anomaly checks all read through that store.
    """

    CSV_HEADER = CSV_HEADER

    def __init__(
        self,
        store: Optional[CsvTransactionStore] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._validator = validator or TransactionValidator()
        self._store = store or CsvTransactionStore(validator=self._validator)
        self._queries = TransactionQueryEngine(self._store)
        self._balances = BalanceCalculator(self._store)
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def store(self) -> CsvTransactionStore:
        return self._store

    @property
    def queries(self) -> TransactionQueryEngine:
        return self._queries

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add_transaction(
        self,
        username: Optional[str],
        operation: Optional[str],
        amount: Any,
        timestamp: Optional[str],
        merchant: Optional[str] = "",
        transaction_type: Optional[str] = "",
        **metadata: str,
    ) -> bool:
        """
        Validate and store a new transaction.

        Args:
            metadata: Optional remark, category, payment_method, location,
                      tag, attachment, recurrence

        Returns:
            True if the transaction was written
        """
        result = self._validator.validate_request(
            username,
            operation,
            amount,
            timestamp,
            merchant=merchant,
            type=transaction_type,
            **metadata,
        )
        if not result.is_valid:
            self._audit_logger.log_transaction_rejected(
                username=username,
                issues=[issue.model_dump() for issue in result.issues],
            )
            return False

        record = TransactionRecord(
            account_username=username,
            operation=operation,
            amount=to_decimal(amount),
            timestamp=timestamp,
            merchant=merchant or "",
            type=transaction_type or "",
            **{key: value or "" for key, value in metadata.items()},
        )

        if not self._store.append(record):
            self._audit_logger.log_storage_error(
                operation="append",
                path=str(self._store.path),
                error_message="Transaction could not be written",
            )
            return False

        self._audit_logger.log_transaction_added(
            username=record.account_username,
            timestamp=record.timestamp,
            operation=record.operation,
            amount=str(record.amount),
        )
        return True

    def remove_transaction(
        self,
        username: str,
        timestamp: str,
        user: Optional[User] = None,
    ) -> bool:
        """
        Remove a user's transaction(s) at an exact timestamp.

        On success the balance is recomputed from the remaining records and,
        when a user is given, assigned to user.balance.

        Returns:
            True if at least one transaction was removed
        """
        if not self._store.remove_by_user_and_timestamp(username, timestamp):
            self._audit_logger.log_transaction_remove_missed(username, timestamp)
            return False

        self._audit_logger.log_transaction_removed(username, timestamp)

        balance = self._balances.calculate_balance(username)
        previous = None
        if user is not None:
            previous = str(user.balance)
            user.balance = balance

        self._audit_logger.log_balance_recalculated(
            username=username,
            balance=str(balance),
            previous_balance=previous,
        )
        return True

    def import_transactions(
        self,
        source: Union[str, Path],
        dest_path: Optional[Union[str, Path]] = None,
    ) -> int:
        """
        Import rows from another transactions file.

        Args:
            source: File to read (header + 13-column rows)
            dest_path: File to append to; defaults to this controller's file

        Returns:
            Number of rows imported
        """
        destination = dest_path if dest_path is not None else self._store.path
        report = import_transactions(source, destination, validator=self._validator)

        if report.success:
            self._audit_logger.log_transactions_imported(
                source=report.source,
                destination=report.destination,
                imported_count=report.imported_count,
                skipped_count=report.skipped_count,
            )
        else:
            self._audit_logger.log_storage_error(
                operation="import",
                path=report.destination,
                error_message=report.error_message or "Import failed",
            )
        return report.imported_count

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def read_transactions(self, username: str) -> list[TransactionRecord]:
        return self._queries.by_username(username)

    def transactions_for_user(self, user: Optional[User]) -> list[TransactionRecord]:
        return self._queries.by_user(user)

    def all_transactions(self) -> list[TransactionRecord]:
        return self._queries.all_transactions()

    def transactions_in_period(
        self,
        username: str,
        start: datetime,
        end: datetime,
    ) -> list[TransactionRecord]:
        return self._queries.by_user_in_period(username, start, end)

    def weekly_expenses(
        self,
        username: str,
        start_of_week: datetime,
    ) -> list[TransactionRecord]:
        return self._queries.weekly_expenses(username, start_of_week)

    def summarize_period(
        self,
        username: str,
        start: datetime,
        end: datetime,
    ) -> PeriodSummary:
        return self._queries.summarize_period(username, start, end)

    def calculate_user_balance(self, username: str) -> Decimal:
        return self._balances.calculate_balance(username)

    def has_abnormal_transactions(
        self,
        username: Optional[str],
        records: Optional[list[TransactionRecord]],
    ) -> bool:
        """
        Check records for a large inbound transfer.

        Flagged records are written to the audit log.
        """
        if not has_abnormal_transactions(username, records):
            return False

        flagged = find_abnormal_transactions(username, records)
        self._audit_logger.log_abnormal_activity(
            username=username,
            flagged=[
                {
                    "timestamp": r.timestamp,
                    "operation": r.operation,
                    "type": r.type,
                    "amount": str(r.amount),
                }
                for r in flagged
            ],
        )
        return True


def create_controller(
    transactions_file: Optional[Union[str, Path]] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> TransactionController:
    """
    Factory function to create a controller and its components.

    Args:
        transactions_file: Backing file. If None, the configured default
                           is used.
        audit_storage: Where audit events are kept. Defaults to memory.
    """
    validator = TransactionValidator()
    store = CsvTransactionStore(transactions_file, validator=validator)
    audit_logger = AuditLogger(audit_storage if audit_storage is not None else InMemoryAuditStorage())
    return TransactionController(
        store=store,
        validator=validator,
        audit_logger=audit_logger,
    )
