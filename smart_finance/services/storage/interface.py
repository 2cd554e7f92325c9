"""
Abstract Storage Interface

Storage operations are defined as abstract interfaces so that:
1. The flat-file store can be replaced without touching query logic
2. Tests can use in-memory storage
3. Business logic stays decoupled from the file format

The interface is intentionally small. There is no update operation:
amending a transaction is remove-then-add.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from smart_finance.models.transaction import TransactionRecord
from smart_finance.models.audit import AuditEvent, AuditEventType


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Read operations never raise on I/O trouble; they return an empty list.
    Write operations report failure with a False/0 return value.
    """

    @abstractmethod
    def read_all(self) -> list[TransactionRecord]:
        """
        Read every stored transaction in storage order.

        Returns:
            All decodable records, or an empty list if storage is unreadable

        Raises:
            MalformedAmountError: If a row's amount cannot be parsed
        """
        pass

    @abstractmethod
    def read_by_user(self, username: str) -> list[TransactionRecord]:
        """
        Read the transactions owned by one user.

        Args:
            username: Exact, case-sensitive account username

        Returns:
            Matching records in storage order
        """
        pass

    @abstractmethod
    def append(self, record: TransactionRecord) -> bool:
        """
        Validate and append a single record.

        Returns:
            True if the record was written, False if it was rejected
            or the write failed
        """
        pass

    @abstractmethod
    def append_many(self, records: Iterable[TransactionRecord]) -> int:
        """
        Validate and append several records in one write.

        Nothing is written unless every record is valid.

        Returns:
            Number of records written
        """
        pass

    @abstractmethod
    def remove_by_user_and_timestamp(self, username: str, timestamp: str) -> bool:
        """
        Remove every record of a user carrying the exact timestamp string.

        Returns:
            True if at least one record was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """Get all events of one type in chronological order."""
        pass

    @abstractmethod
    def get_events_by_user(self, username: str) -> list[AuditEvent]:
        """Get all events for one account in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class MalformedAmountError(StorageError, ValueError):
    """A stored row has an amount that is not a number."""

    def __init__(self, raw_amount: str, line: str):
        self.raw_amount = raw_amount
        self.line = line
        super().__init__(f"Cannot parse amount {raw_amount!r} in row: {line!r}")

