"""Services package."""

from smart_finance.services.storage import (
    AuditStorageInterface,
    CsvTransactionStore,
    InMemoryAuditStorage,
    MalformedAmountError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "CsvTransactionStore",
    "InMemoryAuditStorage",
    "MalformedAmountError",
    "StorageError",
    "TransactionStorageInterface",
]
