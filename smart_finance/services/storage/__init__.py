"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Transactions live in a flat delimited file; audit events default to memory.
"""

from smart_finance.services.storage.interface import (
    AuditStorageInterface,
    MalformedAmountError,
    StorageError,
    TransactionStorageInterface,
)
from smart_finance.services.storage.codec import (
    CSV_HEADER,
    FIELD_COUNT,
    TRANSACTION_COLUMNS,
)
from smart_finance.services.storage.csv_file import CsvTransactionStore
from smart_finance.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "MalformedAmountError",
    "StorageError",
    # File format
    "CSV_HEADER",
    "FIELD_COUNT",
    "TRANSACTION_COLUMNS",
    # Implementations
    "CsvTransactionStore",
    "InMemoryAuditStorage",
]
