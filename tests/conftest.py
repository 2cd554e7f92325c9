"""
Shared fixtures.

Every test gets its own transactions file under tmp_path, so no test ever
touches the default transactions.csv in the working directory.
"""

from pathlib import Path

import pytest

from smart_finance.config import get_settings
from smart_finance.controller import TransactionController, create_controller
from smart_finance.services.storage import CSV_HEADER, CsvTransactionStore, InMemoryAuditStorage


@pytest.fixture(autouse=True)
def _isolate_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the default transactions file at the test's temp dir."""
    monkeypatch.setenv("SMART_FINANCE_TRANSACTIONS_FILE", str(tmp_path / "default.csv"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def csv_path(tmp_path: Path) -> Path:
    return tmp_path / "transactions.csv"


@pytest.fixture
def store(csv_path: Path) -> CsvTransactionStore:
    return CsvTransactionStore(csv_path)


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def controller(csv_path: Path, audit_storage: InMemoryAuditStorage) -> TransactionController:
    return create_controller(csv_path, audit_storage=audit_storage)


@pytest.fixture
def write_csv():
    """Write a header plus the given data lines to a file."""
    def _write(path: Path, *lines: str, header: str = CSV_HEADER) -> Path:
        path.write_text("".join(line + "\n" for line in (header, *lines)), encoding="utf-8")
        return path
    return _write
