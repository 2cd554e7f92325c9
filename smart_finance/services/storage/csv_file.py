"""
Flat-File Transaction Storage

The transaction log is a single comma-delimited text file:
- line 1 is always the header (never treated as data)
- every following line is one record (see codec.py)

TRADEOFFS:
- Every read loads the whole file; every removal rewrites the whole file
- No locking: concurrent writers race and the last writer wins
- Suitable for a single process with one writer at a time

Reads never raise on I/O trouble. The one exception that does escape is
MalformedAmountError: a row whose amount is not a number aborts the read.
Skipping such a row instead would drop it from disk on the next rewrite.
"""

import os
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from smart_finance.config import get_settings
from smart_finance.models.transaction import TransactionRecord
from smart_finance.services.storage import codec
from smart_finance.services.storage.interface import TransactionStorageInterface
from smart_finance.validation import TransactionValidator


logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class CsvTransactionStore(TransactionStorageInterface):
    """
    Transaction storage backed by one delimited file.

    The store is the only component that opens the file. The path is fixed
    per instance; use with_path() for a store bound to another file.
    """

    def __init__(
        self,
        path: Optional[PathLike] = None,
        validator: Optional[TransactionValidator] = None,
    ):
        """
        Initialize the store.

        Args:
            path: Backing file. If None, the configured default is used.
            validator: Validator applied before every append.
        """
        self._path = Path(path) if path is not None else get_settings().transactions_path
        self._validator = validator or TransactionValidator()

    @property
    def path(self) -> Path:
        return self._path

    def with_path(self, path: PathLike) -> "CsvTransactionStore":
        """Get a store for another file sharing this store's validator."""
        return CsvTransactionStore(path, validator=self._validator)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def _read_data_lines(self) -> list[str]:
        """Read every line after the header."""
        with self._path.open("r", encoding="utf-8") as fh:
            fh.readline()  # header
            return [line.rstrip("\n") for line in fh]

    def _load(self, owner_filter: Optional[Callable[[str], bool]] = None) -> list[TransactionRecord]:
        try:
            lines = self._read_data_lines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "transactions_read_failed",
                path=str(self._path),
                error=str(e),
            )
            return []

        records = []
        for line in lines:
            fields = codec.split_fields(line)
            if fields is None:
                continue  # malformed row
            if owner_filter is not None and not owner_filter(fields[0]):
                continue
            records.append(codec.from_fields(fields, line))
        return records

    def read_all(self) -> list[TransactionRecord]:
        """Read every stored transaction in file order."""
        return self._load()

    def read_by_user(self, username: str) -> list[TransactionRecord]:
        """Read one user's transactions (exact username match)."""
        return self._load(lambda owner: owner == username)

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _needs_header(self) -> bool:
        return not self._path.exists() or self._path.stat().st_size == 0

    def _ends_without_newline(self) -> bool:
        with self._path.open("rb") as fh:
            fh.seek(-1, 2)
            return fh.read(1) not in (b"\n", b"\r")

    def _append_lines(self, lines: list[str]) -> bool:
        """
        Append lines, creating the file with a header if needed.

        Appends are not retried: a partial append followed by a retry
        would duplicate rows.
        """
        try:
            if self._needs_header():
                prefix = codec.CSV_HEADER + "\n"
            elif self._ends_without_newline():
                prefix = "\n"
            else:
                prefix = ""
            with self._path.open("a", encoding="utf-8", newline="\n") as fh:
                fh.write(prefix + "".join(line + "\n" for line in lines))
        except OSError as e:
            logger.error(
                "transactions_write_failed",
                path=str(self._path),
                mode="append",
                error=str(e),
            )
            return False
        return True

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _rewrite(self, records: list[TransactionRecord]) -> None:
        """
        Replace the whole file with the header plus the given records.

        The new content goes to a sibling temp file that is then moved over
        the original, so a failed attempt leaves the original untouched.
        """
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8", newline="\n") as fh:
                fh.write(codec.CSV_HEADER + "\n")
                for record in records:
                    fh.write(codec.encode(record) + "\n")
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def append(self, record: TransactionRecord) -> bool:
        """Validate and append one record."""
        result = self._validator.validate_record(record)
        if not result.is_valid:
            logger.info(
                "transaction_append_rejected",
                path=str(self._path),
                username=record.account_username,
                fields=result.fields_with_errors(),
            )
            return False

        return self._append_lines([codec.encode(record)])

    def append_many(self, records: Iterable[TransactionRecord]) -> int:
        """Validate every record, then append them all in one write."""
        records = list(records)
        if not records:
            return 0

        for record in records:
            result = self._validator.validate_record(record)
            if not result.is_valid:
                logger.info(
                    "transaction_batch_rejected",
                    path=str(self._path),
                    username=record.account_username,
                    timestamp=record.timestamp,
                    fields=result.fields_with_errors(),
                )
                return 0

        if not self._append_lines([codec.encode(r) for r in records]):
            return 0
        return len(records)

    def remove_by_user_and_timestamp(self, username: str, timestamp: str) -> bool:
        """
        Remove a user's records at an exact timestamp string.

        Every record matching both values is removed, so two records of the
        same user sharing a timestamp go together. Rows skipped as malformed
        during the read are not written back.
        """
        records = self.read_all()
        kept = [r for r in records if r.key() != (username, timestamp)]
        removed = len(records) - len(kept)

        if removed == 0:
            return False

        try:
            self._rewrite(kept)
        except OSError as e:
            logger.error(
                "transactions_write_failed",
                path=str(self._path),
                mode="rewrite",
                error=str(e),
            )
            return False

        logger.info(
            "transactions_removed",
            path=str(self._path),
            username=username,
            timestamp=timestamp,
            removed_count=removed,
        )
        return True
