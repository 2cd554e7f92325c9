"""
Transaction Import

Copies rows from another transactions file (same 13-column layout, with a
header line) into a destination transactions file.

A source row is imported only if it:
1. has at least 13 fields
2. has a numeric amount
3. passes the same validation as a manual add

Everything else is skipped and counted. Accepted rows are appended in a
single write, so a failed import leaves the destination unchanged.
"""

from pathlib import Path
from typing import Optional, Union

import structlog

from smart_finance.models.transaction import ImportReport
from smart_finance.services.storage import CsvTransactionStore, MalformedAmountError
from smart_finance.services.storage import codec
from smart_finance.validation import TransactionValidator


logger = structlog.get_logger(__name__)


def import_transactions(
    source: Union[str, Path],
    dest_path: Union[str, Path],
    validator: Optional[TransactionValidator] = None,
) -> ImportReport:
    """
    Import the rows of `source` into the transactions file at `dest_path`.

    The destination is created with a header if it does not exist.

    Returns:
        ImportReport with imported and skipped counts
    """
    source = Path(source)
    validator = validator or TransactionValidator()

    try:
        with source.open("r", encoding="utf-8") as fh:
            fh.readline()  # header
            lines = [line.rstrip("\n") for line in fh]
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "import_source_unreadable",
            source=str(source),
            error=str(e),
        )
        return ImportReport(
            source=str(source),
            destination=str(dest_path),
            success=False,
            error_message=str(e),
        )

    accepted = []
    skipped = 0
    for line in lines:
        if not line.strip():
            continue

        fields = codec.split_fields(line)
        if fields is None:
            skipped += 1
            continue

        try:
            record = codec.from_fields(fields, line)
        except MalformedAmountError as e:
            logger.info("import_row_skipped", reason="amount", error=str(e))
            skipped += 1
            continue

        result = validator.validate_record(record)
        if not result.is_valid:
            logger.info(
                "import_row_skipped",
                reason="validation",
                fields=result.fields_with_errors(),
                username=record.account_username,
                timestamp=record.timestamp,
            )
            skipped += 1
            continue

        accepted.append(record)

    store = CsvTransactionStore(dest_path, validator=validator)
    imported = store.append_many(accepted)
    success = imported == len(accepted)

    logger.info(
        "import_finished",
        source=str(source),
        destination=str(dest_path),
        imported_count=imported,
        skipped_count=skipped,
        success=success,
    )

    return ImportReport(
        source=str(source),
        destination=str(dest_path),
        success=success,
        error_message=None if success else "Failed to write destination file",
        imported_count=imported,
        skipped_count=skipped,
    )
