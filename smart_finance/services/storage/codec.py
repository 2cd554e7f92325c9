"""
Row codec for the transactions file.

One record is one line of 13 comma-separated fields. Fields are joined
and split on a bare comma: there is no quoting, so a value containing a
comma corrupts its row on the next read.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from smart_finance.models.transaction import TransactionRecord
from smart_finance.services.storage.interface import MalformedAmountError


DELIMITER = ","

# Column order of the backing file
TRANSACTION_COLUMNS = [
    "accountUsername",
    "operation",
    "amount",
    "timestamp",
    "merchant",
    "type",
    "remark",
    "category",
    "paymentMethod",
    "location",
    "tag",
    "attachment",
    "recurrence",
]

FIELD_COUNT = len(TRANSACTION_COLUMNS)

CSV_HEADER = DELIMITER.join(TRANSACTION_COLUMNS)


def encode(record: TransactionRecord) -> str:
    """Convert a record to one line of the file (without newline)."""
    return DELIMITER.join([
        record.account_username,
        record.operation,
        str(record.amount),
        record.timestamp,
        record.merchant,
        record.type,
        record.remark,
        record.category,
        record.payment_method,
        record.location,
        record.tag,
        record.attachment,
        record.recurrence,
    ])


def split_fields(line: str) -> Optional[list[str]]:
    """
    Split a line into its fields.

    Trailing empty fields are kept. Returns None when the line has fewer
    than 13 fields; extra fields beyond 13 are ignored by from_fields.
    """
    fields = line.split(DELIMITER)
    if len(fields) < FIELD_COUNT:
        return None
    return fields


def parse_amount(raw: str, line: str = "") -> Decimal:
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        raise MalformedAmountError(raw, line or raw)
    if not amount.is_finite():
        raise MalformedAmountError(raw, line or raw)
    return amount


def from_fields(fields: list[str], line: str = "") -> TransactionRecord:
    """
    Build a record from split fields.

    Raises:
        MalformedAmountError: If the amount column is not a number
    """
    return TransactionRecord(
        account_username=fields[0],
        operation=fields[1],
        amount=parse_amount(fields[2], line),
        timestamp=fields[3],
        merchant=fields[4],
        type=fields[5],
        remark=fields[6],
        category=fields[7],
        payment_method=fields[8],
        location=fields[9],
        tag=fields[10],
        attachment=fields[11],
        recurrence=fields[12],
    )


def decode(line: str) -> Optional[TransactionRecord]:
    """
    Convert one line of the file to a record.

    Returns None for rows with too few columns (skipped, not an error).

    Raises:
        MalformedAmountError: If the amount column is not a number
    """
    fields = split_fields(line)
    if fields is None:
        return None
    return from_fields(fields, line)
