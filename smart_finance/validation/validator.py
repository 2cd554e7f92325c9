"""
Insertion Validation

An add request is accepted only if ALL of these hold:
- username is present and non-empty
- operation is one of the recognized kinds (exact, case-sensitive)
- amount is a finite number strictly greater than zero
- timestamp is present and matches the shared format
- no field contains a line break (one record is one line of the file)

Validation never fixes anything. It reports every issue it finds and the
caller decides; a rejected request must never reach the file.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from smart_finance.models.transaction import (
    RECOGNIZED_OPERATIONS,
    TransactionRecord,
    ValidationIssue,
    ValidationResult,
)
from smart_finance.utils.timestamps import TIMESTAMP_FORMAT, is_valid_timestamp


LINE_BREAKS = frozenset("\r\n")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce an amount to Decimal, or None if it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


class TransactionValidator:
    """Validates add requests and records before they are written."""

    def validate_request(
        self,
        username: Optional[str],
        operation: Optional[str],
        amount: Any,
        timestamp: Optional[str],
        **text_fields: Optional[str],
    ) -> ValidationResult:
        """
        Check the fields of an add request.

        Args:
            text_fields: Free-text columns (merchant, type, remark, ...);
                         only checked for line breaks

        Returns:
            ValidationResult listing every issue found
        """
        issues = []

        # operation and timestamp are covered by their exact-value checks
        for field, value in {"account_username": username, **text_fields}.items():
            if isinstance(value, str) and LINE_BREAKS.intersection(value):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_format",
                    message=f"{field} must not contain a line break",
                ))

        if not username:
            issues.append(ValidationIssue(
                field="account_username",
                issue_type="missing",
                message="Username is required",
            ))

        if not operation:
            issues.append(ValidationIssue(
                field="operation",
                issue_type="missing",
                message="Operation is required",
            ))
        elif operation not in RECOGNIZED_OPERATIONS:
            issues.append(ValidationIssue(
                field="operation",
                issue_type="invalid_value",
                message=(
                    f"Unknown operation {operation!r}. "
                    f"Allowed: {', '.join(sorted(RECOGNIZED_OPERATIONS))}"
                ),
            ))

        parsed_amount = to_decimal(amount)
        if parsed_amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount {amount!r} is not a number",
            ))
        elif not parsed_amount.is_finite() or parsed_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
            ))

        if not timestamp:
            issues.append(ValidationIssue(
                field="timestamp",
                issue_type="missing",
                message="Timestamp is required",
            ))
        elif not is_valid_timestamp(timestamp):
            issues.append(ValidationIssue(
                field="timestamp",
                issue_type="invalid_format",
                message=f"Timestamp {timestamp!r} does not match {TIMESTAMP_FORMAT}",
            ))

        return ValidationResult(issues=issues)

    def validate_record(self, record: TransactionRecord) -> ValidationResult:
        """Check an already-built record against the add rules."""
        return self.validate_request(
            username=record.account_username,
            operation=record.operation,
            amount=record.amount,
            timestamp=record.timestamp,
            merchant=record.merchant,
            type=record.type,
            remark=record.remark,
            category=record.category,
            payment_method=record.payment_method,
            location=record.location,
            tag=record.tag,
            attachment=record.attachment,
            recurrence=record.recurrence,
        )
