"""
Core Data Models for Smart Finance

These models define the schemas for all data flowing through the system.
They are designed to:
1. Mirror the 13 stored columns one-to-one
2. Be immutable once created (records are never updated in place)
3. Carry validation results back to callers without raising

Stored data is read as-is: a TransactionRecord built from the backing file
is not re-validated. Insert rules live in smart_finance.validation.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Operation(str, Enum):
    """
    Recognized transaction kinds.

    Values are stored verbatim and are case-sensitive in the file.
    """
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER_IN = "Transfer In"
    TRANSFER_OUT = "Transfer Out"
    DEPOSIT = "Deposit"


RECOGNIZED_OPERATIONS = frozenset(op.value for op in Operation)

# Balance direction per kind
INBOUND_OPERATIONS = frozenset({
    Operation.INCOME.value,
    Operation.DEPOSIT.value,
    Operation.TRANSFER_IN.value,
})
OUTBOUND_OPERATIONS = frozenset({
    Operation.EXPENSE.value,
    Operation.TRANSFER_OUT.value,
})


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class TransactionRecord(BaseModel):
    """
    One stored transaction.

    Field order is the column order of the backing file.
    """
    model_config = ConfigDict(frozen=True)

    account_username: str = Field(
        ...,
        description="Owner of the transaction"
    )
    operation: str = Field(
        ...,
        description="Transaction kind (see Operation)"
    )
    amount: Decimal = Field(
        ...,
        description="Amount as stored; positive for accepted inserts"
    )
    timestamp: str = Field(
        ...,
        description="Formatted as yyyy/MM/dd HH:mm"
    )
    merchant: str = ""
    type: str = Field(
        default="",
        description="Free-form sub-classification used by anomaly detection"
    )

    # Optional metadata
    remark: str = ""
    category: str = ""
    payment_method: str = ""
    location: str = ""
    tag: str = ""
    attachment: str = ""
    recurrence: str = ""

    @property
    def is_expense(self) -> bool:
        """Expense check used by filters (case-insensitive)."""
        return self.operation.lower() == Operation.EXPENSE.value.lower()

    def key(self) -> tuple[str, str]:
        """Identity used by removal: (username, exact timestamp string)."""
        return (self.account_username, self.timestamp)


class User(BaseModel):
    """
    Account holder as seen by this package.

    Balance is recomputed by the controller but never persisted here.
    """
    model_config = ConfigDict(validate_assignment=True)

    username: str = Field(
        ...,
        min_length=1,
        description="Account username"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance derived from the transaction log"
    )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'invalid_format')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating an add request."""

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        """Valid when no error-level issue was found."""
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def fields_with_errors(self) -> list[str]:
        return [issue.field for issue in self.issues if issue.severity == "error"]


# =============================================================================
# QUERY MODELS
# =============================================================================

class PeriodSummary(BaseModel):
    """
    Totals for one user over an inclusive time window.

    Built deterministically from stored records by the query engine.
    """

    username: str
    start: datetime
    end: datetime

    record_count: int = Field(
        default=0,
        ge=0,
        description="Number of records in the window"
    )
    total_inbound: Decimal = Decimal("0")
    total_outbound: Decimal = Decimal("0")

    # Expense amounts keyed by category
    expenses_by_category: dict[str, Decimal] = Field(
        default_factory=dict
    )

    @property
    def net(self) -> Decimal:
        return self.total_inbound - self.total_outbound

    @property
    def data_found(self) -> bool:
        return self.record_count > 0

    def largest_expense_category(self) -> Optional[str]:
        """Category with the highest expense total, if any."""
        if not self.expenses_by_category:
            return None
        return max(self.expenses_by_category, key=self.expenses_by_category.get)


class ImportReport(BaseModel):
    """Outcome of importing rows from another transactions file."""

    source: str
    destination: str

    success: bool
    error_message: Optional[str] = None

    imported_count: int = Field(
        default=0,
        ge=0,
        description="Rows appended to the destination"
    )
    skipped_count: int = Field(
        default=0,
        ge=0,
        description="Rows left out (too few columns, bad amount, failed validation)"
    )
