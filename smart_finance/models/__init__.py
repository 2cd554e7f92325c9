"""
Data Models Package

This package contains all Pydantic models used in Smart Finance.
All data flowing through the system must conform to these schemas.
"""

from smart_finance.models.transaction import (
    ImportReport,
    INBOUND_OPERATIONS,
    OUTBOUND_OPERATIONS,
    RECOGNIZED_OPERATIONS,
    Operation,
    PeriodSummary,
    TransactionRecord,
    User,
    ValidationIssue,
    ValidationResult,
)
from smart_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "ImportReport",
    "INBOUND_OPERATIONS",
    "OUTBOUND_OPERATIONS",
    "RECOGNIZED_OPERATIONS",
    "Operation",
    "PeriodSummary",
    "TransactionRecord",
    "User",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
