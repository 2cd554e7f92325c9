"""
Audit Models for Smart Finance

Every mutation of the transaction log is recorded as an audit event.
This provides:
1. Traceability of adds, removals and imports
2. Debugging information when a write or read fails
3. A record of balance recalculations and anomaly flags

Audit logs are append-only. Events are never deleted or modified.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REJECTED = "transaction_rejected"
    TRANSACTION_REMOVED = "transaction_removed"
    TRANSACTION_REMOVE_MISSED = "transaction_remove_missed"
    TRANSACTIONS_IMPORTED = "transactions_imported"

    # Derived state
    BALANCE_RECALCULATED = "balance_recalculated"
    ABNORMAL_ACTIVITY_DETECTED = "abnormal_activity_detected"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'user', 'file')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Natural key of the entity (username, timestamp, path)"
    )
    username: Optional[str] = Field(
        default=None,
        description="Account the event relates to"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "username": self.username,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list[str]:
        """
        Convert to a flat row for tabular storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         username, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.username or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added("alice", "2024/05/17 13:00", "Income", "500.0")
        event = AuditEventBuilder.balance_recalculated("alice", "200.0")
    """

    @staticmethod
    def transaction_added(
        username: str,
        timestamp: str,
        operation: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=timestamp,
            username=username,
            description=f"Transaction added: {operation} {amount}",
            details={
                "operation": operation,
                "amount": amount,
            },
        )

    @staticmethod
    def transaction_rejected(
        username: Optional[str],
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            username=username,
            description=f"Transaction rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def transaction_removed(
        username: str,
        timestamp: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVED,
            entity_type="transaction",
            entity_id=timestamp,
            username=username,
            description=f"Removed transaction(s) at {timestamp}",
        )

    @staticmethod
    def transaction_remove_missed(
        username: str,
        timestamp: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REMOVE_MISSED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=timestamp,
            username=username,
            description=f"No transaction found at {timestamp}",
        )

    @staticmethod
    def transactions_imported(
        source: str,
        destination: str,
        imported_count: int,
        skipped_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_IMPORTED,
            entity_type="file",
            entity_id=destination,
            description=f"Imported {imported_count} transaction(s) from {source}",
            details={
                "source": source,
                "imported_count": imported_count,
                "skipped_count": skipped_count,
            },
        )

    @staticmethod
    def balance_recalculated(
        username: str,
        balance: str,
        previous_balance: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_RECALCULATED,
            entity_type="user",
            entity_id=username,
            username=username,
            description=f"Balance recalculated: {balance}",
            details={
                "balance": balance,
                "previous_balance": previous_balance,
            },
        )

    @staticmethod
    def abnormal_activity_detected(
        username: str,
        flagged: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ABNORMAL_ACTIVITY_DETECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            username=username,
            description=f"{len(flagged)} abnormal transaction(s) flagged",
            details={
                "flagged": flagged,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        path: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="file",
            entity_id=path,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )
