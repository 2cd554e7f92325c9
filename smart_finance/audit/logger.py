"""
Audit Logger

Every mutation of the transaction log is logged. This provides:
1. Traceability of adds, removals and imports
2. Debugging capability
3. A history of balance recalculations and anomaly flags

The audit logger:
- Always logs locally through structlog
- Persists to an AuditStorageInterface when one is configured
- Never raises if persistence fails
"""

import logging
from typing import Optional

import structlog

from smart_finance.config import get_settings
from smart_finance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from smart_finance.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output through the stdlib root logger.

    Uses the configured log level unless one is given; debug_mode forces
    DEBUG.
    """
    settings = get_settings()
    if settings.debug_mode:
        level = "DEBUG"
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, (level or settings.log_level).upper()),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("smart_finance.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_added(
        self,
        username: str,
        timestamp: str,
        operation: str,
        amount: str,
    ) -> None:
        event = AuditEventBuilder.transaction_added(
            username=username,
            timestamp=timestamp,
            operation=operation,
            amount=amount,
        )
        self.log(event)

    def log_transaction_rejected(
        self,
        username: Optional[str],
        issues: list[dict],
    ) -> None:
        event = AuditEventBuilder.transaction_rejected(
            username=username,
            issues=issues,
        )
        self.log(event)

    def log_transaction_removed(self, username: str, timestamp: str) -> None:
        self.log(AuditEventBuilder.transaction_removed(username, timestamp))

    def log_transaction_remove_missed(self, username: str, timestamp: str) -> None:
        self.log(AuditEventBuilder.transaction_remove_missed(username, timestamp))

    def log_transactions_imported(
        self,
        source: str,
        destination: str,
        imported_count: int,
        skipped_count: int,
    ) -> None:
        event = AuditEventBuilder.transactions_imported(
            source=source,
            destination=destination,
            imported_count=imported_count,
            skipped_count=skipped_count,
        )
        self.log(event)

    def log_balance_recalculated(
        self,
        username: str,
        balance: str,
        previous_balance: Optional[str] = None,
    ) -> None:
        event = AuditEventBuilder.balance_recalculated(
            username=username,
            balance=balance,
            previous_balance=previous_balance,
        )
        self.log(event)

    def log_abnormal_activity(self, username: str, flagged: list[dict]) -> None:
        self.log(AuditEventBuilder.abnormal_activity_detected(username, flagged))

    def log_storage_error(
        self,
        operation: str,
        path: str,
        error_message: str,
    ) -> None:
        """Log a storage failure."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            path=path,
            error_message=error_message,
        )
        self.log(event)
