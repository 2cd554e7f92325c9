"""
In-memory audit storage.

Keeps audit events in a list for the lifetime of the process. Used when no
durable audit sink is configured, and in tests.
"""

from smart_finance.models.audit import AuditEvent, AuditEventType
from smart_finance.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def __len__(self) -> int:
        return len(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        events = [e for e in self._events if e.event_type == event_type]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_events_by_user(self, username: str) -> list[AuditEvent]:
        events = [e for e in self._events if e.username == username]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        # Newest first
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
