"""
In-Memory Storage Implementations

Used by tests and by hosts that keep the ledger only for the
lifetime of the process.
"""

import copy
from typing import Any, Optional
from uuid import UUID

from finance_ledger.models.audit import AuditEvent
from finance_ledger.services.storage.interface import (
    AuditStorageInterface,
    StateStorageInterface,
)


class InMemoryStateStorage(StateStorageInterface):
    """Holds a deep copy of the last blob written."""

    def __init__(self, blob: Optional[dict[str, Any]] = None):
        self._blob = copy.deepcopy(blob)
        self.write_count = 0

    def read_blob(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._blob)

    def write_blob(self, blob: dict[str, Any]) -> None:
        self._blob = copy.deepcopy(blob)
        self.write_count += 1

    def clear(self) -> None:
        self._blob = None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
