"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted as ONE whole-state blob.
There are no per-entity reads or writes; the store serializes the
entire LedgerState and hands it over. This allows us to:
1. Use a JSON file on disk for a single-user desktop setup
2. Use in-memory storage for testing
3. Swap in any key/value backend later without touching the ledger

Audit events are stored separately and are append-only.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from uuid import UUID

from finance_ledger.errors import StorageError
from finance_ledger.models.audit import AuditEvent


class StateStorageInterface(ABC):
    """
    Abstract interface for whole-state persistence.

    The blob is the JSON-ready persisted layout produced by
    finance_ledger.services.dataio.dump_state.
    """

    @abstractmethod
    def read_blob(self) -> Optional[dict[str, Any]]:
        """
        Read the stored blob.

        Returns:
            The decoded blob, or None when nothing has been saved yet

        Raises:
            StorageError: If the stored data cannot be read or decoded
        """
        pass

    @abstractmethod
    def write_blob(self, blob: dict[str, Any]) -> None:
        """
        Replace the stored blob.

        Args:
            blob: JSON-ready persisted layout

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored blob, if any."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one account delete cascade).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'account', 'transaction')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


__all__ = [
    "AuditStorageInterface",
    "StateStorageInterface",
    "StorageError",
]
