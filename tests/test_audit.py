"""Tests for the audit logger."""

import pytest

from finance_ledger.audit import AuditLogger, create_correlation_id
from finance_ledger.models import AuditEventBuilder, AuditEventType, AuditSeverity
from finance_ledger.services.storage import InMemoryAuditStorage


class FailingAuditStorage(InMemoryAuditStorage):
    def append_event(self, event):
        raise RuntimeError("audit store offline")


class TestAuditLogger:
    """Tests for AuditLogger."""

    def test_event_persisted(self):
        """Test events reach the configured storage."""
        storage = InMemoryAuditStorage()
        audit = AuditLogger(storage)

        assert audit.log(AuditEventBuilder.account_added("A", "Checking", "100")) is True
        assert [e.event_type for e in storage.events] == [AuditEventType.ACCOUNT_ADDED]

    def test_without_storage(self):
        """Test logging only locally still succeeds."""
        assert AuditLogger().log(AuditEventBuilder.save_failed("disk full")) is True

    def test_storage_failure_does_not_raise(self):
        """Test a broken audit store is reported, not raised."""
        audit = AuditLogger(FailingAuditStorage())
        assert audit.log(AuditEventBuilder.account_updated("A", "Checking")) is False

    def test_log_error(self):
        """Test unexpected errors become SYSTEM_ERROR events."""
        storage = InMemoryAuditStorage()
        correlation_id = create_correlation_id()

        AuditLogger(storage).log_error(
            "StorageError", "disk full", details={"path": "x"}, correlation_id=correlation_id
        )

        event = storage.events[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.correlation_id == correlation_id
        assert event.error_message == "disk full"

    def test_correlation_ids_unique(self):
        """Test each compound operation gets its own id."""
        assert create_correlation_id() != create_correlation_id()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
