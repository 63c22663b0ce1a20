"""
Audit Models for Finance Ledger

Every mutation the store commits, every refused mutation and every
import/export is recorded as an AuditEvent. This provides:
1. Traceability of how balances came to be what they are
2. Debugging information when an import is rejected
3. Ability to reconstruct what the user did in a session

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_ledger.models.entities import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every store operation has its own event type.
    """
    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSFER_RECORDED = "transfer_recorded"

    # Refusals
    VALIDATION_FAILED = "validation_failed"
    DELETE_REFUSED = "delete_refused"

    # Whole-state operations
    DATA_IMPORTED = "data_imported"
    IMPORT_FAILED = "import_failed"
    DATA_EXPORTED = "data_exported"
    DATA_CLEARED = "data_cleared"
    DEFAULTS_SEEDED = "defaults_seeded"
    PREFERENCES_CHANGED = "preferences_changed"

    # Persistence
    STATE_SAVED = "state_saved"
    STATE_LOADED = "state_loaded"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


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
        default_factory=utc_now,
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
        description="Type of entity (e.g., 'account', 'transaction', 'ledger')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one account delete cascade)"
    )

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
    error_code: Optional[str] = None
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
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_added(account_id, name)
        event = AuditEventBuilder.delete_refused("category", category_id, reason)
    """

    @staticmethod
    def account_added(account_id: str, name: str, opening_balance: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_ADDED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account added: {name}",
            details={"name": name, "opening_balance": opening_balance},
        )

    @staticmethod
    def account_updated(account_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            description=f"Account updated: {name}",
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        removed_transaction_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=(
                f"Account deleted with {len(removed_transaction_ids)} "
                f"dependent transactions"
            ),
            details={"removed_transaction_ids": removed_transaction_ids},
        )

    @staticmethod
    def category_changed(
        event_type: AuditEventType,
        category_id: str,
        name: str,
    ) -> AuditEvent:
        verb = {
            AuditEventType.CATEGORY_ADDED: "added",
            AuditEventType.CATEGORY_UPDATED: "updated",
            AuditEventType.CATEGORY_DELETED: "deleted",
        }.get(event_type, "changed")
        return AuditEvent(
            event_type=event_type,
            entity_type="category",
            entity_id=category_id,
            description=f"Category {verb}: {name}",
        )

    @staticmethod
    def transaction_changed(
        event_type: AuditEventType,
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {transaction_type} {amount}",
            details={"type": transaction_type, "amount": amount},
        )

    @staticmethod
    def transfer_recorded(
        transaction_id: str,
        from_account_id: str,
        to_account_id: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSFER_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transfer of {amount} from {from_account_id} to {to_account_id}",
            details={
                "from_account_id": from_account_id,
                "to_account_id": to_account_id,
                "amount": amount,
            },
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def delete_refused(
        entity_type: str,
        entity_id: str,
        referencing_ids: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=(
                f"Refused to change {entity_type} still referenced by "
                f"{len(referencing_ids)} transactions"
            ),
            details={"referencing_transaction_ids": referencing_ids},
        )

    @staticmethod
    def data_imported(
        accounts: int,
        categories: int,
        transactions: int,
        integrity_warnings: int = 0,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            severity=AuditSeverity.WARNING if integrity_warnings else AuditSeverity.INFO,
            entity_type="ledger",
            description=(
                f"Imported {accounts} accounts, {categories} categories, "
                f"and {transactions} transactions"
            ),
            details={
                "accounts": accounts,
                "categories": categories,
                "transactions": transactions,
                "integrity_warnings": integrity_warnings,
            },
        )

    @staticmethod
    def import_failed(problems: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            description=f"Import rejected with {len(problems)} problems",
            error_message="; ".join(problems)[:1000],
            details={"problems": problems},
        )

    @staticmethod
    def ledger_event(
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="ledger",
            description=description,
            details=details or {},
        )

    @staticmethod
    def save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="ledger",
            description="Saving ledger state failed",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
