"""Shared fixtures for the finance ledger tests."""

import itertools
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from finance_ledger.audit import AuditLogger
from finance_ledger.config import LedgerSettings
from finance_ledger.ledger.defaults import default_categories
from finance_ledger.models import (
    Account,
    AccountType,
    LedgerState,
    Transaction,
    TransactionType,
)
from finance_ledger.orchestrator import LedgerStore
from finance_ledger.services.storage import InMemoryAuditStorage, InMemoryStateStorage


FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def checking() -> Account:
    return Account(
        id="A",
        name="Checking",
        type=AccountType.BANK,
        balance=Decimal("100"),
        created_at=FIXED_NOW,
    )


@pytest.fixture
def savings() -> Account:
    return Account(
        id="B",
        name="Savings",
        type=AccountType.SAVINGS,
        balance=Decimal("0"),
        created_at=FIXED_NOW,
    )


@pytest.fixture
def make_transaction():
    """Factory for transactions with sensible defaults."""
    counter = itertools.count(1)

    def _make(**overrides) -> Transaction:
        fields = {
            "id": f"t{next(counter)}",
            "type": TransactionType.EXPENSE,
            "amount": Decimal("10"),
            "category_id": "5",
            "account_id": "A",
            "effective_date": date(2024, 3, 1),
            "created_at": FIXED_NOW,
        }
        fields.update(overrides)
        return Transaction(**fields)

    return _make


@pytest.fixture
def base_state(checking, savings) -> LedgerState:
    """Two accounts, the default categories, no transactions."""
    return LedgerState(
        accounts=(checking, savings),
        categories=default_categories(),
    )


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(
        seed_default_data=False,
        collapse_legacy_transfers=False,
        state_file_path="unused-finance-data.json",
    )


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def state_storage() -> InMemoryStateStorage:
    return InMemoryStateStorage()


@pytest.fixture
def store(base_state, state_storage, audit_storage, settings) -> LedgerStore:
    """A store over base_state with deterministic ids and clock."""
    counter = itertools.count(1)
    return LedgerStore(
        state=base_state,
        storage=state_storage,
        audit_logger=AuditLogger(audit_storage),
        id_factory=lambda: f"id-{next(counter)}",
        clock=lambda: FIXED_NOW,
        settings=settings,
    )
