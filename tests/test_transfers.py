"""Tests for transfer construction and the legacy pair shim."""

import pytest
from datetime import date
from decimal import Decimal

from finance_ledger.ledger import (
    balances_by_account,
    build_transfer,
    collapse_legacy_transfers,
    find_legacy_transfer_pairs,
)
from finance_ledger.models import TransactionType


def _legacy_pair(make_transaction, amount="30", day=date(2024, 3, 1), description="Move"):
    outgoing = make_transaction(
        type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        category_id="transfer-out",
        account_id="A",
        description=description,
        effective_date=day,
    )
    incoming = make_transaction(
        type=TransactionType.INCOME,
        amount=Decimal(amount),
        category_id="transfer-in",
        account_id="B",
        description=description,
        effective_date=day,
    )
    return outgoing, incoming


class TestBuildTransfer:
    """Tests for canonical transfer construction."""

    def test_default_description(self, checking, savings, now):
        """Test the generated description names both accounts."""
        txn = build_transfer("t1", checking, savings, Decimal("25"), date(2024, 3, 1), now)

        assert txn.type == TransactionType.TRANSFER
        assert txn.account_id == "A"
        assert txn.to_account_id == "B"
        assert txn.category_id == "transfer-out"
        assert txn.description == "Transfer from Checking to Savings"

    def test_explicit_description(self, checking, savings, now):
        """Test a caller-supplied description is kept."""
        txn = build_transfer(
            "t1", checking, savings, Decimal("25"), date(2024, 3, 1), now,
            description="Rainy day fund",
        )
        assert txn.description == "Rainy day fund"

    def test_same_account_rejected(self, checking, now):
        """Test the entity refuses a self-transfer."""
        with pytest.raises(ValueError):
            build_transfer("t1", checking, checking, Decimal("25"), date(2024, 3, 1), now)


class TestLegacyTransferPairs:
    """Tests for collapsing paired transfer legs."""

    def test_pairs_found(self, make_transaction):
        """Test a matching expense/income leg pair is detected."""
        outgoing, incoming = _legacy_pair(make_transaction)
        assert find_legacy_transfer_pairs([outgoing, incoming]) == [(outgoing, incoming)]

    def test_mismatched_legs_not_paired(self, make_transaction):
        """Test legs with different amounts stay separate."""
        outgoing, _ = _legacy_pair(make_transaction, amount="30")
        _, incoming = _legacy_pair(make_transaction, amount="31")
        assert find_legacy_transfer_pairs([outgoing, incoming]) == []
        assert collapse_legacy_transfers([outgoing, incoming]) == (outgoing, incoming)

    def test_collapse_produces_canonical_transfer(self, make_transaction):
        """Test a pair becomes one transfer with the outgoing leg's identity."""
        other = make_transaction(description="Lunch")
        outgoing, incoming = _legacy_pair(make_transaction)

        collapsed = collapse_legacy_transfers([outgoing, other, incoming])

        assert len(collapsed) == 2
        transfer = collapsed[0]
        assert transfer.type == TransactionType.TRANSFER
        assert transfer.id == outgoing.id
        assert transfer.created_at == outgoing.created_at
        assert transfer.account_id == "A"
        assert transfer.to_account_id == "B"
        assert collapsed[1] == other

    def test_collapse_preserves_balances(self, base_state, make_transaction):
        """Test every account balance is unchanged by the collapse."""
        first = _legacy_pair(make_transaction, amount="30")
        second = _legacy_pair(make_transaction, amount="12.34", day=date(2024, 3, 5))
        expense = make_transaction(amount=Decimal("7"))
        transactions = [*first, expense, *second]

        legacy = base_state.model_copy(update={"transactions": tuple(transactions)})
        canonical = base_state.model_copy(
            update={"transactions": collapse_legacy_transfers(transactions)}
        )

        assert len(canonical.transactions) == 3
        assert balances_by_account(legacy) == balances_by_account(canonical)

    def test_each_incoming_leg_used_once(self, make_transaction):
        """Test two identical outgoing legs cannot share one incoming leg."""
        outgoing, incoming = _legacy_pair(make_transaction)
        duplicate, _ = _legacy_pair(make_transaction)

        pairs = find_legacy_transfer_pairs([outgoing, duplicate, incoming])
        assert pairs == [(outgoing, incoming)]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
