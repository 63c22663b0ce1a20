"""Tests for the transaction projection."""

import pytest
from decimal import Decimal

from finance_ledger.models import CategoryType, TransactionType
from finance_ledger.queries import transactions_with_details
from finance_ledger.queries.projection import PLACEHOLDER_CREATED_AT


class TestTransactionsWithDetails:
    """Tests for joining transactions with their references."""

    def test_resolved_references(self, base_state, make_transaction):
        """Test category and account are attached."""
        state = base_state.model_copy(update={"transactions": (make_transaction(),)})
        [row] = transactions_with_details(state)

        assert row.category.name == "Food & Dining"
        assert row.account.name == "Checking"
        assert row.to_account is None
        assert row.has_dangling_reference is False

    def test_transfer_destination_attached(self, base_state, make_transaction):
        """Test transfers carry their destination account."""
        transfer = make_transaction(
            type=TransactionType.TRANSFER,
            category_id="transfer-out",
            to_account_id="B",
        )
        state = base_state.model_copy(update={"transactions": (transfer,)})
        [row] = transactions_with_details(state)
        assert row.to_account.name == "Savings"

    def test_dangling_references_get_placeholders(self, base_state, make_transaction):
        """Test missing entities are replaced and flagged, not raised."""
        orphan = make_transaction(
            type=TransactionType.INCOME,
            category_id="deleted-cat",
            account_id="deleted-acc",
            amount=Decimal("5"),
        )
        healthy = make_transaction()
        state = base_state.model_copy(update={"transactions": (orphan, healthy)})

        rows = transactions_with_details(state)

        assert rows[0].has_dangling_reference is True
        assert rows[0].category.name == "Unknown category"
        assert rows[0].category.id == "deleted-cat"
        assert rows[0].category.type == CategoryType.INCOME
        assert rows[0].account.name == "Unknown account"
        assert rows[0].account.id == "deleted-acc"
        assert rows[0].account.created_at == PLACEHOLDER_CREATED_AT
        assert rows[1].has_dangling_reference is False

    def test_placeholders_are_deterministic(self, base_state, make_transaction):
        """Test projecting twice yields equal rows."""
        state = base_state.model_copy(
            update={"transactions": (make_transaction(account_id="gone"),)}
        )
        assert transactions_with_details(state) == transactions_with_details(state)

    def test_projection_keeps_transaction_fields(self, base_state, make_transaction):
        """Test the projected row equals the source transaction field by field."""
        txn = make_transaction(description="Groceries")
        state = base_state.model_copy(update={"transactions": (txn,)})
        [row] = transactions_with_details(state)

        for name in ("id", "type", "amount", "category_id", "account_id", "description", "effective_date"):
            assert getattr(row, name) == getattr(txn, name)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
