"""Tests for the two-stage validator and integrity checks."""

import pytest
from datetime import date
from decimal import Decimal

from finance_ledger.config import LedgerSettings
from finance_ledger.errors import ValidationError
from finance_ledger.models import (
    AccountInput,
    CategoryInput,
    LedgerState,
    TransactionInput,
    TransactionType,
)
from finance_ledger.validation import (
    LedgerValidator,
    check_integrity,
    is_valid_account,
    is_valid_transaction,
    transaction_issues,
)


@pytest.fixture
def validator(settings) -> LedgerValidator:
    return LedgerValidator(settings, today=lambda: date(2024, 3, 15))


def _issue_types(result):
    return [issue.issue_type for issue in result.issues]


class TestSchemaStage:
    """Tests for stage 1 (input values alone)."""

    def test_valid_expense(self, validator, base_state):
        """Test a well-formed expense passes both stages."""
        draft = TransactionInput(
            type=TransactionType.EXPENSE,
            amount=Decimal("12.50"),
            category_id="5",
            account_id="A",
            effective_date=date(2024, 3, 1),
        )
        result = validator.validate_transaction(draft, base_state)
        assert result.is_valid
        assert result.schema_valid and result.references_valid

    def test_negative_amount_rejected(self, validator, base_state):
        """Test a negative amount fails stage 1 and skips stage 2."""
        draft = TransactionInput(amount=Decimal("-5"), category_id="5", account_id="A")
        result = validator.validate_transaction(draft, base_state)

        assert not result.is_valid
        assert not result.schema_valid
        assert not result.references_valid
        assert "invalid_value" in _issue_types(result)

    def test_self_transfer_rejected(self, validator, base_state):
        """Test a transfer to its own source account."""
        draft = TransactionInput(
            type=TransactionType.TRANSFER,
            amount=Decimal("5"),
            category_id="transfer-out",
            account_id="A",
            to_account_id="A",
        )
        result = validator.validate_transaction(draft, base_state)
        assert "self_transfer" in _issue_types(result)

    def test_destination_on_expense_rejected(self, validator, base_state):
        """Test only transfers may name a destination."""
        draft = TransactionInput(
            amount=Decimal("5"), category_id="5", account_id="A", to_account_id="B"
        )
        result = validator.validate_transaction(draft, base_state)
        assert "unexpected_value" in _issue_types(result)

    def test_missing_references_reported(self, validator, base_state):
        """Test blank account and category are reported together."""
        result = validator.validate_transaction(TransactionInput(amount=Decimal("5")), base_state)
        assert _issue_types(result).count("missing") == 2


class TestReferenceStage:
    """Tests for stage 2 (against the ledger)."""

    def test_unknown_account(self, validator, base_state):
        """Test a reference to a missing account."""
        draft = TransactionInput(amount=Decimal("5"), category_id="5", account_id="Z")
        result = validator.validate_transaction(draft, base_state)
        assert result.schema_valid
        assert not result.references_valid
        assert "unknown_reference" in _issue_types(result)

    def test_category_type_mismatch(self, validator, base_state):
        """Test an expense cannot use an income category."""
        draft = TransactionInput(amount=Decimal("5"), category_id="1", account_id="A")
        result = validator.validate_transaction(draft, base_state)
        assert "category_type_mismatch" in _issue_types(result)

    def test_reserved_category_rejected_for_plain_expense(self, validator, base_state):
        """Test the transfer-out category is reserved for transfers."""
        draft = TransactionInput(amount=Decimal("5"), category_id="transfer-out", account_id="A")
        result = validator.validate_transaction(draft, base_state)
        assert "reserved_category" in _issue_types(result)

    def test_transfer_exempt_from_category_type(self, validator, base_state):
        """Test transfers may use any existing category."""
        draft = TransactionInput(
            type=TransactionType.TRANSFER,
            amount=Decimal("5"),
            category_id="1",
            account_id="A",
            to_account_id="B",
        )
        assert validator.validate_transaction(draft, base_state).is_valid


class TestWarnings:
    """Tests for non-blocking warnings."""

    def test_large_amount_warns(self, base_state):
        """Test amounts over the threshold warn but stay valid."""
        validator = LedgerValidator(
            LedgerSettings(max_transaction_amount=1000), today=lambda: date(2024, 3, 15)
        )
        draft = TransactionInput(amount=Decimal("5000"), category_id="5", account_id="A")
        result = validator.validate_transaction(draft, base_state)

        assert result.is_valid
        assert len(result.warnings) == 1

    def test_future_date_warns(self, validator, base_state):
        """Test dates beyond the tolerance warn."""
        draft = TransactionInput(
            amount=Decimal("5"),
            category_id="5",
            account_id="A",
            effective_date=date(2024, 6, 1),
        )
        result = validator.validate_transaction(draft, base_state)
        assert result.is_valid
        assert "future_date" in _issue_types(result)

    def test_summary_lists_errors_and_warnings(self, validator, base_state):
        """Test the plain-text summary."""
        result = validator.validate_transaction(
            TransactionInput(amount=Decimal("0"), category_id="5", account_id="A"), base_state
        )
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following:" in summary
        assert "Amount must be greater than zero" in summary


class TestAccountsAndCategories:
    """Tests for account and category validation."""

    def test_blank_account_name(self, validator):
        """Test a blank account name is rejected."""
        result = validator.validate_account(AccountInput(name="  "))
        assert not result.is_valid
        assert not is_valid_account(AccountInput(name=""))
        assert is_valid_account(AccountInput(name="Wallet"))

    def test_blank_category_name(self, validator):
        """Test a blank category name is rejected."""
        assert not validator.validate_category(CategoryInput(name="")).is_valid
        assert validator.validate_category(CategoryInput(name="Pets")).is_valid

    def test_ensure_valid_raises(self, validator):
        """Test ensure_valid raises ValidationError carrying the issues."""
        result = validator.validate_account(AccountInput(name=""))
        with pytest.raises(ValidationError) as excinfo:
            validator.ensure_valid(result)
        assert excinfo.value.issues[0].field == "name"


class TestPredicatesAndIntegrity:
    """Tests for pure predicates and whole-ledger checks."""

    def test_is_valid_transaction(self, base_state, make_transaction):
        """Test the predicate against existing entities."""
        good = make_transaction()
        dangling = make_transaction(account_id="Z")
        assert is_valid_transaction(good, base_state.accounts, base_state.categories)
        assert not is_valid_transaction(dangling, base_state.accounts, base_state.categories)
        assert transaction_issues(dangling, base_state.accounts, base_state.categories)

    def test_check_integrity_clean(self, base_state, make_transaction):
        """Test a consistent ledger has no issues."""
        state = base_state.model_copy(update={"transactions": (make_transaction(),)})
        assert check_integrity(state) == []

    def test_check_integrity_reports_dangling_and_duplicates(self, base_state, make_transaction):
        """Test dangling references and duplicate ids are reported by entity."""
        state = base_state.model_copy(update={"transactions": (
            make_transaction(id="t1", category_id="missing"),
            make_transaction(id="t1"),
        )})
        issues = check_integrity(state)
        types = {issue.issue_type for issue in issues}

        assert types == {"duplicate_id", "unknown_reference"}
        assert all(issue.entity_id == "t1" for issue in issues)

    def test_check_integrity_tolerates_legacy_legs(self, base_state, make_transaction):
        """Test stored legacy transfer legs are not integrity issues."""
        leg = make_transaction(category_id="transfer-out")
        state = base_state.model_copy(update={"transactions": (leg,)})
        assert check_integrity(state) == []

    def test_empty_state(self):
        """Test an empty ledger is consistent."""
        assert check_integrity(LedgerState()) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
