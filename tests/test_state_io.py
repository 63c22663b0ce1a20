"""Tests for state import/export."""

import json

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from finance_ledger.errors import ImportFormatError
from finance_ledger.ledger import balances_by_account
from finance_ledger.ledger.defaults import default_state
from finance_ledger.models import LedgerState, TransactionType
from finance_ledger.services.dataio import (
    dump_state,
    export_filename,
    export_json,
    export_state,
    import_state,
)


EXPORTED_AT = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def populated_state(base_state, make_transaction):
    return base_state.model_copy(update={
        "transactions": (
            make_transaction(amount=Decimal("12.34"), description="Lunch"),
            make_transaction(
                type=TransactionType.TRANSFER,
                category_id="transfer-out",
                to_account_id="B",
                amount=Decimal("0.10"),
            ),
        ),
        "dark_mode": True,
    })


class TestExport:
    """Tests for the exported layout."""

    def test_export_layout(self, populated_state):
        """Test camelCase keys, metadata and string amounts."""
        payload = export_state(populated_state, version="1.0.0", exported_at=EXPORTED_AT)

        assert set(payload) == {"accounts", "categories", "transactions", "darkMode", "exportDate", "version"}
        assert payload["version"] == "1.0.0"
        assert payload["exportDate"].startswith("2024-03-15T09:30:00")
        assert payload["darkMode"] is True

        lunch = payload["transactions"][0]
        assert lunch["amount"] == "12.34"
        assert lunch["date"] == "2024-03-01"
        assert lunch["accountId"] == "A"
        assert "toAccountId" not in lunch
        assert payload["transactions"][1]["toAccountId"] == "B"

    def test_export_json_is_valid_json(self, populated_state):
        """Test the text export parses back."""
        text = export_json(populated_state, exported_at=EXPORTED_AT)
        assert json.loads(text)["version"] == "1.0.0"

    def test_dump_state_has_no_metadata(self, populated_state):
        """Test the persisted layout omits export metadata."""
        assert "exportDate" not in dump_state(populated_state)

    def test_export_filename(self):
        """Test the suggested file name."""
        assert export_filename(date(2024, 3, 15)) == "finance-data-2024-03-15.json"


class TestRoundTrip:
    """Tests for export → import."""

    def test_round_trip_mapping(self, populated_state):
        """Test import(export(s)) == s."""
        assert import_state(export_state(populated_state)) == populated_state

    def test_round_trip_text(self, populated_state):
        """Test the same through JSON text."""
        assert import_state(export_json(populated_state)) == populated_state

    def test_round_trip_defaults(self, now):
        """Test the default ledger survives a round trip."""
        state = default_state(now=now)
        assert import_state(export_json(state).encode("utf-8")) == state


class TestImportValidation:
    """Tests for rejected payloads."""

    def test_numbers_accepted_for_amounts(self):
        """Test numeric amounts and balances import as Decimal."""
        state = import_state({
            "accounts": [{"id": "A", "name": "Cash", "type": "cash", "balance": 150.5}],
            "categories": [{"id": "5", "name": "Food", "type": "expense"}],
            "transactions": [{
                "id": "t1", "type": "expense", "amount": 20, "categoryId": "5",
                "accountId": "A", "date": "2024-03-01T00:00:00.000Z",
            }],
        })
        assert state.accounts[0].balance == Decimal("150.5")
        assert state.transactions[0].effective_date == date(2024, 3, 1)
        assert state.dark_mode is False

    @pytest.mark.parametrize("payload", [
        "not json at all",
        "[]",
        {"accounts": [], "categories": []},
        {"accounts": {}, "categories": [], "transactions": []},
        {"accounts": [], "categories": [], "transactions": [], "darkMode": "yes"},
        {"accounts": [], "categories": [], "transactions": [{"id": "t1"}]},
    ])
    def test_malformed_payloads_rejected(self, payload):
        """Test every malformed shape raises ImportFormatError."""
        with pytest.raises(ImportFormatError):
            import_state(payload)

    def test_problems_are_listed(self):
        """Test missing collections are all reported."""
        with pytest.raises(ImportFormatError) as excinfo:
            import_state({})
        assert len(excinfo.value.problems) == 3

    def test_negative_amount_rejected(self):
        """Test entity invariants apply on import."""
        with pytest.raises(ImportFormatError, match="amount"):
            import_state({
                "accounts": [],
                "categories": [],
                "transactions": [{
                    "id": "t1", "type": "expense", "amount": -5, "categoryId": "5",
                    "accountId": "A", "date": "2024-03-01",
                }],
            })

    def test_duplicate_ids_rejected(self):
        """Test two accounts with the same id cannot be imported."""
        with pytest.raises(ImportFormatError, match="Duplicate id 'A' in 'accounts'"):
            import_state({
                "accounts": [
                    {"id": "A", "name": "Checking", "type": "bank", "balance": "100"},
                    {"id": "A", "name": "Copy", "type": "bank", "balance": "50"},
                ],
                "categories": [],
                "transactions": [],
            })

    def test_unsupported_payload_type(self):
        """Test a non-mapping, non-text payload."""
        with pytest.raises(ImportFormatError):
            import_state(42)


class TestLegacyImport:
    """Tests for collapsing paired transfer legs on import."""

    def _legacy_payload(self):
        return {
            "accounts": [
                {"id": "A", "name": "Checking", "type": "bank", "balance": "100"},
                {"id": "B", "name": "Savings", "type": "savings", "balance": "0"},
            ],
            "categories": [
                {"id": "transfer-out", "name": "Transfer Out", "type": "expense"},
                {"id": "transfer-in", "name": "Transfer In", "type": "income"},
            ],
            "transactions": [
                {"id": "1", "type": "expense", "amount": 30, "categoryId": "transfer-out",
                 "accountId": "A", "description": "Transfer", "date": "2024-03-01"},
                {"id": "2", "type": "income", "amount": 30, "categoryId": "transfer-in",
                 "accountId": "B", "description": "Transfer", "date": "2024-03-01"},
            ],
        }

    def test_legs_kept_by_default(self):
        """Test import is faithful unless collapsing is requested."""
        state = import_state(self._legacy_payload())
        assert len(state.transactions) == 2

    def test_legs_collapsed_on_request(self):
        """Test collapsing yields one transfer and the same balances."""
        legacy = import_state(self._legacy_payload())
        collapsed = import_state(self._legacy_payload(), collapse_legacy_transfers=True)

        assert len(collapsed.transactions) == 1
        assert collapsed.transactions[0].type == TransactionType.TRANSFER
        assert balances_by_account(collapsed) == balances_by_account(legacy)

    def test_empty_state_round_trip(self):
        """Test an empty ledger round-trips."""
        assert import_state(export_state(LedgerState())) == LedgerState()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
