"""Validation Package"""

from finance_ledger.validation.validator import (
    LedgerValidator,
    account_issues,
    category_issues,
    check_integrity,
    is_valid_account,
    is_valid_transaction,
    transaction_issues,
    transaction_reference_issues,
    transaction_schema_issues,
)

__all__ = [
    "LedgerValidator",
    "account_issues",
    "category_issues",
    "check_integrity",
    "is_valid_account",
    "is_valid_transaction",
    "transaction_issues",
    "transaction_reference_issues",
    "transaction_schema_issues",
]
