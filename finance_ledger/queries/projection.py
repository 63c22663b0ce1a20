"""
Transaction Projection

Joins each transaction with its category and account(s) for display.

DESIGN DECISION: A dangling reference never breaks the projection.
The missing entity is replaced by a deterministic placeholder that
carries the missing id, and the row is flagged. The rest of the
list is unaffected.
"""

from datetime import datetime, timezone
from typing import Optional

import structlog

from finance_ledger.models.entities import (
    Account,
    AccountType,
    Category,
    CategoryType,
    LedgerState,
    Transaction,
    TransactionType,
    TransactionWithDetails,
)


logger = structlog.get_logger(__name__)

UNKNOWN_CATEGORY_NAME = "Unknown category"
UNKNOWN_ACCOUNT_NAME = "Unknown account"
PLACEHOLDER_COLOR = "#6B7280"
PLACEHOLDER_CREATED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)


def placeholder_category(category_id: str, transaction_type: TransactionType) -> Category:
    return Category(
        id=category_id,
        name=UNKNOWN_CATEGORY_NAME,
        icon="❓",
        color=PLACEHOLDER_COLOR,
        type=(
            CategoryType.INCOME
            if transaction_type == TransactionType.INCOME
            else CategoryType.EXPENSE
        ),
    )


def placeholder_account(account_id: str) -> Account:
    return Account(
        id=account_id,
        name=UNKNOWN_ACCOUNT_NAME,
        type=AccountType.CASH,
        color=PLACEHOLDER_COLOR,
        created_at=PLACEHOLDER_CREATED_AT,
    )


def with_details(
    transaction: Transaction,
    accounts: dict[str, Account],
    categories: dict[str, Category],
) -> TransactionWithDetails:
    """Project a single transaction against pre-built id lookups."""
    dangling = False

    category = categories.get(transaction.category_id)
    if category is None:
        category = placeholder_category(transaction.category_id, transaction.type)
        dangling = True

    account = accounts.get(transaction.account_id)
    if account is None:
        account = placeholder_account(transaction.account_id)
        dangling = True

    to_account: Optional[Account] = None
    if transaction.to_account_id:
        to_account = accounts.get(transaction.to_account_id)
        if to_account is None:
            to_account = placeholder_account(transaction.to_account_id)
            dangling = True

    return TransactionWithDetails(
        **dict(transaction),
        category=category,
        account=account,
        to_account=to_account,
        has_dangling_reference=dangling,
    )


def transactions_with_details(state: LedgerState) -> list[TransactionWithDetails]:
    """Every transaction in state order, joined with its references."""
    accounts = {account.id: account for account in state.accounts}
    categories = {category.id: category for category in state.categories}

    details = [with_details(txn, accounts, categories) for txn in state.transactions]

    dangling = sum(1 for row in details if row.has_dangling_reference)
    if dangling:
        logger.warning("dangling_references", transactions=dangling)

    return details
