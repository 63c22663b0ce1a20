"""Default categories and accounts for a brand-new ledger."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from finance_ledger.models.entities import (
    TRANSFER_IN_CATEGORY_ID,
    TRANSFER_OUT_CATEGORY_ID,
    Account,
    AccountType,
    Category,
    CategoryType,
    LedgerState,
    utc_now,
)


def default_categories() -> tuple[Category, ...]:
    income = CategoryType.INCOME
    expense = CategoryType.EXPENSE
    return (
        Category(id="1", name="Salary", icon="💼", color="#10B981", type=income),
        Category(id="2", name="Freelance", icon="💻", color="#059669", type=income),
        Category(id="3", name="Investment", icon="📈", color="#047857", type=income),
        Category(id="4", name="Other Income", icon="💰", color="#065F46", type=income),
        Category(id="5", name="Food & Dining", icon="🍽️", color="#EF4444", type=expense),
        Category(id="6", name="Transportation", icon="🚗", color="#F97316", type=expense),
        Category(id="7", name="Shopping", icon="🛍️", color="#8B5CF6", type=expense),
        Category(id="8", name="Entertainment", icon="🎬", color="#EC4899", type=expense),
        Category(id="9", name="Bills & Utilities", icon="⚡", color="#6B7280", type=expense),
        Category(id="10", name="Healthcare", icon="🏥", color="#DC2626", type=expense),
        Category(id="11", name="Education", icon="📚", color="#2563EB", type=expense),
        Category(id="12", name="Travel", icon="✈️", color="#0891B2", type=expense),
        # Reserved transfer legs
        Category(id=TRANSFER_OUT_CATEGORY_ID, name="Transfer Out", icon="↗️", color="#6B7280", type=expense),
        Category(id=TRANSFER_IN_CATEGORY_ID, name="Transfer In", icon="↙️", color="#10B981", type=income),
    )


def default_accounts(now: Optional[datetime] = None) -> tuple[Account, ...]:
    created = now or utc_now()
    return (
        Account(
            id="1",
            name="Main Checking",
            type=AccountType.BANK,
            balance=Decimal("2500"),
            color="#2563EB",
            created_at=created,
        ),
        Account(
            id="2",
            name="Savings",
            type=AccountType.SAVINGS,
            balance=Decimal("10000"),
            color="#10B981",
            created_at=created,
        ),
        Account(
            id="3",
            name="Cash Wallet",
            type=AccountType.CASH,
            balance=Decimal("150"),
            color="#F59E0B",
            created_at=created,
        ),
    )


def default_state(now: Optional[datetime] = None, dark_mode: bool = False) -> LedgerState:
    """A ledger with the default categories and accounts and no transactions."""
    return LedgerState(
        accounts=default_accounts(now),
        categories=default_categories(),
        dark_mode=dark_mode,
    )
