"""
Ledger Core Package

The pure part of the system: actions, the reducer that applies them,
and the balance engine that derives live balances from state.
Nothing in here performs I/O or keeps state of its own.
"""

from finance_ledger.ledger.actions import (
    Action,
    AddAccount,
    AddCategory,
    AddTransaction,
    DeleteAccount,
    DeleteTransaction,
    LedgerAction,
    LoadData,
    SetAccounts,
    SetCategories,
    SetTransactions,
    ToggleDarkMode,
    UpdateAccount,
    UpdateTransaction,
)
from finance_ledger.ledger.balance import (
    account_balance,
    balances_by_account,
    total_balance,
    transaction_effect,
)
from finance_ledger.ledger.reducer import apply, apply_all
from finance_ledger.ledger.transfers import (
    build_transfer,
    collapse_legacy_transfers,
    find_legacy_transfer_pairs,
)

__all__ = [
    # Actions
    "Action",
    "AddAccount",
    "AddCategory",
    "AddTransaction",
    "DeleteAccount",
    "DeleteTransaction",
    "LedgerAction",
    "LoadData",
    "SetAccounts",
    "SetCategories",
    "SetTransactions",
    "ToggleDarkMode",
    "UpdateAccount",
    "UpdateTransaction",
    # Reducer
    "apply",
    "apply_all",
    # Balances
    "account_balance",
    "balances_by_account",
    "total_balance",
    "transaction_effect",
    # Transfers
    "build_transfer",
    "collapse_legacy_transfers",
    "find_legacy_transfer_pairs",
]
