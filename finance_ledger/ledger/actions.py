"""
Ledger Actions

Each action is a frozen value describing ONE state transition.
The reducer in finance_ledger.ledger.reducer interprets them.

Actions carry fully-built entities. Generating ids and timestamps
and validating user input happens before an action is created
(see finance_ledger.orchestrator.LedgerStore).
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from finance_ledger.models.entities import (
    Account,
    Category,
    LedgerState,
    Transaction,
)


class LedgerAction(BaseModel):
    """Base class for all actions."""
    model_config = ConfigDict(frozen=True)


# Bulk replacement. No validation at this level.

class SetAccounts(LedgerAction):
    kind: Literal["set_accounts"] = "set_accounts"
    accounts: tuple[Account, ...] = ()


class SetCategories(LedgerAction):
    kind: Literal["set_categories"] = "set_categories"
    categories: tuple[Category, ...] = ()


class SetTransactions(LedgerAction):
    kind: Literal["set_transactions"] = "set_transactions"
    transactions: tuple[Transaction, ...] = ()


# Accounts

class AddAccount(LedgerAction):
    kind: Literal["add_account"] = "add_account"
    account: Account


class UpdateAccount(LedgerAction):
    """Replace the account with the same id. No-op when absent."""
    kind: Literal["update_account"] = "update_account"
    account: Account


class DeleteAccount(LedgerAction):
    """Remove the account only; dependent transactions are left alone."""
    kind: Literal["delete_account"] = "delete_account"
    account_id: str = Field(..., min_length=1)


# Categories

class AddCategory(LedgerAction):
    kind: Literal["add_category"] = "add_category"
    category: Category


# Transactions

class AddTransaction(LedgerAction):
    kind: Literal["add_transaction"] = "add_transaction"
    transaction: Transaction


class UpdateTransaction(LedgerAction):
    kind: Literal["update_transaction"] = "update_transaction"
    transaction: Transaction


class DeleteTransaction(LedgerAction):
    kind: Literal["delete_transaction"] = "delete_transaction"
    transaction_id: str = Field(..., min_length=1)


# Display and whole-state

class ToggleDarkMode(LedgerAction):
    kind: Literal["toggle_dark_mode"] = "toggle_dark_mode"


class LoadData(LedgerAction):
    kind: Literal["load_data"] = "load_data"
    state: LedgerState


Action = Union[
    SetAccounts,
    SetCategories,
    SetTransactions,
    AddAccount,
    UpdateAccount,
    DeleteAccount,
    AddCategory,
    AddTransaction,
    UpdateTransaction,
    DeleteTransaction,
    ToggleDarkMode,
    LoadData,
]
