"""
Ledger Reducer

apply(state, action) -> new state

GUARANTEES:
- The input state is never mutated (all models are frozen)
- Every action is total: no exceptions for structurally valid input
- Update/delete with an unknown id returns the input state itself

The reducer trusts its caller. It does not check references, amounts
or category types; that is the job of finance_ledger.validation and
of the store that builds the actions.
"""

from typing import Callable, Iterable, Optional, TypeVar

from finance_ledger.ledger.actions import (
    Action,
    AddAccount,
    AddCategory,
    AddTransaction,
    DeleteAccount,
    DeleteTransaction,
    LoadData,
    SetAccounts,
    SetCategories,
    SetTransactions,
    ToggleDarkMode,
    UpdateAccount,
    UpdateTransaction,
)
from finance_ledger.models.entities import LedgerState


T = TypeVar("T")


def _replace_by_id(items: tuple[T, ...], replacement: T) -> Optional[tuple[T, ...]]:
    """Swap in `replacement` for the item with its id, or None if absent."""
    if not any(item.id == replacement.id for item in items):
        return None
    return tuple(replacement if item.id == replacement.id else item for item in items)


def _remove_by_id(items: tuple[T, ...], item_id: str) -> Optional[tuple[T, ...]]:
    kept = tuple(item for item in items if item.id != item_id)
    if len(kept) == len(items):
        return None
    return kept


def _set_accounts(state: LedgerState, action: SetAccounts) -> LedgerState:
    return state.model_copy(update={"accounts": action.accounts})


def _set_categories(state: LedgerState, action: SetCategories) -> LedgerState:
    return state.model_copy(update={"categories": action.categories})


def _set_transactions(state: LedgerState, action: SetTransactions) -> LedgerState:
    return state.model_copy(update={"transactions": action.transactions})


def _add_account(state: LedgerState, action: AddAccount) -> LedgerState:
    return state.model_copy(update={"accounts": state.accounts + (action.account,)})


def _update_account(state: LedgerState, action: UpdateAccount) -> LedgerState:
    accounts = _replace_by_id(state.accounts, action.account)
    if accounts is None:
        return state
    return state.model_copy(update={"accounts": accounts})


def _delete_account(state: LedgerState, action: DeleteAccount) -> LedgerState:
    accounts = _remove_by_id(state.accounts, action.account_id)
    if accounts is None:
        return state
    return state.model_copy(update={"accounts": accounts})


def _add_category(state: LedgerState, action: AddCategory) -> LedgerState:
    return state.model_copy(update={"categories": state.categories + (action.category,)})


def _add_transaction(state: LedgerState, action: AddTransaction) -> LedgerState:
    return state.model_copy(
        update={"transactions": state.transactions + (action.transaction,)}
    )


def _update_transaction(state: LedgerState, action: UpdateTransaction) -> LedgerState:
    transactions = _replace_by_id(state.transactions, action.transaction)
    if transactions is None:
        return state
    return state.model_copy(update={"transactions": transactions})


def _delete_transaction(state: LedgerState, action: DeleteTransaction) -> LedgerState:
    transactions = _remove_by_id(state.transactions, action.transaction_id)
    if transactions is None:
        return state
    return state.model_copy(update={"transactions": transactions})


def _toggle_dark_mode(state: LedgerState, action: ToggleDarkMode) -> LedgerState:
    return state.model_copy(update={"dark_mode": not state.dark_mode})


def _load_data(state: LedgerState, action: LoadData) -> LedgerState:
    return action.state


_HANDLERS: dict[type, Callable[[LedgerState, Action], LedgerState]] = {
    SetAccounts: _set_accounts,
    SetCategories: _set_categories,
    SetTransactions: _set_transactions,
    AddAccount: _add_account,
    UpdateAccount: _update_account,
    DeleteAccount: _delete_account,
    AddCategory: _add_category,
    AddTransaction: _add_transaction,
    UpdateTransaction: _update_transaction,
    DeleteTransaction: _delete_transaction,
    ToggleDarkMode: _toggle_dark_mode,
    LoadData: _load_data,
}


def apply(state: LedgerState, action: Action) -> LedgerState:
    """
    Apply one action to a state and return the resulting state.

    Unknown action types leave the state unchanged.
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return state
    return handler(state, action)


def apply_all(state: LedgerState, actions: Iterable[Action]) -> LedgerState:
    """
    Fold a sequence of actions over a state.

    Intermediate states are never observable to anyone holding the
    original state, so a compound operation built this way is
    committed all at once by whoever stores the result.
    """
    for action in actions:
        state = apply(state, action)
    return state
