"""
Balance Engine

Live balances are DERIVED, never stored:

    balance(account) = opening balance
                       + income booked on the account
                       - expenses booked on the account
                       - transfers out of the account
                       + transfers into the account

All arithmetic is Decimal, so the result does not depend on the
order transactions are visited in.
"""

from decimal import Decimal
from typing import Iterable

from finance_ledger.models.entities import LedgerState, Transaction, TransactionType


ZERO = Decimal("0")


def transaction_effect(transaction: Transaction, account_id: str) -> Decimal:
    """
    Signed contribution of one transaction to one account.

    Zero when the transaction does not touch the account.
    """
    effect = ZERO
    if transaction.account_id == account_id:
        if transaction.type == TransactionType.INCOME:
            effect += transaction.amount
        else:
            # expense and transfer both leave the source account
            effect -= transaction.amount
    if transaction.to_account_id == account_id and transaction.type == TransactionType.TRANSFER:
        effect += transaction.amount
    return effect


def net_effect(transactions: Iterable[Transaction], account_id: str) -> Decimal:
    """Sum of transaction_effect over a list of transactions."""
    return sum((transaction_effect(txn, account_id) for txn in transactions), ZERO)


def account_balance(account_id: str, state: LedgerState) -> Decimal:
    """
    Current balance of one account.

    Returns 0 (not an error) for an unknown account id; callers that
    care about existence must check separately.
    """
    account = state.find_account(account_id)
    if account is None:
        return ZERO
    relevant = (txn for txn in state.transactions if txn.touches(account_id))
    return account.balance + net_effect(relevant, account_id)


def balances_by_account(state: LedgerState) -> dict[str, Decimal]:
    """
    Current balance of every account, in one pass over the transactions.

    Transactions referencing accounts that no longer exist are ignored,
    exactly as account_balance ignores them.
    """
    balances = {account.id: account.balance for account in state.accounts}
    for txn in state.transactions:
        if txn.account_id in balances:
            balances[txn.account_id] += transaction_effect(txn, txn.account_id)
        if txn.to_account_id in balances:
            balances[txn.to_account_id] += transaction_effect(txn, txn.to_account_id)
    return balances


def total_balance(state: LedgerState) -> Decimal:
    """
    Sum of the current balance of every account.

    Transfers between two existing accounts cancel out, so this equals
    the opening balances plus net income/expense.
    """
    return sum(
        (account_balance(account.id, state) for account in state.accounts),
        ZERO,
    )
