"""
Transfer Representations

CANONICAL: one TRANSFER transaction with `account_id` (source) and
`to_account_id` (destination).

LEGACY: two independent transactions, an EXPENSE in the reserved
`transfer-out` category on the source account and an INCOME in the
reserved `transfer-in` category on the destination account. Older
exports contain transfers in this shape.

collapse_legacy_transfers() rewrites legacy pairs into canonical
transfers. Each pair and its replacement have the same effect on
every account balance.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from finance_ledger.models.entities import (
    TRANSFER_IN_CATEGORY_ID,
    TRANSFER_OUT_CATEGORY_ID,
    Account,
    Transaction,
    TransactionType,
)


logger = structlog.get_logger(__name__)


def default_transfer_description(from_account: Account, to_account: Account) -> str:
    return f"Transfer from {from_account.name} to {to_account.name}"


def build_transfer(
    transaction_id: str,
    from_account: Account,
    to_account: Account,
    amount: Decimal,
    effective_date: date,
    created_at: datetime,
    description: Optional[str] = None,
    category_id: str = TRANSFER_OUT_CATEGORY_ID,
) -> Transaction:
    """
    Build a canonical transfer between two accounts.

    Raises pydantic's ValidationError for a non-positive amount or
    when both accounts are the same; the store validates before
    calling this.
    """
    return Transaction(
        id=transaction_id,
        type=TransactionType.TRANSFER,
        amount=amount,
        category_id=category_id,
        account_id=from_account.id,
        to_account_id=to_account.id,
        description=description or default_transfer_description(from_account, to_account),
        effective_date=effective_date,
        created_at=created_at,
    )


def is_outgoing_leg(transaction: Transaction) -> bool:
    return (
        transaction.type == TransactionType.EXPENSE
        and transaction.category_id == TRANSFER_OUT_CATEGORY_ID
    )


def is_incoming_leg(transaction: Transaction) -> bool:
    return (
        transaction.type == TransactionType.INCOME
        and transaction.category_id == TRANSFER_IN_CATEGORY_ID
    )


def _legs_match(outgoing: Transaction, incoming: Transaction) -> bool:
    return (
        outgoing.amount == incoming.amount
        and outgoing.effective_date == incoming.effective_date
        and outgoing.description == incoming.description
        and outgoing.account_id != incoming.account_id
    )


def _pair_indexes(transactions: tuple[Transaction, ...]) -> list[tuple[int, int]]:
    """Pair outgoing and incoming legs by position, first match wins."""
    incoming = [i for i, txn in enumerate(transactions) if is_incoming_leg(txn)]
    used: set[int] = set()
    pairs = []

    for out_index, txn in enumerate(transactions):
        if not is_outgoing_leg(txn):
            continue
        for in_index in incoming:
            if in_index in used:
                continue
            if _legs_match(txn, transactions[in_index]):
                used.add(in_index)
                pairs.append((out_index, in_index))
                break

    return pairs


def find_legacy_transfer_pairs(
    transactions: Iterable[Transaction],
) -> list[tuple[Transaction, Transaction]]:
    """
    Find (outgoing, incoming) legacy transfer legs.

    Legs pair when amount, date and description are equal and the
    accounts differ. Unmatched legs are left alone.
    """
    items = tuple(transactions)
    return [(items[o], items[i]) for o, i in _pair_indexes(items)]


def merge_legs(outgoing: Transaction, incoming: Transaction) -> Transaction:
    """Canonical transfer equivalent to one legacy pair."""
    return Transaction(
        id=outgoing.id,
        type=TransactionType.TRANSFER,
        amount=outgoing.amount,
        category_id=TRANSFER_OUT_CATEGORY_ID,
        account_id=outgoing.account_id,
        to_account_id=incoming.account_id,
        description=outgoing.description,
        effective_date=outgoing.effective_date,
        created_at=outgoing.created_at,
    )


def collapse_legacy_transfers(
    transactions: Iterable[Transaction],
) -> tuple[Transaction, ...]:
    """
    Replace each legacy pair with one canonical transfer.

    The transfer takes the place (and id) of the outgoing leg; the
    incoming leg is dropped. Everything else keeps its position.
    """
    items = tuple(transactions)
    pairs = _pair_indexes(items)
    if not pairs:
        return items

    merged = {o: merge_legs(items[o], items[i]) for o, i in pairs}
    dropped = {i for _, i in pairs}

    logger.info("legacy_transfers_collapsed", pairs=len(pairs))

    return tuple(
        merged.get(index, txn)
        for index, txn in enumerate(items)
        if index not in dropped
    )
