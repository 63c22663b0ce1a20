"""
CSV Export

Writes projected transactions as a flat CSV for spreadsheets.
Columns: Date, Type, Amount, Category, Account, To Account, Description.
"""

import csv
from datetime import date
from typing import Iterable, Optional, TextIO

import structlog

from finance_ledger.models.entities import TransactionType, TransactionWithDetails


logger = structlog.get_logger(__name__)

CSV_HEADERS = [
    "Date",
    "Type",
    "Amount",
    "Category",
    "Account",
    "To Account",
    "Description",
]


def csv_rows(
    details: Iterable[TransactionWithDetails],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    type: Optional[TransactionType] = None,
) -> list[dict[str, str]]:
    """One dict per exported transaction, keyed by CSV_HEADERS."""
    rows = []
    for row in details:
        if date_from and row.effective_date < date_from:
            continue
        if date_to and row.effective_date > date_to:
            continue
        if type is not None and row.type != type:
            continue

        rows.append({
            "Date": row.effective_date.isoformat(),
            "Type": row.type.value,
            "Amount": str(row.amount),
            "Category": row.category.name,
            "Account": row.account.name,
            "To Account": row.to_account.name if row.is_transfer and row.to_account else "",
            "Description": row.description or "",
        })
    return rows


def write_transactions_csv(
    details: Iterable[TransactionWithDetails],
    output: TextIO,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    type: Optional[TransactionType] = None,
) -> int:
    """
    Write header and rows to an open text stream.

    Returns:
        Number of transaction rows written
    """
    rows = csv_rows(details, date_from=date_from, date_to=date_to, type=type)

    writer = csv.DictWriter(
        output,
        fieldnames=CSV_HEADERS,
        extrasaction="ignore",
        quoting=csv.QUOTE_MINIMAL,
    )
    writer.writeheader()
    writer.writerows(rows)

    logger.info("transactions_csv_written", rows=len(rows))
    return len(rows)
