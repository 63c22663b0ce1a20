"""
Filtering and Sorting

Deterministic, in-memory evaluation of a TransactionQuery over the
projected transaction list. Nothing here touches storage.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable

from finance_ledger.models.entities import TransactionWithDetails
from finance_ledger.models.reports import (
    ReportPeriod,
    ReportRange,
    SortField,
    SortOrder,
    TransactionQuery,
)


def _matches_search(row: TransactionWithDetails, needle: str) -> bool:
    haystacks = [
        row.description or "",
        row.category.name,
        row.account.name,
    ]
    if row.to_account is not None:
        haystacks.append(row.to_account.name)
    return any(needle in text.lower() for text in haystacks)


def matches(row: TransactionWithDetails, query: TransactionQuery) -> bool:
    """Does one projected transaction satisfy every filter in the query?"""
    if query.date_from and row.effective_date < query.date_from:
        return False
    if query.date_to and row.effective_date > query.date_to:
        return False
    if query.type_filter and row.type != query.type_filter:
        return False
    if query.category_id and row.category_id != query.category_id:
        return False
    if query.account_id:
        on_source = row.account_id == query.account_id
        on_destination = (
            query.include_incoming_transfers
            and row.to_account_id == query.account_id
        )
        if not (on_source or on_destination):
            return False
    if query.search:
        if not _matches_search(row, query.search.lower()):
            return False
    return True


def filter_transactions(
    details: Iterable[TransactionWithDetails],
    query: TransactionQuery,
) -> list[TransactionWithDetails]:
    return [row for row in details if matches(row, query)]


def sort_transactions(
    details: Iterable[TransactionWithDetails],
    sort_by: SortField = SortField.DATE,
    sort_order: SortOrder = SortOrder.DESC,
) -> list[TransactionWithDetails]:
    """
    Sort by date, amount or category name.

    Ties are always broken by transaction id ascending, whatever the
    direction, so equal keys come out in a stable order.
    """
    if sort_by == SortField.AMOUNT:
        def key(row):
            return row.amount
    elif sort_by == SortField.CATEGORY:
        def key(row):
            return row.category.name.lower()
    else:
        def key(row):
            return row.effective_date

    rows = sorted(details, key=lambda row: row.id)
    return sorted(rows, key=key, reverse=sort_order == SortOrder.DESC)


def apply_query(
    details: Iterable[TransactionWithDetails],
    query: TransactionQuery,
) -> list[TransactionWithDetails]:
    """Filter, sort and limit."""
    rows = sort_transactions(
        filter_transactions(details, query),
        query.sort_by,
        query.sort_order,
    )
    if query.limit is not None:
        rows = rows[:query.limit]
    return rows


# =============================================================================
# REPORT PERIODS
# =============================================================================

def week_start(day: date) -> date:
    """The Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def report_period(
    range_: ReportRange,
    which: ReportPeriod,
    today: date,
) -> tuple[date, date]:
    """
    Inclusive (start, end) dates of a reporting period.

    Weeks start on Sunday. A current period ends at the period's
    natural end, not at today.
    """
    previous = which == ReportPeriod.PREVIOUS

    if range_ == ReportRange.DAILY:
        day = today - timedelta(days=1) if previous else today
        return day, day

    if range_ == ReportRange.WEEKLY:
        start = week_start(today)
        if previous:
            start -= timedelta(days=7)
        return start, start + timedelta(days=6)

    if range_ == ReportRange.MONTHLY:
        year, month = _shift_month(today.year, today.month, -1 if previous else 0)
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)

    year = today.year - 1 if previous else today.year
    return date(year, 1, 1), date(year, 12, 31)


def period_query(
    range_: ReportRange,
    which: ReportPeriod,
    today: date,
    **filters,
) -> TransactionQuery:
    """TransactionQuery covering a reporting period, plus any other filters."""
    start, end = report_period(range_, which, today)
    return TransactionQuery(date_from=start, date_to=end, **filters)
