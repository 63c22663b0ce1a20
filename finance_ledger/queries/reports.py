"""
Report Aggregations

Pure reductions over projected transactions. Each function takes
what it needs as arguments and returns report models; callers pick
the period by filtering first (see filters.report_period).

Income and expense totals never include transfers. Transfers move
money between accounts and are reported on their own.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from finance_ledger.models.entities import (
    Account,
    LedgerState,
    TransactionType,
    TransactionWithDetails,
)
from finance_ledger.models.reports import (
    ZERO,
    AccountActivity,
    AccountTypeShare,
    CategoryTotal,
    DailyTotal,
    DataSummary,
    PeriodTotals,
    SummaryStats,
    TrendStats,
)
from finance_ledger.queries.filters import week_start


HUNDRED = Decimal("100")
ONE_PLACE = Decimal("0.1")
CENTS = Decimal("0.01")


def percent(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole as a percentage to one decimal place; 0 when whole <= 0."""
    if whole <= 0:
        return ZERO
    return (part / whole * HUNDRED).quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


def _growth(current: Decimal, previous: Decimal) -> Decimal:
    if previous == 0:
        return ZERO
    return percent(current - previous, abs(previous))


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return (sum(values, ZERO) / len(values)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _sum_of_type(rows: Iterable[TransactionWithDetails], txn_type: TransactionType) -> Decimal:
    return sum((row.amount for row in rows if row.type == txn_type), ZERO)


# =============================================================================
# SUMMARY
# =============================================================================

def summary_stats(details: Sequence[TransactionWithDetails]) -> SummaryStats:
    income = _sum_of_type(details, TransactionType.INCOME)
    expenses = _sum_of_type(details, TransactionType.EXPENSE)
    transfers = _sum_of_type(details, TransactionType.TRANSFER)

    return SummaryStats(
        income=income,
        expenses=expenses,
        transfers=transfers,
        net_income=income - expenses,
        savings_rate=percent(income - expenses, income),
        transaction_count=len(details),
    )


def category_breakdown(
    details: Iterable[TransactionWithDetails],
    type: TransactionType = TransactionType.EXPENSE,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[CategoryTotal]:
    """
    Totals per category for one transaction type.

    Sorted by amount descending, then category name.
    """
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)
    first_seen: dict[str, TransactionWithDetails] = {}

    for row in details:
        if row.type != type:
            continue
        if date_from and row.effective_date < date_from:
            continue
        if date_to and row.effective_date > date_to:
            continue
        totals[row.category_id] += row.amount
        counts[row.category_id] += 1
        first_seen.setdefault(row.category_id, row)

    grand_total = sum(totals.values(), ZERO)

    breakdown = [
        CategoryTotal(
            category_id=category_id,
            name=first_seen[category_id].category.name,
            color=first_seen[category_id].category.color,
            amount=amount,
            count=counts[category_id],
            percentage=percent(amount, grand_total),
        )
        for category_id, amount in totals.items()
    ]
    breakdown.sort(key=lambda item: item.name)
    breakdown.sort(key=lambda item: item.amount, reverse=True)
    return breakdown


# =============================================================================
# DAILY
# =============================================================================

def daily_totals(
    details: Iterable[TransactionWithDetails],
    type: Optional[TransactionType] = None,
) -> list[DailyTotal]:
    """Per-day totals in ascending date order; days without activity are omitted."""
    amounts: dict[date, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[date, int] = defaultdict(int)

    for row in details:
        if type is not None and row.type != type:
            continue
        amounts[row.effective_date] += row.amount
        counts[row.effective_date] += 1

    return [
        DailyTotal(day=day, amount=amounts[day], count=counts[day])
        for day in sorted(amounts)
    ]


def half_period_trend(daily: Sequence[DailyTotal]) -> Decimal:
    """
    Change of the average daily amount, second half vs first half.

    With an odd number of days the middle day belongs to the second
    half. Returns 0 when the first half averages 0 or less.
    """
    midpoint = len(daily) // 2
    first = _mean([day.amount for day in daily[:midpoint]])
    second = _mean([day.amount for day in daily[midpoint:]])
    return percent(second - first, first)


# =============================================================================
# TRENDS
# =============================================================================

def _add_to_period(totals: PeriodTotals, row: TransactionWithDetails) -> PeriodTotals:
    income = totals.income
    expenses = totals.expenses
    if row.type == TransactionType.INCOME:
        income += row.amount
    elif row.type == TransactionType.EXPENSE:
        expenses += row.amount
    return PeriodTotals(
        period=totals.period,
        income=income,
        expenses=expenses,
        net=income - expenses,
        transaction_count=totals.transaction_count + 1,
    )


def monthly_trends(
    details: Iterable[TransactionWithDetails],
    months: int = 12,
) -> list[PeriodTotals]:
    """
    Income, expenses and net per calendar month ('YYYY-MM').

    Only months with activity appear. The most recent `months` are
    returned in ascending order. Transfers count toward the
    transaction count but not toward income or expenses.
    """
    by_month: dict[str, PeriodTotals] = {}
    for row in details:
        key = row.effective_date.strftime("%Y-%m")
        current = by_month.get(key) or PeriodTotals(period=key)
        by_month[key] = _add_to_period(current, row)

    ordered = [by_month[key] for key in sorted(by_month)]
    return ordered[-months:] if months > 0 else []


def weekly_trends(
    details: Iterable[TransactionWithDetails],
    today: date,
    weeks: int = 8,
) -> list[PeriodTotals]:
    """
    Totals per calendar week (Sunday start) for the last `weeks`
    weeks up to and including the current one.

    Weeks without activity are present with zero totals. The period
    label is the ISO date of the week's Sunday.
    """
    current_start = week_start(today)
    starts = [current_start - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]
    by_week = {start: PeriodTotals(period=start.isoformat()) for start in starts}

    for row in details:
        start = week_start(row.effective_date)
        if start in by_week:
            by_week[start] = _add_to_period(by_week[start], row)

    return [by_week[start] for start in starts]


def trend_stats(monthly: Sequence[PeriodTotals]) -> TrendStats:
    """
    Compare the last two months and summarise the whole series.

    Fewer than two months gives an all-zero result.
    """
    if len(monthly) < 2:
        return TrendStats()

    current = monthly[-1]
    previous = monthly[-2]

    best = max(monthly, key=lambda month: month.net)
    worst = min(monthly, key=lambda month: month.net)

    return TrendStats(
        income_growth=_growth(current.income, previous.income),
        expense_growth=_growth(current.expenses, previous.expenses),
        net_growth=_growth(current.net, previous.net),
        average_monthly_income=_mean([month.income for month in monthly]),
        average_monthly_expenses=_mean([month.expenses for month in monthly]),
        best_month=best.period,
        worst_month=worst.period,
    )


# =============================================================================
# ACCOUNTS
# =============================================================================

def account_activity(
    accounts: Iterable[Account],
    details: Sequence[TransactionWithDetails],
) -> list[AccountActivity]:
    """
    Per-account rollup.

    `current_balance` on each result agrees with the balance engine.
    Sorted by total activity descending, then account id.
    """
    activity = []
    for account in accounts:
        income = expenses = transfers_in = transfers_out = ZERO
        count = 0

        for row in details:
            if not row.touches(account.id):
                continue
            count += 1
            if row.account_id == account.id:
                if row.type == TransactionType.INCOME:
                    income += row.amount
                elif row.type == TransactionType.EXPENSE:
                    expenses += row.amount
                else:
                    transfers_out += row.amount
            if row.is_transfer and row.to_account_id == account.id:
                transfers_in += row.amount

        activity.append(AccountActivity(
            account_id=account.id,
            name=account.name,
            type=account.type,
            opening_balance=account.balance,
            income=income,
            expenses=expenses,
            transfers_in=transfers_in,
            transfers_out=transfers_out,
            transaction_count=count,
        ))

    activity.sort(key=lambda item: item.account_id)
    activity.sort(key=lambda item: item.total_activity, reverse=True)
    return activity


def account_type_distribution(activity: Sequence[AccountActivity]) -> list[AccountTypeShare]:
    """Current balance per account type, in order of first appearance."""
    balances: dict = {}
    counts: dict = defaultdict(int)

    for item in activity:
        balances[item.type] = balances.get(item.type, ZERO) + item.current_balance
        counts[item.type] += 1

    total = sum((item.current_balance for item in activity), ZERO)

    return [
        AccountTypeShare(
            type=account_type,
            balance=balance,
            account_count=counts[account_type],
            percentage=percent(balance, total),
        )
        for account_type, balance in balances.items()
    ]


def data_summary(state: LedgerState) -> DataSummary:
    dates = [txn.effective_date for txn in state.transactions]
    return DataSummary(
        total_accounts=len(state.accounts),
        total_categories=len(state.categories),
        total_transactions=len(state.transactions),
        oldest_transaction=min(dates) if dates else None,
        newest_transaction=max(dates) if dates else None,
    )
