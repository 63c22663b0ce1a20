"""
Query and Report Models

TransactionQuery describes WHICH transactions a caller wants and in
what order. The remaining models are the read-only outputs of the
reporting helpers in finance_ledger.queries.reports.

All money values are Decimal. Percentages are Decimal rounded to
one decimal place, the way they are displayed.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from finance_ledger.models.entities import AccountType, TransactionType


ZERO = Decimal("0")


# =============================================================================
# QUERY MODELS
# =============================================================================

class SortField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ReportRange(str, Enum):
    """Length of a reporting period."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReportPeriod(str, Enum):
    """Which period of a given length, relative to today."""
    CURRENT = "current"
    PREVIOUS = "previous"


class TransactionQuery(BaseModel):
    """
    Filter and sort parameters for the transaction list.

    Every filter is optional; an empty query returns everything
    sorted by date, newest first.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    type_filter: Optional[TransactionType] = None
    category_id: Optional[str] = None
    account_id: Optional[str] = None
    include_incoming_transfers: bool = Field(
        default=False,
        description="With account_id set, also match transfers INTO the account"
    )
    search: Optional[str] = Field(
        default=None,
        description="Case-insensitive text matched against description, category and account names"
    )

    sort_by: SortField = SortField.DATE
    sort_order: SortOrder = SortOrder.DESC

    limit: Optional[int] = Field(
        default=None,
        ge=1
    )

    @model_validator(mode='after')
    def validate_date_range(self) -> 'TransactionQuery':
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError("date_to cannot be before date_from")
        return self


# =============================================================================
# REPORT MODELS
# =============================================================================

class SummaryStats(BaseModel):
    """Headline numbers for a set of transactions."""

    income: Decimal = ZERO
    expenses: Decimal = ZERO
    transfers: Decimal = ZERO
    net_income: Decimal = ZERO
    savings_rate: Decimal = Field(
        default=ZERO,
        description="Percent of income not spent; 0 when there is no income"
    )
    transaction_count: int = 0


class CategoryTotal(BaseModel):
    """One slice of a category breakdown."""

    category_id: str
    name: str
    color: str
    amount: Decimal
    count: int
    percentage: Decimal

    @property
    def average(self) -> Decimal:
        return self.amount / self.count if self.count else ZERO


class DailyTotal(BaseModel):
    day: date
    amount: Decimal
    count: int


class PeriodTotals(BaseModel):
    """Income/expense totals for one month or week."""

    period: str = Field(
        ...,
        description="'YYYY-MM' for months, ISO date of the week start for weeks"
    )
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    net: Decimal = ZERO
    transaction_count: int = 0


class TrendStats(BaseModel):
    """Month-over-month comparison of the latest two months."""

    income_growth: Decimal = ZERO
    expense_growth: Decimal = ZERO
    net_growth: Decimal = ZERO
    average_monthly_income: Decimal = ZERO
    average_monthly_expenses: Decimal = ZERO
    best_month: Optional[str] = None
    worst_month: Optional[str] = None


class AccountActivity(BaseModel):
    """Per-account rollup for the account analysis report."""

    account_id: str
    name: str
    type: AccountType
    opening_balance: Decimal
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    transfers_in: Decimal = ZERO
    transfers_out: Decimal = ZERO
    transaction_count: int = 0

    @property
    def net_transfers(self) -> Decimal:
        return self.transfers_in - self.transfers_out

    @property
    def current_balance(self) -> Decimal:
        return self.opening_balance + self.income - self.expenses + self.net_transfers

    @property
    def total_activity(self) -> Decimal:
        return self.income + self.expenses + self.transfers_in + self.transfers_out


class AccountTypeShare(BaseModel):
    type: AccountType
    balance: Decimal
    account_count: int
    percentage: Decimal


class DataSummary(BaseModel):
    """Counts and date span of everything in the ledger."""

    total_accounts: int
    total_categories: int
    total_transactions: int
    oldest_transaction: Optional[date] = None
    newest_transaction: Optional[date] = None

    @property
    def span_days(self) -> int:
        if self.oldest_transaction is None or self.newest_transaction is None:
            return 0
        return (self.newest_transaction - self.oldest_transaction).days
