"""
Data Models Package

This package contains all Pydantic models used by Finance Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from finance_ledger.models.entities import (
    RESERVED_CATEGORY_IDS,
    TRANSFER_IN_CATEGORY_ID,
    TRANSFER_OUT_CATEGORY_ID,
    Account,
    AccountInput,
    AccountType,
    Category,
    CategoryInput,
    CategoryType,
    LedgerState,
    Transaction,
    TransactionInput,
    TransactionType,
    TransactionWithDetails,
    utc_now,
)
from finance_ledger.models.validation import ValidationIssue, ValidationResult
from finance_ledger.models.reports import (
    AccountActivity,
    AccountTypeShare,
    CategoryTotal,
    DailyTotal,
    DataSummary,
    PeriodTotals,
    ReportPeriod,
    ReportRange,
    SortField,
    SortOrder,
    SummaryStats,
    TransactionQuery,
    TrendStats,
)
from finance_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entities
    "RESERVED_CATEGORY_IDS",
    "TRANSFER_IN_CATEGORY_ID",
    "TRANSFER_OUT_CATEGORY_ID",
    "Account",
    "AccountInput",
    "AccountType",
    "Category",
    "CategoryInput",
    "CategoryType",
    "LedgerState",
    "Transaction",
    "TransactionInput",
    "TransactionType",
    "TransactionWithDetails",
    "utc_now",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Queries and reports
    "AccountActivity",
    "AccountTypeShare",
    "CategoryTotal",
    "DailyTotal",
    "DataSummary",
    "PeriodTotals",
    "ReportPeriod",
    "ReportRange",
    "SortField",
    "SortOrder",
    "SummaryStats",
    "TransactionQuery",
    "TrendStats",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
