"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required values present
- Amount strictly positive and finite
- Transfer/destination coupling, no self-transfer
- This catches malformed input regardless of ledger contents

STAGE 2 - REFERENTIAL VALIDATION:
- Referenced account(s) and category exist
- Category type matches transaction type (transfers exempt)
- Plain income/expense may not use the reserved transfer categories
- This needs the current ledger state

Stage 2 only runs when stage 1 passes.

The reducer never validates. Everything here runs at the boundary,
before an action is built.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

import structlog

from finance_ledger.config import LedgerSettings, get_settings
from finance_ledger.errors import ValidationError
from finance_ledger.models.entities import (
    RESERVED_CATEGORY_IDS,
    Account,
    AccountInput,
    Category,
    CategoryInput,
    LedgerState,
    Transaction,
    TransactionInput,
    TransactionType,
)
from finance_ledger.models.validation import ValidationIssue, ValidationResult


logger = structlog.get_logger(__name__)

AccountLike = Union[Account, AccountInput]
CategoryLike = Union[Category, CategoryInput]
TransactionLike = Union[Transaction, TransactionInput]


def _error(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="error",
        suggested_fix=fix,
    )


def _warning(field: str, issue_type: str, message: str, fix: Optional[str] = None) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=message,
        severity="warning",
        suggested_fix=fix,
    )


# =============================================================================
# PURE PREDICATES
# =============================================================================

def account_issues(account: AccountLike) -> list[ValidationIssue]:
    """Problems with an account's own values."""
    issues = []

    if not account.name or not account.name.strip():
        issues.append(_error("name", "missing", "Account name is required"))
    elif len(account.name) > 100:
        issues.append(_error("name", "too_long", "Account name must be at most 100 characters"))

    if not account.balance.is_finite():
        issues.append(_error("balance", "invalid_value", "Opening balance must be a finite number"))

    return issues


def category_issues(category: CategoryLike) -> list[ValidationIssue]:
    """Problems with a category's own values."""
    issues = []
    if not category.name or not category.name.strip():
        issues.append(_error(
            "name", "missing", "Category name is required",
            "Please enter a category name",
        ))
    elif len(category.name) > 100:
        issues.append(_error("name", "too_long", "Category name must be at most 100 characters"))
    return issues


def transaction_schema_issues(transaction: TransactionLike) -> list[ValidationIssue]:
    """Stage 1: problems visible from the transaction alone."""
    issues = []

    if not transaction.amount.is_finite():
        issues.append(_error("amount", "invalid_value", "Amount must be a finite number"))
    elif transaction.amount <= 0:
        issues.append(_error(
            "amount", "invalid_value", "Amount must be greater than zero",
            "Enter the amount without a sign; the type decides the direction",
        ))

    if not transaction.account_id:
        issues.append(_error("account_id", "missing", "An account is required"))
    if not transaction.category_id:
        issues.append(_error("category_id", "missing", "A category is required"))

    if transaction.type == TransactionType.TRANSFER:
        if not transaction.to_account_id:
            issues.append(_error("to_account_id", "missing", "A transfer needs a destination account"))
        elif transaction.to_account_id == transaction.account_id:
            issues.append(_error(
                "to_account_id", "self_transfer",
                "Cannot transfer to the same account",
                "Choose a different destination account",
            ))
    elif transaction.to_account_id:
        issues.append(_error(
            "to_account_id", "unexpected_value",
            "Only transfers can have a destination account",
        ))

    return issues


def transaction_reference_issues(
    transaction: TransactionLike,
    accounts: Iterable[Account],
    categories: Iterable[Category],
) -> list[ValidationIssue]:
    """Stage 2: problems with what the transaction points at."""
    issues = []
    account_ids = {account.id for account in accounts}
    categories_by_id = {category.id: category for category in categories}

    if transaction.account_id and transaction.account_id not in account_ids:
        issues.append(_error(
            "account_id", "unknown_reference",
            f"Account {transaction.account_id} does not exist",
        ))

    if transaction.type == TransactionType.TRANSFER and transaction.to_account_id:
        if transaction.to_account_id not in account_ids:
            issues.append(_error(
                "to_account_id", "unknown_reference",
                f"Account {transaction.to_account_id} does not exist",
            ))

    category = categories_by_id.get(transaction.category_id)
    if transaction.category_id and category is None:
        issues.append(_error(
            "category_id", "unknown_reference",
            f"Category {transaction.category_id} does not exist",
        ))
    elif category is not None and transaction.type != TransactionType.TRANSFER:
        if category.type.value != transaction.type.value:
            issues.append(_error(
                "category_id", "category_type_mismatch",
                f"{transaction.type.value.capitalize()} transactions cannot use "
                f"{category.type.value} category {category.name}",
                f"Choose an {transaction.type.value} category",
            ))
        elif category.id in RESERVED_CATEGORY_IDS:
            issues.append(_error(
                "category_id", "reserved_category",
                f"Category {category.name} is reserved for transfers",
                "Record a transfer instead",
            ))

    return issues


def transaction_issues(
    transaction: TransactionLike,
    accounts: Iterable[Account],
    categories: Iterable[Category],
) -> list[ValidationIssue]:
    """Both stages, without short-circuiting."""
    return (
        transaction_schema_issues(transaction)
        + transaction_reference_issues(transaction, accounts, categories)
    )


def is_valid_transaction(
    transaction: TransactionLike,
    accounts: Iterable[Account],
    categories: Iterable[Category],
) -> bool:
    return not any(issue.is_error for issue in transaction_issues(transaction, accounts, categories))


def is_valid_account(account: AccountLike) -> bool:
    return not any(issue.is_error for issue in account_issues(account))


def check_integrity(state: LedgerState) -> list[ValidationIssue]:
    """
    Audit a whole ledger.

    Reports duplicate ids, dangling references and category type
    mismatches. Each issue carries the offending entity's id.
    Nothing is raised; this is used to warn after an import.
    """
    issues = []

    for kind, items in (
        ("account", state.accounts),
        ("category", state.categories),
        ("transaction", state.transactions),
    ):
        seen: set[str] = set()
        for item in items:
            if item.id in seen:
                issues.append(ValidationIssue(
                    field="id",
                    issue_type="duplicate_id",
                    message=f"Duplicate {kind} id {item.id}",
                    severity="error",
                    entity_id=item.id,
                ))
            seen.add(item.id)

    for txn in state.transactions:
        for issue in transaction_reference_issues(txn, state.accounts, state.categories):
            if issue.issue_type == "reserved_category":
                # legacy transfer legs are tolerated in stored data
                continue
            issues.append(issue.model_copy(update={"entity_id": txn.id}))

    return issues


# =============================================================================
# VALIDATOR
# =============================================================================

class LedgerValidator:
    """
    Validates user input through the two-stage pipeline and adds
    non-blocking sanity warnings (unusually large amounts, dates far
    in the future).
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize validator.

        Args:
            settings: Thresholds for warnings. Loaded from the
                      environment when omitted.
            today: Clock used for the future-date warning.
        """
        self._settings = settings or get_settings().ledger
        self._today = today

    def _result(
        self,
        entity_type: str,
        schema_issues: list[ValidationIssue],
        reference_issues: Optional[list[ValidationIssue]] = None,
        warnings: Optional[list[ValidationIssue]] = None,
    ) -> ValidationResult:
        schema_valid = not any(issue.is_error for issue in schema_issues)
        references_valid = reference_issues is not None and not any(
            issue.is_error for issue in reference_issues
        )
        all_issues = schema_issues + (reference_issues or []) + (warnings or [])
        return ValidationResult(
            entity_type=entity_type,
            schema_valid=schema_valid,
            references_valid=references_valid,
            is_valid=schema_valid and references_valid,
            issues=all_issues,
            warnings=[issue.message for issue in all_issues if issue.severity == "warning"],
        )

    def _amount_warnings(self, amount: Decimal, field: str) -> list[ValidationIssue]:
        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if amount.is_finite() and abs(amount) > max_amount:
            return [_warning(
                field, "suspicious_value",
                f"Amount ({amount:,.2f}) seems unusually high",
                "Please verify this amount is correct",
            )]
        return []

    def validate_account(self, account: AccountLike) -> ValidationResult:
        """Accounts have no references; stage 2 always passes."""
        return self._result(
            "account",
            account_issues(account),
            [],
            self._amount_warnings(account.balance, "balance"),
        )

    def validate_category(self, category: CategoryLike) -> ValidationResult:
        return self._result("category", category_issues(category), [])

    def validate_transaction(
        self,
        transaction: TransactionLike,
        state: LedgerState,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            transaction: The input (or entity) to validate
            state: Current ledger, for referential checks

        Returns:
            ValidationResult with all issues found
        """
        schema_issues = transaction_schema_issues(transaction)
        schema_valid = not any(issue.is_error for issue in schema_issues)

        reference_issues = None
        warnings = []
        if schema_valid:
            reference_issues = transaction_reference_issues(
                transaction, state.accounts, state.categories
            )
            warnings.extend(self._amount_warnings(transaction.amount, "amount"))

            effective_date = transaction.effective_date
            max_future = self._today() + timedelta(days=self._settings.future_date_tolerance_days)
            if effective_date is not None and effective_date > max_future:
                warnings.append(_warning(
                    "effective_date", "future_date",
                    f"Transaction date ({effective_date}) is in the future",
                    "Please verify the date is correct",
                ))

        return self._result("transaction", schema_issues, reference_issues, warnings)

    def ensure_valid(self, result: ValidationResult) -> ValidationResult:
        """Raise ValidationError unless the result is valid."""
        if not result.is_valid:
            logger.info(
                "validation_rejected",
                entity_type=result.entity_type,
                errors=[issue.issue_type for issue in result.errors],
            )
            raise ValidationError(result)
        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-text summary of a validation result."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
