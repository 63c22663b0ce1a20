"""
Core Data Models for Finance Ledger

These models define the strict schemas for all ledger data.
They are designed to:
1. Be immutable (every state change produces new values)
2. Enforce structural invariants at construction time
3. Serialize to the persisted camelCase layout and back without loss

DESIGN DECISION: Two families of models exist.
- Entities (Account, Category, Transaction) are STRICT and frozen.
  A Transaction with a non-positive amount cannot be constructed.
- Inputs (AccountInput, CategoryInput, TransactionInput) are LOOSE.
  They carry whatever the user typed and are checked by the
  validator before an entity is built from them.

Contextual rules (does the account exist? does the category type
match?) need the whole ledger and live in finance_ledger.validation.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


TRANSFER_OUT_CATEGORY_ID = "transfer-out"
TRANSFER_IN_CATEGORY_ID = "transfer-in"
RESERVED_CATEGORY_IDS = frozenset({TRANSFER_OUT_CATEGORY_ID, TRANSFER_IN_CATEGORY_ID})


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _coerce_calendar_date(value: Any) -> Any:
    """
    Reduce timestamps to their calendar date.

    Exported data from older versions stores the effective date as a
    full ISO-8601 timestamp ("2024-03-01T00:00:00.000Z").
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Supported account types."""
    CASH = "cash"
    BANK = "bank"
    CREDIT = "credit"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class CategoryType(str, Enum):
    """Which side of the ledger a category belongs to."""
    INCOME = "income"
    EXPENSE = "expense"


class TransactionType(str, Enum):
    """
    Transaction types.

    The sign of a transaction is implied by its type, never by its amount.
    """
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


# =============================================================================
# BASE MODELS
# =============================================================================

class LedgerModel(BaseModel):
    """
    Base for every frozen ledger value.

    Attributes are snake_case in Python and camelCase on the wire.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class InputModel(BaseModel):
    """Base for user-supplied inputs that have not been validated yet."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# ENTITIES
# =============================================================================

class Account(LedgerModel):
    """
    A money container (wallet, bank account, card...).

    CRITICAL: `balance` is the OPENING balance captured when the account
    was created. The live balance is always derived from transactions,
    see finance_ledger.ledger.balance.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique account ID, assigned at creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    type: AccountType = Field(
        ...,
        description="Account type"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Opening balance"
    )
    color: str = Field(
        default="#2563EB",
        description="Display color (opaque to the ledger)"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the account was created"
    )


class Category(LedgerModel):
    """A transaction category (income or expense)."""

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=100
    )
    icon: str = Field(default="📝")
    color: str = Field(default="#2563EB")
    type: CategoryType
    parent_id: Optional[str] = Field(
        default=None,
        description="Optional grouping hint, carried but never interpreted"
    )

    @property
    def is_reserved(self) -> bool:
        """Is this one of the transfer-leg categories?"""
        return self.id in RESERVED_CATEGORY_IDS


class Transaction(LedgerModel):
    """
    A single ledger entry.

    Structural invariants enforced here:
    - amount is strictly positive
    - to_account_id is present exactly when type is TRANSFER
    - a transfer never targets its own source account
    """

    id: str = Field(..., min_length=1)
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; direction comes from `type`"
    )
    category_id: str = Field(..., min_length=1)
    account_id: str = Field(
        ...,
        min_length=1,
        description="Source account"
    )
    to_account_id: Optional[str] = Field(
        default=None,
        description="Destination account (transfers only)"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500
    )
    effective_date: date = Field(
        ...,
        alias="date",
        description="Economic effective date, user-settable"
    )
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('effective_date', mode='before')
    @classmethod
    def coerce_effective_date(cls, v: Any) -> Any:
        return _coerce_calendar_date(v)

    @model_validator(mode='after')
    def validate_transfer_shape(self) -> 'Transaction':
        """Validate the transfer/destination coupling."""
        if self.type == TransactionType.TRANSFER:
            if not self.to_account_id:
                raise ValueError("Transfer requires a destination account")
            if self.to_account_id == self.account_id:
                raise ValueError("Transfer source and destination must differ")
        elif self.to_account_id is not None:
            raise ValueError("Only transfers may have a destination account")
        return self

    @property
    def is_transfer(self) -> bool:
        return self.type == TransactionType.TRANSFER

    def touches(self, account_id: str) -> bool:
        """Does this transaction reference the account on either side?"""
        return self.account_id == account_id or self.to_account_id == account_id


class TransactionWithDetails(Transaction):
    """
    A transaction joined with its category and account(s) for display.

    When a reference cannot be resolved a placeholder is attached
    and `has_dangling_reference` is set.
    """

    category: Category
    account: Account
    to_account: Optional[Account] = None
    has_dangling_reference: bool = False


class LedgerState(LedgerModel):
    """
    The whole ledger.

    This is the single value the reducer transforms and the single
    blob that gets persisted.
    """

    accounts: tuple[Account, ...] = ()
    categories: tuple[Category, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    dark_mode: StrictBool = False

    def find_account(self, account_id: Optional[str]) -> Optional[Account]:
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    def find_category(self, category_id: Optional[str]) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def find_transaction(self, transaction_id: Optional[str]) -> Optional[Transaction]:
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None


# =============================================================================
# INPUTS - what the host collects from the user
# =============================================================================

class AccountInput(InputModel):
    """Fields for creating or wholesale-updating an account."""

    name: str = ""
    type: AccountType = AccountType.BANK
    balance: Decimal = Decimal("0")
    color: str = "#2563EB"
    description: Optional[str] = None


class CategoryInput(InputModel):
    """Fields for creating or updating a category."""

    name: str = ""
    icon: str = "📝"
    color: str = "#2563EB"
    type: CategoryType = CategoryType.EXPENSE
    parent_id: Optional[str] = None


class TransactionInput(InputModel):
    """
    Fields for creating or updating a transaction.

    Nothing is enforced here: amounts may be zero or negative and
    references may point nowhere. The validator reports all of it.
    """

    type: TransactionType = TransactionType.EXPENSE
    amount: Decimal = Decimal("0")
    category_id: str = ""
    account_id: str = ""
    to_account_id: Optional[str] = None
    description: Optional[str] = None
    effective_date: Optional[date] = Field(default=None, alias="date")

    @field_validator('effective_date', mode='before')
    @classmethod
    def coerce_effective_date(cls, v: Any) -> Any:
        return _coerce_calendar_date(v)

    @field_validator('description')
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None
