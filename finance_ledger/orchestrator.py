"""
Ledger Store Orchestrator

This module ties together all the components and defines the
host-facing operations on one ledger:
1. Mutations (input → validate → build entity → action → reducer → audit)
2. Reads (balances, projected and filtered transactions, summaries)
3. Boundary operations (import/export, save/load)

DESIGN DECISION: The store enforces the boundaries:
- No action is built from unvalidated input
- The reducer is the only thing that produces a new state
- Compound operations commit as one new state or not at all
- Every mutation and every refusal is audited

There is no process-wide singleton. A host creates as many stores
as it needs; each owns exactly one LedgerState value and replaces it
wholesale on every mutation. A store is not internally synchronized.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Type, TypeVar
from uuid import uuid4

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from finance_ledger.audit import AuditLogger, create_correlation_id
from finance_ledger.config import LedgerSettings, get_settings
from finance_ledger.errors import (
    ImportFormatError,
    ReferentialIntegrityConflict,
    StorageError,
    ValidationError,
)
from finance_ledger.ledger import (
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
    apply,
    apply_all,
    balances_by_account,
    build_transfer,
)
from finance_ledger.ledger import balance
from finance_ledger.ledger.defaults import default_categories, default_state
from finance_ledger.models.audit import AuditEventBuilder, AuditEventType
from finance_ledger.models.entities import (
    TRANSFER_OUT_CATEGORY_ID,
    Account,
    AccountInput,
    Category,
    CategoryInput,
    LedgerState,
    Transaction,
    TransactionInput,
    TransactionType,
    TransactionWithDetails,
    utc_now,
)
from finance_ledger.models.reports import DataSummary, TransactionQuery
from finance_ledger.models.validation import ValidationIssue, ValidationResult
from finance_ledger.queries import apply_query, data_summary, transactions_with_details
from finance_ledger.services.dataio import dump_state, export_state, import_state
from finance_ledger.services.storage import AuditStorageInterface, StateStorageInterface
from finance_ledger.validation import LedgerValidator, check_integrity


logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def _new_id() -> str:
    return uuid4().hex


def _schema_failure(entity_type: str, error: PydanticValidationError) -> ValidationResult:
    """Translate a pydantic error into a rejected ValidationResult."""
    issues = [
        ValidationIssue(
            field=".".join(str(part) for part in err["loc"]) or entity_type,
            issue_type=err["type"],
            message=err["msg"],
            severity="error",
        )
        for err in error.errors()
    ]
    return ValidationResult(
        entity_type=entity_type,
        schema_valid=False,
        references_valid=False,
        is_valid=False,
        issues=issues,
    )


def _merge_draft(existing: BaseModel, draft: M) -> M:
    """
    Overlay the fields the caller actually set on an existing entity.

    Fields left out of the draft keep their current values instead of
    falling back to the input defaults.
    """
    draft_type = type(draft)
    fields = {
        name: getattr(existing, name)
        for name in draft_type.model_fields
        if hasattr(existing, name)
    }
    fields.update(draft.model_dump(include=draft.model_fields_set))
    return draft_type(**fields)


class LedgerStore:
    """
    Host-owned holder of one ledger.

    Mutations raise ValidationError (bad input) or
    ReferentialIntegrityConflict (refused category change) and leave
    the state untouched when they do. Updates and deletes with an
    unknown id are no-ops that return None (or 0).
    """

    def __init__(
        self,
        state: Optional[LedgerState] = None,
        storage: Optional[StateStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[LedgerValidator] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._state = state if state is not None else LedgerState()
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().ledger
        self._new_id = id_factory or _new_id
        self._clock = clock or utc_now
        self._validator = validator or LedgerValidator(
            self._settings,
            today=lambda: self._clock().date(),
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def storage(self) -> Optional[StateStorageInterface]:
        return self._storage

    def dispatch(self, action: Action) -> LedgerState:
        """Apply one action to the held state. No validation."""
        self._state = apply(self._state, action)
        return self._state

    def _commit(self, actions: Iterable[Action]) -> LedgerState:
        self._state = apply_all(self._state, actions)
        return self._state

    def _today(self) -> date:
        return self._clock().date()

    # =========================================================================
    # VALIDATION HELPERS
    # =========================================================================

    def _audit_rejection(self, result: ValidationResult, entity_id: Optional[str] = None) -> None:
        self._audit_logger.log(AuditEventBuilder.validation_failed(
            entity_type=result.entity_type,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.errors
            ],
            entity_id=entity_id,
        ))

    def _check(self, result: ValidationResult, entity_id: Optional[str] = None) -> None:
        if not result.is_valid:
            self._audit_rejection(result, entity_id)
            self._validator.ensure_valid(result)

    def _build(self, entity_type: str, model: Type[M], **fields: Any) -> M:
        """Construct an entity, reporting schema failures as ValidationError."""
        try:
            return model(**fields)
        except PydanticValidationError as e:
            result = _schema_failure(entity_type, e)
            self._audit_rejection(result, fields.get("id"))
            raise ValidationError(result) from e

    def transactions_using_category(self, category_id: str) -> list[str]:
        return [t.id for t in self._state.transactions if t.category_id == category_id]

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def add_account(self, draft: AccountInput) -> Account:
        """Validate and add a new account; the opening balance is `draft.balance`."""
        self._check(self._validator.validate_account(draft))

        account = self._build(
            "account",
            Account,
            id=self._new_id(),
            name=draft.name,
            type=draft.type,
            balance=draft.balance,
            color=draft.color,
            description=draft.description,
            created_at=self._clock(),
        )
        self.dispatch(AddAccount(account=account))

        self._audit_logger.log(AuditEventBuilder.account_added(
            account.id, account.name, str(account.balance)
        ))
        return account

    def update_account(self, account_id: str, draft: AccountInput) -> Optional[Account]:
        """
        Update an account, keeping its id and created_at.

        Fields the draft does not set keep their current values.
        """
        existing = self._state.find_account(account_id)
        if existing is None:
            logger.warning("update_unknown_account", account_id=account_id)
            return None

        draft = _merge_draft(existing, draft)
        self._check(self._validator.validate_account(draft), account_id)

        account = self._build(
            "account",
            Account,
            id=existing.id,
            name=draft.name,
            type=draft.type,
            balance=draft.balance,
            color=draft.color,
            description=draft.description,
            created_at=existing.created_at,
        )
        self.dispatch(UpdateAccount(account=account))

        self._audit_logger.log(AuditEventBuilder.account_updated(account.id, account.name))
        return account

    def delete_account(self, account_id: str) -> int:
        """
        Delete an account and every transaction that references it
        as source or destination, as one commit.

        Returns:
            Number of transactions removed with the account
        """
        if self._state.find_account(account_id) is None:
            logger.warning("delete_unknown_account", account_id=account_id)
            return 0

        dependents = [t for t in self._state.transactions if t.touches(account_id)]
        removed = [t.id for t in dependents]
        actions: list[Action] = [DeleteTransaction(transaction_id=t_id) for t_id in removed]
        actions.append(DeleteAccount(account_id=account_id))
        self._commit(actions)

        correlation_id = create_correlation_id()
        for txn in dependents:
            self._audit_logger.log(AuditEventBuilder.transaction_changed(
                AuditEventType.TRANSACTION_DELETED,
                txn.id,
                txn.type.value,
                str(txn.amount),
                correlation_id=correlation_id,
            ))
        self._audit_logger.log(AuditEventBuilder.account_deleted(
            account_id, removed, correlation_id=correlation_id
        ))
        return len(removed)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def add_category(self, draft: CategoryInput) -> Category:
        self._check(self._validator.validate_category(draft))

        category = self._build(
            "category",
            Category,
            id=self._new_id(),
            name=draft.name,
            icon=draft.icon,
            color=draft.color,
            type=draft.type,
            parent_id=draft.parent_id,
        )
        self.dispatch(AddCategory(category=category))

        self._audit_logger.log(AuditEventBuilder.category_changed(
            AuditEventType.CATEGORY_ADDED, category.id, category.name
        ))
        return category

    def update_category(self, category_id: str, draft: CategoryInput) -> Optional[Category]:
        """
        Update a category. Fields the draft does not set keep their
        current values.

        Raises:
            ReferentialIntegrityConflict: The type changes while
                transactions still use the category
        """
        existing = self._state.find_category(category_id)
        if existing is None:
            logger.warning("update_unknown_category", category_id=category_id)
            return None

        draft = _merge_draft(existing, draft)
        self._check(self._validator.validate_category(draft), category_id)

        if draft.type != existing.type:
            referencing = self.transactions_using_category(category_id)
            if referencing:
                self._audit_logger.log(AuditEventBuilder.delete_refused(
                    "category", category_id, referencing
                ))
                raise ReferentialIntegrityConflict(
                    "category",
                    category_id,
                    referencing,
                    f"Cannot change the type of category {existing.name}: "
                    f"it is used by {len(referencing)} transactions",
                )

        category = self._build(
            "category",
            Category,
            id=existing.id,
            name=draft.name,
            icon=draft.icon,
            color=draft.color,
            type=draft.type,
            parent_id=draft.parent_id,
        )
        self.dispatch(SetCategories(categories=tuple(
            category if c.id == category_id else c for c in self._state.categories
        )))

        self._audit_logger.log(AuditEventBuilder.category_changed(
            AuditEventType.CATEGORY_UPDATED, category.id, category.name
        ))
        return category

    def delete_category(self, category_id: str) -> Optional[Category]:
        """
        Delete an unused category.

        Raises:
            ReferentialIntegrityConflict: Transactions still use it
        """
        existing = self._state.find_category(category_id)
        if existing is None:
            logger.warning("delete_unknown_category", category_id=category_id)
            return None

        referencing = self.transactions_using_category(category_id)
        if referencing:
            self._audit_logger.log(AuditEventBuilder.delete_refused(
                "category", category_id, referencing
            ))
            raise ReferentialIntegrityConflict("category", category_id, referencing)

        self.dispatch(SetCategories(categories=tuple(
            c for c in self._state.categories if c.id != category_id
        )))

        self._audit_logger.log(AuditEventBuilder.category_changed(
            AuditEventType.CATEGORY_DELETED, existing.id, existing.name
        ))
        return existing

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def _build_transaction(
        self,
        draft: TransactionInput,
        transaction_id: str,
        created_at: datetime,
    ) -> Transaction:
        return self._build(
            "transaction",
            Transaction,
            id=transaction_id,
            type=draft.type,
            amount=draft.amount,
            category_id=draft.category_id,
            account_id=draft.account_id,
            to_account_id=draft.to_account_id if draft.type == TransactionType.TRANSFER else None,
            description=draft.description,
            effective_date=draft.effective_date,
            created_at=created_at,
        )

    def _log_transaction(self, event_type: AuditEventType, transaction: Transaction) -> None:
        if event_type == AuditEventType.TRANSACTION_ADDED and transaction.is_transfer:
            self._audit_logger.log(AuditEventBuilder.transfer_recorded(
                transaction.id,
                transaction.account_id,
                transaction.to_account_id,
                str(transaction.amount),
            ))
            return
        self._audit_logger.log(AuditEventBuilder.transaction_changed(
            event_type, transaction.id, transaction.type.value, str(transaction.amount)
        ))

    def add_transaction(self, draft: TransactionInput) -> Transaction:
        """
        Validate and add a transaction.

        A missing date defaults to today.
        """
        if draft.effective_date is None:
            draft = draft.model_copy(update={"effective_date": self._today()})

        self._check(self._validator.validate_transaction(draft, self._state))

        transaction = self._build_transaction(draft, self._new_id(), self._clock())
        self.dispatch(AddTransaction(transaction=transaction))

        self._log_transaction(AuditEventType.TRANSACTION_ADDED, transaction)
        return transaction

    def update_transaction(
        self,
        transaction_id: str,
        draft: TransactionInput,
    ) -> Optional[Transaction]:
        """
        Update a transaction, keeping its id and created_at.

        Fields the draft does not set keep their current values. A
        destination is dropped when the type changes away from transfer.
        """
        existing = self._state.find_transaction(transaction_id)
        if existing is None:
            logger.warning("update_unknown_transaction", transaction_id=transaction_id)
            return None

        merged = _merge_draft(existing, draft)
        if merged.effective_date is None:
            merged = merged.model_copy(update={"effective_date": existing.effective_date})
        if merged.type != TransactionType.TRANSFER and "to_account_id" not in draft.model_fields_set:
            merged = merged.model_copy(update={"to_account_id": None})
        draft = merged

        self._check(self._validator.validate_transaction(draft, self._state), transaction_id)

        transaction = self._build_transaction(draft, existing.id, existing.created_at)
        self.dispatch(UpdateTransaction(transaction=transaction))

        self._log_transaction(AuditEventType.TRANSACTION_UPDATED, transaction)
        return transaction

    def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        existing = self._state.find_transaction(transaction_id)
        if existing is None:
            logger.warning("delete_unknown_transaction", transaction_id=transaction_id)
            return None

        self.dispatch(DeleteTransaction(transaction_id=transaction_id))

        self._log_transaction(AuditEventType.TRANSACTION_DELETED, existing)
        return existing

    def record_transfer(
        self,
        from_account_id: str,
        to_account_id: str,
        amount: Decimal,
        effective_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Record a canonical transfer between two accounts.

        The reserved transfer category is restored first if the ledger
        no longer has it. Both happen in one commit.
        """
        draft = TransactionInput(
            type=TransactionType.TRANSFER,
            amount=amount,
            category_id=TRANSFER_OUT_CATEGORY_ID,
            account_id=from_account_id,
            to_account_id=to_account_id,
            description=description,
            effective_date=effective_date or self._today(),
        )

        actions: list[Action] = []
        candidate = self._state
        if candidate.find_category(TRANSFER_OUT_CATEGORY_ID) is None:
            reserved = next(c for c in default_categories() if c.id == TRANSFER_OUT_CATEGORY_ID)
            actions.append(AddCategory(category=reserved))
            candidate = apply(candidate, actions[0])

        self._check(self._validator.validate_transaction(draft, candidate))

        transaction = build_transfer(
            transaction_id=self._new_id(),
            from_account=candidate.find_account(from_account_id),
            to_account=candidate.find_account(to_account_id),
            amount=draft.amount,
            effective_date=draft.effective_date,
            created_at=self._clock(),
            description=draft.description,
        )
        actions.append(AddTransaction(transaction=transaction))
        self._commit(actions)

        self._log_transaction(AuditEventType.TRANSACTION_ADDED, transaction)
        return transaction

    # =========================================================================
    # WHOLE-STATE OPERATIONS
    # =========================================================================

    def toggle_dark_mode(self) -> bool:
        self.dispatch(ToggleDarkMode())
        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.PREFERENCES_CHANGED,
            "Dark mode toggled",
            {"dark_mode": self._state.dark_mode},
        ))
        return self._state.dark_mode

    def clear_all(self) -> None:
        """Remove every account, category and transaction. Preferences stay."""
        counts = {
            "accounts": len(self._state.accounts),
            "categories": len(self._state.categories),
            "transactions": len(self._state.transactions),
        }
        self._commit([
            SetTransactions(transactions=()),
            SetAccounts(accounts=()),
            SetCategories(categories=()),
        ])
        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.DATA_CLEARED, "All ledger data cleared", counts
        ))

    def reset_to_defaults(self) -> LedgerState:
        """Replace everything with the default categories and accounts."""
        self.dispatch(LoadData(state=default_state(
            now=self._clock(), dark_mode=self._state.dark_mode
        )))
        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.DEFAULTS_SEEDED,
            "Default categories and accounts seeded",
            {
                "accounts": len(self._state.accounts),
                "categories": len(self._state.categories),
            },
        ))
        return self._state

    # =========================================================================
    # READS
    # =========================================================================

    def account_balance(self, account_id: str) -> Decimal:
        return balance.account_balance(account_id, self._state)

    def total_balance(self) -> Decimal:
        return balance.total_balance(self._state)

    def balances(self) -> dict[str, Decimal]:
        return balances_by_account(self._state)

    def transactions_with_details(self) -> list[TransactionWithDetails]:
        return transactions_with_details(self._state)

    def query_transactions(
        self,
        query: Optional[TransactionQuery] = None,
        **filters: Any,
    ) -> list[TransactionWithDetails]:
        """
        Projected transactions matching a query.

        Keyword filters build a TransactionQuery when none is given.

        Raises:
            ValidationError: The keyword filters do not form a valid query
        """
        if query is None:
            try:
                query = TransactionQuery(**filters)
            except PydanticValidationError as e:
                raise ValidationError(_schema_failure("query", e)) from e
        return apply_query(self.transactions_with_details(), query)

    def data_summary(self) -> DataSummary:
        return data_summary(self._state)

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_data(self, exported_at: Optional[datetime] = None) -> dict[str, Any]:
        payload = export_state(
            self._state,
            version=self._settings.export_format_version,
            exported_at=exported_at or self._clock(),
        )
        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.DATA_EXPORTED,
            f"Exported {len(self._state.transactions)} transactions",
            {"version": payload["version"]},
        ))
        return payload

    def import_data(self, payload: Any) -> LedgerState:
        """
        Replace the whole ledger with an imported payload.

        Raises:
            ImportFormatError: The payload is malformed; nothing changes
        """
        try:
            imported = import_state(
                payload,
                collapse_legacy_transfers=self._settings.collapse_legacy_transfers,
            )
        except ImportFormatError as e:
            self._audit_logger.log(AuditEventBuilder.import_failed(e.problems))
            raise

        integrity = check_integrity(imported)
        if integrity:
            logger.warning(
                "imported_state_has_integrity_issues",
                issues=[issue.message for issue in integrity[:10]],
                issue_count=len(integrity),
            )

        self.dispatch(LoadData(state=imported))

        self._audit_logger.log(AuditEventBuilder.data_imported(
            accounts=len(imported.accounts),
            categories=len(imported.categories),
            transactions=len(imported.transactions),
            integrity_warnings=len(integrity),
        ))
        return self._state

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save(self) -> None:
        """
        Write the whole state to storage.

        Raises:
            StorageError: No storage is configured or the write failed
        """
        if self._storage is None:
            raise StorageError("No state storage configured")

        try:
            self._storage.write_blob(dump_state(self._state))
        except StorageError as e:
            self._audit_logger.log(AuditEventBuilder.save_failed(str(e)))
            raise

        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.STATE_SAVED,
            "Ledger state saved",
            {"transactions": len(self._state.transactions)},
        ))

    def load(self) -> bool:
        """
        Replace the held state with the stored one.

        Returns:
            False when storage holds nothing yet

        Raises:
            StorageError: No storage is configured or it cannot be read
            ImportFormatError: The stored blob is malformed
        """
        if self._storage is None:
            raise StorageError("No state storage configured")

        blob = self._storage.read_blob()
        if blob is None:
            return False

        loaded = import_state(
            blob,
            collapse_legacy_transfers=self._settings.collapse_legacy_transfers,
        )
        self.dispatch(LoadData(state=loaded))

        self._audit_logger.log(AuditEventBuilder.ledger_event(
            AuditEventType.STATE_LOADED,
            "Ledger state loaded",
            {
                "accounts": len(loaded.accounts),
                "categories": len(loaded.categories),
                "transactions": len(loaded.transactions),
            },
        ))
        return True


def create_ledger_store(
    storage: Optional[StateStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    settings: Optional[LedgerSettings] = None,
    **kwargs: Any,
) -> LedgerStore:
    """
    Factory function to create a ready-to-use store.

    Loads saved state when storage has some. Unreadable saved state
    is logged and replaced, as is an empty store, by the default
    data when `seed_default_data` is set.

    Args:
        storage: Whole-state storage; None keeps the ledger in memory only
        audit_storage: Where audit events are appended, if anywhere
        settings: Ledger settings; loaded from the environment when omitted
        **kwargs: Passed through to LedgerStore (id_factory, clock, ...)
    """
    settings = settings or get_settings().ledger
    audit_logger = AuditLogger(audit_storage)
    store = LedgerStore(
        storage=storage,
        audit_logger=audit_logger,
        settings=settings,
        **kwargs,
    )

    loaded = False
    if storage is not None:
        try:
            loaded = store.load()
        except (ImportFormatError, StorageError) as e:
            logger.error("saved_state_unreadable", error=str(e))
            audit_logger.log_error(type(e).__name__, str(e))

    if not loaded and settings.seed_default_data:
        store.reset_to_defaults()

    return store
