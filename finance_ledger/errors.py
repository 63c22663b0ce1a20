"""
Finance Ledger Exceptions

Every failure the package reports is a LedgerError. None of them is
fatal: the worst case is a rejected action, a rejected import, or a
failed save, and in each case the in-memory state is left untouched.
"""

from typing import Optional, Sequence

from finance_ledger.models.validation import ValidationIssue, ValidationResult


class LedgerError(Exception):
    """Base exception for the ledger."""
    pass


class ValidationError(LedgerError):
    """
    User input was rejected before any action was built.

    Carries the full ValidationResult so every issue can be shown.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = [issue.message for issue in result.errors] or ["Validation failed"]
        super().__init__(f"Invalid {result.entity_type}: " + "; ".join(messages))

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


class ReferentialIntegrityConflict(LedgerError):
    """
    A change would leave transactions pointing at something that
    no longer exists (or no longer matches them).
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        referencing_ids: Sequence[str],
        message: Optional[str] = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.referencing_ids = list(referencing_ids)
        super().__init__(
            message
            or (
                f"{entity_type.capitalize()} {entity_id} is used by "
                f"{len(self.referencing_ids)} existing transactions"
            )
        )


class ImportFormatError(LedgerError):
    """An import payload is malformed; nothing was applied."""

    def __init__(self, problems: Sequence[str]):
        self.problems = list(problems) or ["Invalid data format"]
        super().__init__("Invalid data format: " + "; ".join(self.problems[:5]))


class StorageError(LedgerError):
    """Base exception for storage operations."""
    pass
