"""
Validation Result Models

Produced by finance_ledger.validation and carried inside
ValidationError / ImportFormatError so callers can show
every problem at once instead of the first one.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from finance_ledger.models.entities import utc_now


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_reference')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Entity the issue was found on, when checking a whole ledger"
    )

    @property
    def is_error(self) -> bool:
        return self.severity == "error"


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (values of the input alone)
    Stage 2: Referential validation (against the current ledger)
    """

    entity_type: str = Field(
        ...,
        description="What was validated ('account', 'category', 'transaction')"
    )
    validated_at: datetime = Field(
        default_factory=utc_now
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    references_valid: bool = Field(
        ...,
        description="Did referential validation pass? False when it was skipped."
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.is_error for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.is_error)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]
