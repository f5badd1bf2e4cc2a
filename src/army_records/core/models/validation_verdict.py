"""
ValidationVerdict model representing the outcome of validating one batch (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .violation import Violation, render_violations


class ValidationVerdict(BaseModel):
    """
    Outcome of validating a batch of soldier candidates.

    Note: ValidationVerdict is ephemeral, not persisted to database
    (the ledger stores its rendered violations).

    Attributes:
        soldiers: Every extracted candidate, valid or not, in input order
        is_valid: True iff violations is empty
        violations: Error-severity failures in the order they were found
        warnings: Warning-severity failures (never fail the batch)
    """

    soldiers: list[dict[str, Any]] = Field(default_factory=list)
    is_valid: bool
    violations: list[Violation] = Field(default_factory=list)
    warnings: list[Violation] = Field(default_factory=list)

    @field_validator('violations')
    @classmethod
    def check_valid_consistency(cls, v, info):
        """Validate that is_valid=True implies violations is empty."""
        if info.data.get('is_valid') and len(v) > 0:
            raise ValueError("is_valid=True but violations is not empty")
        return v

    @classmethod
    def failed(cls, violation: Violation) -> "ValidationVerdict":
        """Verdict for a batch that failed before any candidate was extracted."""
        return cls(is_valid=False, violations=[violation], soldiers=[])

    def violations_for(self, ordinal: int) -> list[Violation]:
        """
        Violations attributed to the candidate at a 1-based position.

        Batch-level violations are attributed to the first candidate.
        """
        return [
            v for v in self.violations
            if v.ordinal == ordinal or (v.ordinal is None and ordinal == 1)
        ]

    @property
    def rendered(self) -> list[str]:
        return render_violations(self.violations)

    @property
    def invalid_ordinals(self) -> set[int]:
        return {v.ordinal for v in self.violations if v.ordinal is not None}
