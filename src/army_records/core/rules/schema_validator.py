"""
Batch-level schema validation of parsed soldier submissions.
"""

from pathlib import Path
from typing import Any

from army_records.core.models import ValidationVerdict, Violation
from army_records.core.schema.fields import RECORD_TAG, ROOT_TAG
from army_records.core.schema.mapping import tree_to_candidates

from .rule_config import FieldRule, RuleConfigLoader, default_soldier_rules
from .rule_engine import RuleEngine


class SchemaValidator:
    """
    Validates a tree batch against the soldier schema.

    No I/O: the input is an already-parsed tree and the output is a
    ValidationVerdict carrying every candidate alongside the violations,
    so rejected batches can be rendered for correction.
    """

    def __init__(self, rules: list[FieldRule | dict[str, Any]] | None = None):
        """
        Args:
            rules: Rule configurations; the fixed soldier schema when omitted
        """
        self.rule_engine = RuleEngine(rules if rules is not None else default_soldier_rules())

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "SchemaValidator":
        """Build a validator from a YAML rule file."""
        return cls(RuleConfigLoader(config_path).load_rules())

    def validate(self, tree: dict[str, Any]) -> ValidationVerdict:
        """
        Validate a tree batch.

        Args:
            tree: Parsed batch, {"army_records": {"soldier": ...}}

        Returns:
            ValidationVerdict with is_valid, ordered violations and all candidates
        """
        candidates = tree_to_candidates(tree)

        if candidates is None:
            return ValidationVerdict.failed(Violation(
                rule="root_element",
                detail=f'Root element must be "{ROOT_TAG}"',
            ))

        if not candidates:
            return ValidationVerdict.failed(Violation(
                rule="at_least_one_record",
                detail=f"At least one {RECORD_TAG} record is required",
            ))

        violations: list[Violation] = []
        warnings: list[Violation] = []
        for ordinal, candidate in enumerate(candidates, start=1):
            errors, notes = self.rule_engine.validate_candidate(candidate, ordinal)
            violations.extend(errors)
            warnings.extend(notes)

        return ValidationVerdict(
            soldiers=candidates,
            is_valid=not violations,
            violations=violations,
            warnings=warnings,
        )
