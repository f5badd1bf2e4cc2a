"""
Rule engine for applying field rules to soldier candidates.

Rules are compiled into validators once and grouped by field. Every field
of a candidate is checked, so all failing fields are reported; within one
field the rules run in configuration order and stop at the first error,
so a missing field yields one presence failure and nothing on top of it.
"""

from collections import Counter
from collections.abc import Iterable
from typing import Any, NamedTuple

from army_records.core.models import Violation
from army_records.core.validators import (
    BaseValidator,
    CalendarDateValidator,
    DateFormatValidator,
    EnumValidator,
    MaxLengthValidator,
    RegexValidator,
    RequiredFieldValidator,
    TypeValidator,
    ValidationError,
)

from .rule_config import FieldRule

VALIDATOR_REGISTRY: dict[str, type[BaseValidator]] = {
    cls.rule_type: cls
    for cls in (
        RequiredFieldValidator,
        TypeValidator,
        MaxLengthValidator,
        RegexValidator,
        DateFormatValidator,
        CalendarDateValidator,
        EnumValidator,
    )
}


class CompiledRule(NamedTuple):
    name: str
    severity: str
    validator: BaseValidator


def compile_rule(rule: FieldRule) -> CompiledRule:
    """
    Instantiate the validator for one rule.

    Raises:
        ValueError: If the rule type is unknown or its parameters are invalid
    """
    validator_class = VALIDATOR_REGISTRY.get(rule.rule_type)
    if validator_class is None:
        raise ValueError(f"Unknown rule type: {rule.rule_type}")

    try:
        validator = validator_class(rule.field_name, rule.parameters)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Failed to create validator for rule '{rule.rule_name}': {e}") from e

    return CompiledRule(rule.rule_name, rule.severity, validator)


class RuleEngine:
    """
    Applies compiled field rules to candidates.

    Args:
        rules: FieldRule models, or mappings with the same keys
    """

    def __init__(self, rules: Iterable[FieldRule | dict[str, Any]]):
        self.rules = [r if isinstance(r, FieldRule) else FieldRule.model_validate(r) for r in rules]

        # Fields keep the order of their first rule
        self.field_rules: dict[str, list[CompiledRule]] = {}
        for rule in self.rules:
            if rule.enabled:
                self.field_rules.setdefault(rule.field_name, []).append(compile_rule(rule))

    def validate_candidate(
        self,
        candidate: dict[str, Any],
        ordinal: int
    ) -> tuple[list[Violation], list[Violation]]:
        """
        Validate one candidate.

        Args:
            candidate: Candidate dictionary keyed by field name
            ordinal: 1-based position of the candidate in its batch

        Returns:
            Tuple of (violations, warnings)
        """
        violations: list[Violation] = []
        warnings: list[Violation] = []

        for field_name, compiled in self.field_rules.items():
            value = candidate.get(field_name)

            for rule in compiled:
                try:
                    rule.validator.validate(value, candidate)
                except ValidationError as e:
                    violation = Violation(
                        ordinal=ordinal,
                        field=field_name,
                        rule=e.rule_name,
                        detail=e.message,
                    )
                    if rule.severity == "error":
                        violations.append(violation)
                        break
                    warnings.append(violation)

        return violations, warnings

    def get_rule_summary(self) -> dict[str, Any]:
        """Counts of active rules, in total and by type and severity."""
        active = [rule for compiled in self.field_rules.values() for rule in compiled]
        return {
            "total_rules": len(active),
            "rules_by_type": dict(Counter(rule.validator.rule_type for rule in active)),
            "rules_by_severity": dict(Counter(rule.severity for rule in active)),
        }
