"""
EnumValidator - validates that a value is one of a fixed set of literals.
"""

from typing import Any

from .base_validator import BaseValidator


class EnumValidator(BaseValidator):
    """
    Validates membership in an allowed set. Comparison is exact and
    case-sensitive: "active" is not "Active".

    Parameters:
    - allowed: List of accepted values, in display order
    """

    rule_type = "enum"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        allowed = self.parameters.get("allowed")
        if not allowed:
            raise ValueError("EnumValidator requires a non-empty 'allowed' parameter")
        self.allowed = tuple(allowed)

    def check(self, value: Any, record: dict[str, Any]) -> None:
        if value not in self.allowed:
            raise self.fail(
                f"{self.label} must be one of: {', '.join(self.allowed)} (got: {value})"
            )
