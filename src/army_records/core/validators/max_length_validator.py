"""
MaxLengthValidator - keeps text fields within their column width.
"""

from typing import Any

from .base_validator import BaseValidator


class MaxLengthValidator(BaseValidator):
    """
    Validates that a string field is no longer than a maximum.

    Parameters:
    - max_length: Maximum number of characters (inclusive)
    """

    rule_type = "max_length"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.max_length = self.parameters.get("max_length")
        if isinstance(self.max_length, bool) or not isinstance(self.max_length, int) or self.max_length <= 0:
            raise ValueError("MaxLengthValidator requires a positive integer 'max_length' parameter")

    def check(self, value: Any, record: dict[str, Any]) -> None:
        # Non-strings are reported by the type check
        if isinstance(value, str) and len(value) > self.max_length:
            raise self.fail(
                f"{self.label} length exceeds maximum ({self.max_length} characters)"
            )
