"""
Pattern rules: RegexValidator and the service-date DateFormatValidator.
"""

import re
from typing import Any

from .base_validator import BaseValidator


class RegexValidator(BaseValidator):
    """
    Validates that the whole field value matches a regular expression.

    Parameters:
    - pattern: Regular expression (string or compiled)
    - flags: Optional re flags for a string pattern
    - message: Optional failure message replacing the default
    """

    rule_type = "regex"
    default_pattern: str | None = None

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern", self.default_pattern)
        if not pattern:
            raise ValueError(f"{self.__class__.__name__} requires 'pattern' parameter")

        if isinstance(pattern, re.Pattern):
            self.pattern = pattern
        elif isinstance(pattern, str):
            try:
                self.pattern = re.compile(pattern, self.parameters.get("flags", 0))
            except re.error as e:
                raise ValueError(f"Invalid regex pattern: {e}") from e
        else:
            raise ValueError(f"Pattern must be string or compiled Pattern, got {type(pattern)}")

        self.message = self.parameters.get("message")

    def check(self, value: Any, record: dict[str, Any]) -> None:
        text = value if isinstance(value, str) else str(value)
        # fullmatch so a trailing newline cannot satisfy "$"
        if not self.pattern.fullmatch(text):
            raise self.fail(self.message or self.default_message(text))

    def default_message(self, value: str) -> str:
        return f"{self.label} value '{value}' does not match pattern '{self.pattern.pattern}'"


class DateFormatValidator(RegexValidator):
    """
    Validates the literal YYYY-MM-DD shape of a service date.

    Only the shape is checked; CalendarDateValidator checks that the
    date exists.
    """

    rule_type = "date_format"
    default_pattern = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"

    def default_message(self, value: str) -> str:
        return f"{self.label} must be in YYYY-MM-DD format"
