"""
CalendarDateValidator - validates that a YYYY-MM-DD value is a real date.
"""

from datetime import date
from typing import Any

from .base_validator import BaseValidator


class CalendarDateValidator(BaseValidator):
    """
    Validates that a date string names an existing calendar day.

    "2021-02-30" has the right shape but fails here. Values that do not
    have the YYYY-MM-DD shape also fail, so the rule should follow a
    DateFormatValidator on the same field.
    """

    rule_type = "calendar_date"

    def check(self, value: Any, record: dict[str, Any]) -> None:
        try:
            date.fromisoformat(str(value))
        except ValueError:
            raise self.fail(f"Invalid date: {value}") from None
