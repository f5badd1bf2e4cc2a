"""
RequiredFieldValidator - reports a soldier field that is missing or blank.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Fails when the field is absent from the candidate, None, or (unless
    allow_empty_string is set) blank text.

    An XML element that is present but empty parses to None and a blank
    spreadsheet cell maps to "", so both report "Missing required field"
    exactly like a field that was never there.
    """

    rule_type = "required_field"
    checks_absent = True

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_empty_string = self.parameters.get("allow_empty_string", False)

    def is_blank(self, value: Any) -> bool:
        return isinstance(value, str) and not value.strip() and not self.allow_empty_string

    def check(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record or value is None or self.is_blank(value):
            raise self.fail(f"Missing required field: {self.label}")
