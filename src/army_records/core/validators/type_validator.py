"""
TypeValidator - checks the Python type a parsed field value arrived as.
"""

from typing import Any

from .base_validator import BaseValidator


class TypeValidator(BaseValidator):
    """
    Parsed XML leaves are text. A soldier field written as a nested element
    arrives as a mapping, and a repeated element as a list; neither passes
    a "string" check.

    Parameters:
    - expected_type: "string" (default), "mapping" or "list"
    """

    rule_type = "type_check"

    TYPES = {
        "string": (str, "a string"),
        "str": (str, "a string"),
        "mapping": (dict, "a mapping"),
        "dict": (dict, "a mapping"),
        "list": (list, "a list"),
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected = str(self.parameters.get("expected_type", "string")).lower()
        if expected not in self.TYPES:
            raise ValueError(f"Unsupported type: {self.parameters.get('expected_type')}")
        self.expected_type, self.type_name = self.TYPES[expected]

    def check(self, value: Any, record: dict[str, Any]) -> None:
        if not isinstance(value, self.expected_type):
            raise self.fail(f"{self.label} must be {self.type_name}")
