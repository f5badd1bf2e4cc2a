"""
Field rule interface.

A validator checks one field of a soldier candidate. Absent values belong
to the required_field rule, so every other rule only ever sees a value
that is present.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class ValidationError(Exception):
    """Raised when a field rule fails."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    Base class for field rules.

    Subclasses set rule_type and implement check(). validate() skips an
    absent (None) value unless checks_absent is set.

    Parameters shared by every rule:
    - label: Field name used in failure messages (defaults to the field key)
    """

    rule_type: ClassVar[str]
    checks_absent: ClassVar[bool] = False

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = dict(parameters or {})
        self.label = self.parameters.get("label", field_name)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Apply the rule to one field value.

        Args:
            value: The field value, None when the field is absent
            record: The whole candidate, for rules that need context

        Raises:
            ValidationError: If the value breaks the rule
        """
        if value is None and not self.checks_absent:
            return
        self.check(value, record)

    @abstractmethod
    def check(self, value: Any, record: dict[str, Any]) -> None:
        ...

    def fail(self, message: str) -> ValidationError:
        """Build a ValidationError for this rule."""
        return ValidationError(
            rule_name=self.rule_type,
            field_name=self.field_name,
            message=message
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, label={self.label!r})"
