"""
Validation rule implementations.

Provides validators for required fields, type checking, length ceilings,
regex patterns, date format and calendar checks, and enumerations.
"""

from .base_validator import BaseValidator, ValidationError
from .calendar_date_validator import CalendarDateValidator
from .enum_validator import EnumValidator
from .max_length_validator import MaxLengthValidator
from .regex_validator import DateFormatValidator, RegexValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "TypeValidator",
    "MaxLengthValidator",
    "RegexValidator",
    "DateFormatValidator",
    "CalendarDateValidator",
    "EnumValidator",
]
